"""
Input Validation & Sanitization Utilities
Provides validation for API request payloads and user input
"""
import re
from datetime import date, datetime
from typing import Dict, Any, List, Optional, Tuple
from dateutil import parser as date_parser
import logging

logger = logging.getLogger(__name__)

PRIORITIES = ('low', 'normal', 'high', 'urgent')
ROLES = ('admin', 'manager', 'staff', 'viewer')
SECTION_IDS = ('legal', 'deals', 'real-estate', 'others')
COMMENT_PARENT_TYPES = ('item', 'task')

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
HEX_COLOR_PATTERN = re.compile(r'^#[0-9a-fA-F]{6}$')


class ValidationError(Exception):
    """Custom exception for validation errors"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate that all required fields are present in the data

    Args:
        data: Dictionary of input data
        required_fields: List of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing_fields = [
        field for field in required_fields
        if field not in data or data[field] is None
        or (isinstance(data[field], str) and not data[field].strip())
    ]

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email must be a non-empty string"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    if len(email) > 254:  # RFC 5321
        return False, "Email address too long"

    return True, None


def validate_string_length(value: str, min_length: int = 0, max_length: int = 1000) -> Tuple[bool, Optional[str]]:
    """
    Validate string length is within acceptable range

    Args:
        value: String to validate
        min_length: Minimum allowed length
        max_length: Maximum allowed length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, "Value must be a string"

    if len(value) < min_length:
        return False, f"Value too short (minimum {min_length} characters)"

    if len(value) > max_length:
        return False, f"Value too long (maximum {max_length} characters)"

    return True, None


def validate_choice(value: Any, choices: Tuple[str, ...], field: str) -> Tuple[bool, Optional[str]]:
    """Validate that value is one of the allowed choices"""
    if value not in choices:
        return False, f"Invalid {field}: must be one of {', '.join(choices)}"
    return True, None


def validate_id_list(value: Any, field: str) -> Tuple[bool, Optional[str]]:
    """Validate a list of string identifiers (assignee_ids, tag_ids...)"""
    if not isinstance(value, list):
        return False, f"{field} must be an array"
    if not all(isinstance(v, str) and v for v in value):
        return False, f"{field} must contain only non-empty string ids"
    return True, None


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """
    Sanitize string input by removing null bytes and surrounding whitespace

    Args:
        value: String to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return str(value)

    sanitized = value.replace('\x00', '').strip()

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


def clean_string_list(values: Optional[List[Any]]) -> List[str]:
    """Drop blank entries from a list of free-text values (links, parties...)"""
    if not values:
        return []
    return [sanitize_string(v) for v in values if isinstance(v, str) and v.strip()]


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date value from a request payload.

    Raises:
        ValidationError: If a non-empty value cannot be parsed
    """
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.parse(value).date()
    except (ValueError, TypeError, OverflowError):
        raise ValidationError(f"Invalid date: {value}")


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp value from a request payload. Bare dates become midnight.

    Raises:
        ValidationError: If a non-empty value cannot be parsed
    """
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        # Stored naive, in the timezone the client sent
        return date_parser.parse(value).replace(tzinfo=None)
    except (ValueError, TypeError, OverflowError):
        raise ValidationError(f"Invalid date: {value}")


def _validate_common_record(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Checks shared by items and tasks"""
    if 'title' in data:
        is_valid, error = validate_string_length(data['title'] or '', min_length=1, max_length=500)
        if not is_valid:
            return False, f"Invalid title: {error}"

    if 'priority' in data and data['priority'] is not None:
        is_valid, error = validate_choice(data['priority'], PRIORITIES, 'priority')
        if not is_valid:
            return False, error

    for field in ('assignee_ids', 'tag_ids'):
        if field in data and data[field] is not None:
            is_valid, error = validate_id_list(data[field], field)
            if not is_valid:
                return False, error

    for field in ('external_links', 'attachments'):
        if field in data and data[field] is not None and not isinstance(data[field], list):
            return False, f"{field} must be an array"

    return True, None


def validate_item_request(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Optional[str]]:
    """
    Validate create/update item request data

    Args:
        data: Request data dictionary
        partial: True for updates, where only present fields are checked

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    if not partial:
        is_valid, error = validate_required_fields(data, ['section_id', 'title'])
        if not is_valid:
            return False, error

    if 'section_id' in data:
        is_valid, error = validate_choice(data['section_id'], SECTION_IDS, 'section_id')
        if not is_valid:
            return False, error

    if 'custom_fields' in data and data['custom_fields'] is not None \
            and not isinstance(data['custom_fields'], dict):
        return False, "custom_fields must be an object"

    return _validate_common_record(data)


def validate_task_request(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Optional[str]]:
    """
    Validate create/update task request data

    Args:
        data: Request data dictionary
        partial: True for updates, where only present fields are checked

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    if not partial:
        if not data.get('item_id'):
            return False, "Please select a project first"
        is_valid, error = validate_required_fields(data, ['title'])
        if not is_valid:
            return False, error

    for field in ('estimate_hours', 'actual_hours'):
        value = data.get(field)
        if value is not None and value != '':
            try:
                if float(value) < 0:
                    return False, f"{field} cannot be negative"
            except (TypeError, ValueError):
                return False, f"{field} must be a number"

    if 'task_order' in data and data['task_order'] is not None \
            and not isinstance(data['task_order'], int):
        return False, "task_order must be an integer"

    return _validate_common_record(data)


def validate_user_request(data: Dict[str, Any], partial: bool = False) -> Tuple[bool, Optional[str]]:
    """Validate create/update user request data"""
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    if not partial:
        is_valid, _ = validate_required_fields(data, ['name', 'email'])
        if not is_valid:
            return False, "Name and Email are required."

    if 'email' in data:
        is_valid, error = validate_email(data['email'])
        if not is_valid:
            return False, error

    if 'role' in data:
        is_valid, error = validate_choice(data['role'], ROLES, 'role')
        if not is_valid:
            return False, error

    if 'active' in data and not isinstance(data['active'], bool):
        return False, "active must be a boolean"

    return True, None


def validate_comment_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate create comment request data"""
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    is_valid, error = validate_required_fields(data, ['parent_type', 'parent_id', 'body'])
    if not is_valid:
        return False, error

    is_valid, error = validate_choice(data['parent_type'], COMMENT_PARENT_TYPES, 'parent_type')
    if not is_valid:
        return False, error

    if not isinstance(data['body'], str):
        return False, "Comment body must be text"

    return validate_string_length(data['body'].strip(), min_length=1, max_length=10000)


def validate_tag_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """Validate create tag request data"""
    name = data.get('name') if isinstance(data, dict) else None
    if not isinstance(name, str) or not name.strip():
        return False, "Tag name is required"

    color = data.get('color')
    if color and not (isinstance(color, str) and HEX_COLOR_PATTERN.match(color)):
        return False, "Tag color must be a hex color like #1f2937"

    return True, None
