"""
Tests for input validation utilities
"""
import pytest
from datetime import date, datetime
from validators import (
    ValidationError,
    validate_required_fields,
    validate_email,
    validate_string_length,
    validate_id_list,
    sanitize_string,
    clean_string_list,
    parse_date,
    parse_datetime,
    validate_item_request,
    validate_task_request,
    validate_user_request,
    validate_comment_request,
    validate_tag_request
)


@pytest.mark.unit
class TestRequiredFields:
    """Tests for required fields validation"""

    def test_validate_all_fields_present(self):
        """Test validation passes when all fields present"""
        data = {'name': 'Ada', 'email': 'ada@example.com'}
        is_valid, error = validate_required_fields(data, ['name', 'email'])
        assert is_valid is True
        assert error is None

    def test_validate_missing_field(self):
        """Test validation fails when field missing"""
        is_valid, error = validate_required_fields({'name': 'Ada'}, ['name', 'email'])
        assert is_valid is False
        assert 'email' in error

    def test_validate_blank_field(self):
        """Test validation fails when field is whitespace"""
        is_valid, _ = validate_required_fields({'name': '   '}, ['name'])
        assert is_valid is False

    def test_validate_none_field(self):
        """Test validation fails when field is None"""
        is_valid, _ = validate_required_fields({'name': None}, ['name'])
        assert is_valid is False


@pytest.mark.unit
class TestEmailValidation:
    """Tests for email validation"""

    def test_valid_email(self):
        assert validate_email('counsel@firm.com') == (True, None)

    def test_invalid_email(self):
        is_valid, error = validate_email('not-an-email')
        assert is_valid is False
        assert error == 'Invalid email format'

    def test_empty_email(self):
        is_valid, _ = validate_email('')
        assert is_valid is False


@pytest.mark.unit
class TestBasicValidators:
    """Tests for length and id list validation"""

    def test_string_length_bounds(self):
        assert validate_string_length('abc', min_length=1, max_length=3)[0] is True
        assert validate_string_length('', min_length=1)[0] is False
        assert validate_string_length('abcd', max_length=3)[0] is False

    def test_id_list_must_be_list_of_strings(self):
        assert validate_id_list(['a', 'b'], 'tag_ids') == (True, None)
        assert validate_id_list('a', 'tag_ids')[0] is False
        assert validate_id_list(['a', ''], 'tag_ids')[0] is False


@pytest.mark.unit
class TestSanitization:
    """Tests for string cleanup"""

    def test_sanitize_strips_null_bytes_and_whitespace(self):
        assert sanitize_string('  Smith\x00 v. Jones ') == 'Smith v. Jones'

    def test_sanitize_truncates(self):
        assert sanitize_string('abcdef', max_length=3) == 'abc'

    def test_clean_string_list_drops_blanks(self):
        assert clean_string_list(['Alice', '', '  ', 'Bob ', None]) == ['Alice', 'Bob']
        assert clean_string_list(None) == []


@pytest.mark.unit
class TestDateParsing:
    """Tests for date payload parsing"""

    def test_parse_date_iso(self):
        assert parse_date('2025-03-14') == date(2025, 3, 14)

    def test_parse_date_from_timestamp(self):
        assert parse_date('2025-03-14T15:30:00Z') == date(2025, 3, 14)

    def test_parse_date_empty(self):
        assert parse_date('') is None
        assert parse_date(None) is None

    def test_parse_date_invalid_raises(self):
        with pytest.raises(ValidationError):
            parse_date('next tuesday-ish')

    def test_parse_datetime_drops_timezone(self):
        parsed = parse_datetime('2025-03-14T15:30:00+02:00')
        assert parsed == datetime(2025, 3, 14, 15, 30)
        assert parsed.tzinfo is None

    def test_parse_datetime_bare_date_is_midnight(self):
        assert parse_datetime('2025-03-14') == datetime(2025, 3, 14, 0, 0)


@pytest.mark.unit
class TestItemRequestValidation:
    """Tests for item payload validation"""

    def test_valid_item(self):
        data = {'section_id': 'legal', 'title': 'Smith v. Jones', 'priority': 'high'}
        assert validate_item_request(data) == (True, None)

    def test_missing_title(self):
        is_valid, error = validate_item_request({'section_id': 'legal'})
        assert is_valid is False
        assert 'title' in error

    def test_unknown_section(self):
        is_valid, error = validate_item_request({'section_id': 'sports', 'title': 'x'})
        assert is_valid is False
        assert 'section_id' in error

    def test_invalid_priority(self):
        is_valid, error = validate_item_request({'section_id': 'legal', 'title': 'x', 'priority': 'asap'})
        assert is_valid is False
        assert 'priority' in error

    def test_partial_update_skips_required(self):
        assert validate_item_request({'status': 'closed'}, partial=True) == (True, None)

    def test_assignee_ids_must_be_list(self):
        is_valid, _ = validate_item_request({'assignee_ids': 'u1'}, partial=True)
        assert is_valid is False


@pytest.mark.unit
class TestTaskRequestValidation:
    """Tests for task payload validation"""

    def test_task_requires_item(self):
        is_valid, error = validate_task_request({'title': 'Draft motion'})
        assert is_valid is False
        assert error == 'Please select a project first'

    def test_valid_task(self):
        assert validate_task_request({'item_id': 'i1', 'title': 'Draft motion'}) == (True, None)

    def test_negative_hours_rejected(self):
        is_valid, error = validate_task_request({'item_id': 'i1', 'title': 't', 'estimate_hours': -1})
        assert is_valid is False
        assert 'negative' in error

    def test_non_numeric_hours_rejected(self):
        is_valid, _ = validate_task_request({'item_id': 'i1', 'title': 't', 'actual_hours': 'lots'})
        assert is_valid is False

    def test_task_order_must_be_integer(self):
        is_valid, _ = validate_task_request({'task_order': '2'}, partial=True)
        assert is_valid is False


@pytest.mark.unit
class TestOtherRequestValidation:
    """Tests for user, comment and tag payloads"""

    def test_user_requires_name_and_email(self):
        assert validate_user_request({'name': 'Ada'}) == (False, 'Name and Email are required.')

    def test_user_role_must_be_known(self):
        is_valid, _ = validate_user_request({'name': 'Ada', 'email': 'ada@example.com', 'role': 'owner'})
        assert is_valid is False

    def test_comment_requires_known_parent_type(self):
        is_valid, _ = validate_comment_request({'parent_type': 'stage', 'parent_id': 'x', 'body': 'hi'})
        assert is_valid is False

    def test_comment_blank_body(self):
        is_valid, _ = validate_comment_request({'parent_type': 'item', 'parent_id': 'x', 'body': '   '})
        assert is_valid is False

    def test_comment_body_must_be_text(self):
        assert validate_comment_request({'parent_type': 'item', 'parent_id': 'x', 'body': 5}) == (
            False, 'Comment body must be text'
        )

    def test_tag_requires_name(self):
        assert validate_tag_request({'name': ' '}) == (False, 'Tag name is required')
        assert validate_tag_request({'name': 7}) == (False, 'Tag name is required')

    def test_tag_color_must_be_hex(self):
        assert validate_tag_request({'name': 'Urgent', 'color': '#ff0000'}) == (True, None)
        assert validate_tag_request({'name': 'Urgent', 'color': 'red'})[0] is False
