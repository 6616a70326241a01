"""
Settings Repository - Admin-editable option lists.

Each list is one SystemSetting row keyed by its category name. Lists that
were never saved fall back to the built-in defaults.
"""

import copy
import logging
from typing import Dict, List
from sqlalchemy.orm import Session

from database.models import SystemSetting
from validators import ValidationError, sanitize_string

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_CONFIG = {
    'legalDepartments': ['DOJ', 'SEC', 'Bankruptcy', 'State-level', 'Federal Court',
                         'Appeals Court', 'Tax Court', 'District Court'],
    'dealBusinessNatures': ['Acquisition', 'Joint Venture', 'Investment', 'Partnership',
                            'Licensing', 'Merger'],
    'realEstateBusinessNatures': ['Land Sales', 'Development', 'Multifamily',
                                  'Single Family', 'Commercial'],
    'cityApprovals': ['HUD', 'MUD', 'Planning Commission', 'City Council', 'Building Permits',
                      'Zoning Board', 'Environmental Review', 'Fire Department'],
}

# Singular labels for error messages
CATEGORY_LABELS = {
    'legalDepartments': 'Department',
    'dealBusinessNatures': 'Business nature',
    'realEstateBusinessNatures': 'Business nature',
    'cityApprovals': 'City approval',
}


class SettingsRepository:
    """Repository for system configuration lists."""

    def __init__(self, session: Session):
        self.session = session

    def _check_category(self, category: str):
        if category not in DEFAULT_SYSTEM_CONFIG:
            raise ValidationError(f"Unknown settings category: {category}", 'category')

    def _get_row(self, category: str):
        return self.session.query(SystemSetting).filter(SystemSetting.key == category).first()

    def get_options(self, category: str) -> List[str]:
        self._check_category(category)
        row = self._get_row(category)
        if row is None or row.value is None:
            return list(DEFAULT_SYSTEM_CONFIG[category])
        return list(row.value)

    def get_system_config(self) -> Dict[str, List[str]]:
        """All option lists, defaults filled in for unsaved ones."""
        config = copy.deepcopy(DEFAULT_SYSTEM_CONFIG)
        for row in self.session.query(SystemSetting).all():
            if row.key in config and row.value is not None:
                config[row.key] = list(row.value)
        return config

    def _save(self, category: str, options: List[str]):
        row = self._get_row(category)
        if row is None:
            row = SystemSetting(key=category)
            self.session.add(row)
        row.value = list(options)
        self.session.flush()

    def set_system_config(self, config: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """
        Replace the given lists wholesale.

        Raises:
            ValidationError: For unknown categories or non-list values
        """
        if not isinstance(config, dict):
            raise ValidationError("System config must be an object")

        for category, options in config.items():
            self._check_category(category)
            if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
                raise ValidationError(f"{category} must be a list of strings", category)

            cleaned = []
            for option in (sanitize_string(o, max_length=255) for o in options):
                if option and option.lower() not in {c.lower() for c in cleaned}:
                    cleaned.append(option)
            self._save(category, cleaned)

        logger.info(f"System config updated: {sorted(config.keys())}")
        return self.get_system_config()

    def add_option(self, category: str, value: str) -> List[str]:
        """
        Append one option to a list.

        Raises:
            ValidationError: For blank values or case-insensitive duplicates
        """
        options = self.get_options(category)
        label = CATEGORY_LABELS[category]
        option = sanitize_string(value or '', max_length=255)

        if not option:
            raise ValidationError(f"{label} name is required", 'value')
        if option.lower() in (o.lower() for o in options):
            raise ValidationError(f"{label} already exists", 'value')

        options.append(option)
        self._save(category, options)
        logger.info(f"Added '{option}' to {category}")
        return options

    def remove_option(self, category: str, value: str) -> List[str]:
        """Remove an option (exact match); removing a missing one is a no-op."""
        options = self.get_options(category)
        remaining = [o for o in options if o != value]
        if len(remaining) != len(options):
            self._save(category, remaining)
            logger.info(f"Removed '{value}' from {category}")
        return remaining
