"""
Users Repository - Database access layer for people management.
"""

import logging
from datetime import datetime
from typing import List, Optional, Dict
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from auth import safe_generate_password_hash
from database.models import User
from database.seed import DEFAULT_NOTIFICATION_PREFS
from validators import ValidationError, sanitize_string

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ['name', 'email', 'role', 'active', 'notification_prefs',
                    'force_password_change', 'timezone']


class UsersRepository:
    """Repository for user database operations."""

    def __init__(self, session: Session, default_role: str = 'staff',
                 default_timezone: str = 'America/New_York'):
        self.session = session
        self.default_role = default_role
        self.default_timezone = default_timezone

    def list_users(self, search: str = None, active_only: bool = False) -> List[Dict]:
        """List users, oldest first, optionally filtered by a search term."""
        query = self.session.query(User)
        if active_only:
            query = query.filter(User.active.is_(True))
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                User.name.ilike(pattern),
                User.email.ilike(pattern),
                User.role.ilike(pattern)
            ))
        users = query.order_by(User.created_at.asc()).all()
        return [u.to_dict() for u in users]

    def get_user(self, user_id: str) -> Optional[Dict]:
        """Get a user by ID."""
        user = self.session.query(User).filter(User.id == user_id).first()
        return user.to_dict() if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, case-insensitively (returns model for auth)."""
        return self.session.query(User).filter(
            func.lower(User.email) == email.strip().lower()
        ).first()

    def create_user(self, data: Dict) -> Dict:
        """
        Create a new user.

        Raises:
            ValidationError: If the email is already taken
        """
        email = sanitize_string(data['email']).lower()
        if self.get_user_by_email(email):
            raise ValidationError("A user with this email already exists", 'email')

        prefs = dict(DEFAULT_NOTIFICATION_PREFS)
        prefs.update(data.get('notification_prefs') or {})

        password = data.get('password')
        user = User(
            name=sanitize_string(data['name']),
            email=email,
            password_hash=safe_generate_password_hash(password) if password else None,
            role=data.get('role') or self.default_role,
            active=data.get('active', True),
            notification_prefs=prefs,
            force_password_change=data.get('force_password_change', False),
            timezone=data.get('timezone') or self.default_timezone
        )
        self.session.add(user)
        self.session.flush()
        logger.info(f"Created user: {user.id}")
        return user.to_dict()

    def update_user(self, user_id: str, data: Dict) -> Optional[Dict]:
        """
        Update a user.

        Raises:
            ValidationError: If the new email belongs to another user
        """
        user = self.session.query(User).filter(User.id == user_id).first()
        if not user:
            return None

        if 'email' in data:
            email = sanitize_string(data['email']).lower()
            existing = self.get_user_by_email(email)
            if existing and existing.id != user_id:
                raise ValidationError("A user with this email already exists", 'email')
            data = dict(data, email=email)

        for key in UPDATABLE_FIELDS:
            if key in data:
                setattr(user, key, data[key])

        if data.get('password'):
            user.password_hash = safe_generate_password_hash(data['password'])

        user.updated_at = datetime.utcnow()
        self.session.flush()
        logger.info(f"Updated user: {user_id}")
        return user.to_dict()

    def toggle_active(self, user_id: str) -> Optional[Dict]:
        """Flip a user's active flag."""
        user = self.session.query(User).filter(User.id == user_id).first()
        if not user:
            return None
        user.active = not user.active
        user.updated_at = datetime.utcnow()
        self.session.flush()
        logger.info(f"User {user_id} {'activated' if user.active else 'deactivated'}")
        return user.to_dict()
