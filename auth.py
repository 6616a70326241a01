"""
User Authentication and Authorization Module
Handles user login, session management, and role-based permissions
Uses EMAIL + PASSWORD authentication against the users table

PERMISSION MATRIX (fixed, per role):
- create item / task: admin, manager, staff
- edit item / task: admin, manager; staff only as creator or assignee
- delete item / task: admin, manager
- admin panel / user management: admin
"""
from datetime import datetime
from functools import wraps
from flask import session, jsonify
from sqlalchemy import func
from werkzeug.security import generate_password_hash, check_password_hash
import logging

from database.connection import get_db_session
from database.models import User

logger = logging.getLogger(__name__)


# Use pbkdf2 method which is compatible with older Python/OpenSSL versions
def safe_generate_password_hash(password):
    """Generate password hash using pbkdf2 for compatibility"""
    return generate_password_hash(password, method='pbkdf2:sha256')


def safe_check_password_hash(pwhash, password):
    """Check password hash, treating a missing hash as a mismatch"""
    if not pwhash:
        return False
    return check_password_hash(pwhash, password)


EDITOR_ROLES = ('admin', 'manager')
CREATOR_ROLES = ('admin', 'manager', 'staff')


# ============================================================================
# AUTHENTICATION
# ============================================================================

def authenticate_user(email, password):
    """
    Authenticate user with email and password.

    Returns:
        Tuple of (user_dict, error_message)
    """
    with get_db_session() as db:
        user = db.query(User).filter(
            func.lower(User.email) == (email or '').strip().lower()
        ).first()

        if not user or not safe_check_password_hash(user.password_hash, password or ''):
            return None, "Invalid email or password"

        if not user.active:
            return None, "Account is deactivated"

        user.last_login = datetime.utcnow()
        db.flush()
        user_data = user.to_dict()

    logger.info(f"User authenticated: {user_data['email']}")
    return user_data, None


def update_password(user_id, new_password):
    """Store a new password hash and clear the forced-change flag"""
    with get_db_session() as db:
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            return None, "User not found"
        user.password_hash = safe_generate_password_hash(new_password)
        user.force_password_change = False
        db.flush()
        logger.info(f"Password updated for user: {user.email}")
        return user.to_dict(), None


def login_user(user):
    """Set user session"""
    session['user_id'] = user['id']
    session['user_role'] = user['role']
    session.permanent = True


def logout_user():
    """Clear user session"""
    session.clear()


def get_current_user():
    """Get currently logged in user, reloaded from the database"""
    user_id = session.get('user_id')
    if not user_id:
        return None

    with get_db_session() as db:
        user = db.query(User).filter_by(id=user_id).first()
        if not user or not user.active:
            return None
        return user.to_dict()


def get_current_user_id():
    """Get the id of the logged in user without hitting the database"""
    return session.get('user_id')


def is_authenticated():
    """Check if user is logged in"""
    return 'user_id' in session


# ============================================================================
# PERMISSION MATRIX
# ============================================================================

def _is_creator_or_assignee(user, record):
    if not record:
        return False
    if record.get('created_by') == user['id']:
        return True
    assignee_ids = record.get('assignee_ids')
    if assignee_ids is None:
        assignee_ids = [a.get('id') for a in record.get('assignees') or []]
    return user['id'] in assignee_ids


def can_create_item(user, section_id=None):
    if not user:
        return False
    return user['role'] in CREATOR_ROLES


def can_edit_item(user, item):
    if not user:
        return False
    if user['role'] in EDITOR_ROLES:
        return True
    if user['role'] == 'staff':
        return _is_creator_or_assignee(user, item)
    return False


def can_delete_item(user, item=None):
    if not user:
        return False
    return user['role'] in EDITOR_ROLES


def can_create_task(user, item_id=None):
    if not user:
        return False
    return user['role'] in CREATOR_ROLES


def can_edit_task(user, task):
    if not user:
        return False
    if user['role'] in EDITOR_ROLES:
        return True
    if user['role'] == 'staff':
        return _is_creator_or_assignee(user, task)
    return False


def can_delete_task(user, task=None):
    if not user:
        return False
    return user['role'] in EDITOR_ROLES


def can_access_admin(user):
    if not user:
        return False
    return user['role'] == 'admin'


def can_manage_users(user):
    if not user:
        return False
    return user['role'] == 'admin'


def permissions_for(user):
    """Record-independent permissions, as exposed by /api/auth/me"""
    return {
        'can_create_item': can_create_item(user),
        'can_create_task': can_create_task(user),
        'can_delete_item': can_delete_item(user),
        'can_delete_task': can_delete_task(user),
        'can_access_admin': can_access_admin(user),
        'can_manage_users': can_manage_users(user)
    }


# ============================================================================
# ROUTE DECORATORS
# ============================================================================

def login_required(f):
    """Decorator to require login for a route"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_authenticated() or get_current_user() is None:
            return jsonify({'success': False, 'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def permission_required(check):
    """
    Decorator to require a record-independent permission, e.g.
    @permission_required(can_create_item)
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user() if is_authenticated() else None
            if user is None:
                return jsonify({'success': False, 'error': 'Authentication required'}), 401
            if not check(user):
                return jsonify({'success': False, 'error': 'Permission denied'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Decorator to require admin permission"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = get_current_user() if is_authenticated() else None
        if user is None:
            return jsonify({'success': False, 'error': 'Authentication required'}), 401

        if not can_access_admin(user):
            return jsonify({'success': False, 'error': 'Admin access required'}), 403

        return f(*args, **kwargs)
    return decorated_function
