"""
Users Routes Blueprint

People directory and admin user management:
- /api/users: List (with search) / create
- /api/users/<user_id>: Get / update
- /api/users/<user_id>/toggle-active: Activate / deactivate
"""

from flask import Blueprint, request, jsonify, current_app
import logging

from app.utils import (
    get_json_body, login_required_wrapper, admin_required_wrapper, not_found, bad_request
)
from database.connection import get_db_session
from services.users_repository import UsersRepository
from validators import ValidationError, validate_user_request

logger = logging.getLogger(__name__)

# Create blueprint
users_bp = Blueprint('users_bp', __name__)


def _repo(session):
    return UsersRepository(
        session,
        default_role=current_app.config.get('DEFAULT_USER_ROLE', 'staff'),
        default_timezone=current_app.config.get('DEFAULT_TIMEZONE', 'America/New_York')
    )


@users_bp.route('/api/users', methods=['GET'])
@login_required_wrapper
def list_users():
    """List users, optionally filtered by ?search= over name, email and role"""
    try:
        with get_db_session() as session:
            users = _repo(session).list_users(
                search=request.args.get('search'),
                active_only=request.args.get('active') == 'true'
            )
            return jsonify({'success': True, 'users': users})
    except Exception as e:
        logger.error(f"Error listing users: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@users_bp.route('/api/users/<user_id>', methods=['GET'])
@login_required_wrapper
def get_user(user_id):
    """Get a single user"""
    try:
        with get_db_session() as session:
            user = _repo(session).get_user(user_id)
            if not user:
                return not_found('User')
            return jsonify({'success': True, 'user': user})
    except Exception as e:
        logger.error(f"Error getting user: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@users_bp.route('/api/users', methods=['POST'])
@admin_required_wrapper
def create_user():
    """Create a new user (admin only)"""
    try:
        data = get_json_body()
        is_valid, error = validate_user_request(data)
        if not is_valid:
            return bad_request(error)

        with get_db_session() as session:
            user = _repo(session).create_user(data)
            return jsonify({'success': True, 'user': user}), 201

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error creating user: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@users_bp.route('/api/users/<user_id>', methods=['PUT'])
@admin_required_wrapper
def update_user(user_id):
    """Update a user (admin only)"""
    try:
        data = get_json_body()
        is_valid, error = validate_user_request(data, partial=True)
        if not is_valid:
            return bad_request(error)

        with get_db_session() as session:
            user = _repo(session).update_user(user_id, data)
            if not user:
                return not_found('User')
            return jsonify({'success': True, 'user': user})

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error updating user: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@users_bp.route('/api/users/<user_id>/toggle-active', methods=['POST'])
@admin_required_wrapper
def toggle_user_active(user_id):
    """Activate or deactivate a user (admin only)"""
    try:
        with get_db_session() as session:
            user = _repo(session).toggle_active(user_id)
            if not user:
                return not_found('User')
            return jsonify({'success': True, 'user': user})
    except Exception as e:
        logger.error(f"Error toggling user: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
