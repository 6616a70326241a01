"""
Authentication Routes Blueprint

Handles login/logout, the current user and password changes.
"""

from flask import Blueprint, jsonify
import logging

from app.utils import get_auth, get_json_body, login_required_wrapper
from validators import ValidationError

logger = logging.getLogger(__name__)

# Create blueprint
auth_bp = Blueprint('auth_bp', __name__)

MIN_PASSWORD_LENGTH = 8


@auth_bp.route('/api/auth/login', methods=['POST'])
def api_login():
    """API endpoint for user login"""
    auth = get_auth()
    try:
        data = get_json_body()
        email = (data.get('email') or '').strip()
        password = data.get('password') or ''

        if not email or not password:
            return jsonify({'success': False, 'error': 'Email and password required'}), 400

        user, error = auth.authenticate_user(email, password)

        if error:
            return jsonify({'success': False, 'error': error}), 401

        auth.login_user(user)

        return jsonify({
            'success': True,
            'user': user,
            'permissions': auth.permissions_for(user)
        })

    except ValidationError as e:
        return jsonify({'success': False, 'error': e.message}), 400
    except Exception as e:
        logger.error(f"Login error: {e}")
        return jsonify({'success': False, 'error': 'Login failed'}), 500


@auth_bp.route('/api/auth/logout', methods=['POST'])
def api_logout():
    """API endpoint for user logout"""
    auth = get_auth()
    auth.logout_user()
    return jsonify({'success': True})


@auth_bp.route('/api/auth/me', methods=['GET'])
@login_required_wrapper
def get_current_user_api():
    """Get current logged-in user info and permissions"""
    auth = get_auth()
    user = auth.get_current_user()
    if user:
        return jsonify({'success': True, 'user': user, 'permissions': auth.permissions_for(user)})
    return jsonify({'success': False, 'error': 'Not authenticated'}), 401


@auth_bp.route('/api/auth/password', methods=['POST'])
@login_required_wrapper
def update_password_api():
    """Change the current user's password"""
    auth = get_auth()
    try:
        data = get_json_body()
        new_password = data.get('new_password') or ''

        if len(new_password) < MIN_PASSWORD_LENGTH:
            return jsonify({
                'success': False,
                'error': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
            }), 400

        user, error = auth.update_password(auth.get_current_user_id(), new_password)
        if error:
            return jsonify({'success': False, 'error': error}), 404

        return jsonify({'success': True, 'user': user})

    except ValidationError as e:
        return jsonify({'success': False, 'error': e.message}), 400
    except Exception as e:
        logger.error(f"Error updating password: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
