"""
Admin Routes Blueprint

Handles the admin-editable option lists used by the section forms:
- /api/admin/system-config: Read (any user) / replace (admin)
- /api/admin/system-config/<category>: Add / remove one option (admin)
"""

from flask import Blueprint, jsonify
import logging

from app.utils import get_json_body, login_required_wrapper, admin_required_wrapper, bad_request
from database.connection import get_db_session
from services.settings_repository import SettingsRepository
from validators import ValidationError

logger = logging.getLogger(__name__)

# Create blueprint
admin_bp = Blueprint('admin_bp', __name__)


@admin_bp.route('/api/admin/system-config', methods=['GET'])
@login_required_wrapper
def get_system_config():
    """Option lists; the item forms read these too"""
    try:
        with get_db_session() as session:
            config = SettingsRepository(session).get_system_config()
            return jsonify({'success': True, 'config': config})
    except Exception as e:
        logger.error(f"Error loading system config: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@admin_bp.route('/api/admin/system-config', methods=['PUT'])
@admin_required_wrapper
def save_system_config():
    """Replace the lists given in the body"""
    try:
        data = get_json_body()
        with get_db_session() as session:
            config = SettingsRepository(session).set_system_config(data)
            return jsonify({'success': True, 'config': config})
    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error saving system config: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@admin_bp.route('/api/admin/system-config/<category>', methods=['POST'])
@admin_required_wrapper
def add_option(category):
    """Add {"value": ...} to a list"""
    try:
        value = get_json_body().get('value')
        with get_db_session() as session:
            options = SettingsRepository(session).add_option(category, value)
            return jsonify({'success': True, 'category': category, 'options': options})
    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error adding option to {category}: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@admin_bp.route('/api/admin/system-config/<category>', methods=['DELETE'])
@admin_required_wrapper
def remove_option(category):
    """Remove {"value": ...} from a list"""
    try:
        value = get_json_body().get('value')
        with get_db_session() as session:
            options = SettingsRepository(session).remove_option(category, value)
            return jsonify({'success': True, 'category': category, 'options': options})
    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error removing option from {category}: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
