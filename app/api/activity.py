"""
Activity Routes Blueprint

- /api/activity?target_type=&target_id=: Activity feed, newest first
"""

from flask import Blueprint, request, jsonify
import logging

from app.utils import login_required_wrapper, bad_request
from database.connection import get_db_session
from services.activity_logger import ActivityLogger, TARGET_TYPES, format_action

logger = logging.getLogger(__name__)

# Create blueprint
activity_bp = Blueprint('activity_bp', __name__)


@activity_bp.route('/api/activity', methods=['GET'])
@login_required_wrapper
def list_activity():
    """Activity entries for one item or task, each with its feed sentence"""
    try:
        target_type = request.args.get('target_type')
        target_id = request.args.get('target_id')
        if target_type not in TARGET_TYPES or not target_id:
            return bad_request('target_type (item|task) and target_id are required')

        limit = request.args.get('limit', 100, type=int)

        with get_db_session() as session:
            entries = ActivityLogger(session).get_target_history(target_type, target_id, limit=limit)

        for entry in entries:
            entry['message'] = format_action(entry, target_type)

        return jsonify({'success': True, 'activity': entries})

    except Exception as e:
        logger.error(f"Error listing activity: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
