"""
Comments Routes Blueprint

- /api/comments?parent_type=&parent_id=: List comments, oldest first
- /api/comments: Create a comment (mentions resolved from @words)
"""

from flask import Blueprint, request, jsonify
import logging

from app.utils import get_json_body, current_user, login_required_wrapper, bad_request
from database.connection import get_db_session
from services.activity_logger import get_activity_logger
from services.comment_repository import CommentRepository
from validators import ValidationError, validate_comment_request, COMMENT_PARENT_TYPES

logger = logging.getLogger(__name__)

# Create blueprint
comments_bp = Blueprint('comments_bp', __name__)


@comments_bp.route('/api/comments', methods=['GET'])
@login_required_wrapper
def list_comments():
    """List comments on an item or task"""
    try:
        parent_type = request.args.get('parent_type')
        parent_id = request.args.get('parent_id')
        if parent_type not in COMMENT_PARENT_TYPES or not parent_id:
            return bad_request('parent_type (item|task) and parent_id are required')

        with get_db_session() as session:
            comments = CommentRepository(session).list_comments(parent_type, parent_id)
            return jsonify({'success': True, 'comments': comments})
    except Exception as e:
        logger.error(f"Error listing comments: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@comments_bp.route('/api/comments', methods=['POST'])
@login_required_wrapper
def create_comment():
    """Add a comment as the current user and log it on the parent"""
    try:
        user = current_user()
        data = get_json_body()

        is_valid, error = validate_comment_request(data)
        if not is_valid:
            return bad_request(error)

        with get_db_session() as session:
            comment = CommentRepository(session, user['id']).create_comment(
                data['parent_type'], data['parent_id'], data['body']
            )
            get_activity_logger(session, user['id']).log(
                'commented', data['parent_type'], data['parent_id'],
                after={'comment_id': comment['id']},
                metadata={'mentions': comment['mentions']}
            )
            return jsonify({'success': True, 'comment': comment}), 201

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error creating comment: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
