"""
Lookup Routes Blueprint

- /api/sections: The four sections (created on demand)
- /api/tags: List / create tags
- /api/stages: Kanban stages in order
"""

from flask import Blueprint, request, jsonify
import logging

from app.utils import get_json_body, login_required_wrapper, permission_required_wrapper, bad_request
from database.connection import get_db_session
from services.lookups_repository import SectionRepository, TagRepository, StageRepository
from validators import ValidationError, validate_tag_request

logger = logging.getLogger(__name__)

# Create blueprint
lookups_bp = Blueprint('lookups_bp', __name__)


@lookups_bp.route('/api/sections', methods=['GET'])
@login_required_wrapper
def list_sections():
    """List sections, creating any that are missing"""
    try:
        with get_db_session() as session:
            sections = SectionRepository(session).list_sections()
            return jsonify({'success': True, 'sections': sections})
    except Exception as e:
        logger.error(f"Error listing sections: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@lookups_bp.route('/api/tags', methods=['GET'])
@login_required_wrapper
def list_tags():
    """List tags ordered by name"""
    try:
        with get_db_session() as session:
            return jsonify({'success': True, 'tags': TagRepository(session).list_tags()})
    except Exception as e:
        logger.error(f"Error listing tags: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@lookups_bp.route('/api/tags', methods=['POST'])
@permission_required_wrapper('can_create_item')
def create_tag():
    """Create a tag (anyone who may create items)"""
    try:
        data = get_json_body()
        is_valid, error = validate_tag_request(data)
        if not is_valid:
            return bad_request(error, 'name')

        with get_db_session() as session:
            tag = TagRepository(session).create_tag(data)
            return jsonify({'success': True, 'tag': tag}), 201
    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error creating tag: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@lookups_bp.route('/api/stages', methods=['GET'])
@login_required_wrapper
def list_stages():
    """List stages ordered by position, optionally for one section"""
    try:
        with get_db_session() as session:
            stages = StageRepository(session).list_stages(request.args.get('section_id'))
            return jsonify({'success': True, 'stages': stages})
    except Exception as e:
        logger.error(f"Error listing stages: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
