"""
Items Routes Blueprint

Handles cases, deals, properties and other records:
- /api/items: List (with filters) / create
- /api/items/<item_id>: Get / update / delete
- /api/items/<item_id>/meta: Upsert section metadata
"""

from flask import Blueprint, request, jsonify
import logging

from app.utils import (
    get_auth, get_json_body, query_list, current_user, login_required_wrapper,
    forbidden, not_found, bad_request
)
from database.connection import get_db_session
from services.activity_logger import get_activity_logger
from services.item_repository import ItemRepository, filter_items
from validators import ValidationError, validate_item_request, SECTION_IDS

logger = logging.getLogger(__name__)

# Create blueprint
items_bp = Blueprint('items_bp', __name__)


def _list_filters():
    return {
        'search': request.args.get('search'),
        'status': query_list('status'),
        'priority': query_list('priority'),
        'assignees': query_list('assignees'),
        'tags': query_list('tags'),
        'selected_tag': request.args.get('selected_tag'),
        'selected_department': request.args.get('department'),
        'selected_assignee': request.args.get('selected_assignee'),
        'date_start': request.args.get('date_start'),
        'date_end': request.args.get('date_end'),
    }


@items_bp.route('/api/items', methods=['GET'])
@login_required_wrapper
def list_items():
    """List items newest first, optionally for one section and filtered"""
    try:
        section_id = request.args.get('section_id')
        if section_id and section_id not in SECTION_IDS:
            return bad_request(f"Unknown section: {section_id}", 'section_id')

        with get_db_session() as session:
            items = ItemRepository(session).list_items(section_id)
            items = filter_items(items, _list_filters(), section_id)
            return jsonify({'success': True, 'items': items, 'count': len(items)})

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error listing items: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@items_bp.route('/api/items', methods=['POST'])
@login_required_wrapper
def create_item():
    """Create an item, its join rows and its section metadata"""
    auth = get_auth()
    try:
        user = current_user()
        data = get_json_body()

        if not auth.can_create_item(user, data.get('section_id')):
            return forbidden()

        is_valid, error = validate_item_request(data)
        if not is_valid:
            return bad_request(error)

        with get_db_session() as session:
            repo = ItemRepository(session, user['id'])
            item = repo.create_item(data)
            item = repo.apply_section_meta(item, data)

            get_activity_logger(session, user['id']).log_create(
                'item', item['id'], after=item, metadata={'section': item['section_id']}
            )
            return jsonify({'success': True, 'item': item}), 201

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error creating item: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@items_bp.route('/api/items/<item_id>', methods=['GET'])
@login_required_wrapper
def get_item(item_id):
    """Get a single item"""
    try:
        with get_db_session() as session:
            item = ItemRepository(session).get_item(item_id)
            if not item:
                return not_found('Item')
            return jsonify({'success': True, 'item': item})
    except Exception as e:
        logger.error(f"Error getting item: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@items_bp.route('/api/items/<item_id>', methods=['PUT'])
@login_required_wrapper
def update_item(item_id):
    """Update an item; assignee_ids/tag_ids replace the join rows when present"""
    auth = get_auth()
    try:
        user = current_user()
        data = get_json_body()

        is_valid, error = validate_item_request(data, partial=True)
        if not is_valid:
            return bad_request(error)

        with get_db_session() as session:
            repo = ItemRepository(session, user['id'])
            before = repo.get_item(item_id)
            if not before:
                return not_found('Item')
            if not auth.can_edit_item(user, before):
                return forbidden()

            item = repo.update_item(item_id, data)
            item = repo.apply_section_meta(item, data)

            get_activity_logger(session, user['id']).log_update(
                'item', item_id, before=before, after=item,
                metadata={'section': item['section_id']}
            )
            return jsonify({'success': True, 'item': item})

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error updating item: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@items_bp.route('/api/items/<item_id>', methods=['DELETE'])
@login_required_wrapper
def delete_item(item_id):
    """Delete an item with its tasks, metadata and comments"""
    auth = get_auth()
    try:
        user = current_user()
        with get_db_session() as session:
            repo = ItemRepository(session, user['id'])
            before = repo.get_item(item_id)
            if not before:
                return not_found('Item')
            if not auth.can_delete_item(user, before):
                return forbidden()

            repo.delete_item(item_id)
            get_activity_logger(session, user['id']).log_delete(
                'item', item_id, before=before, metadata={'section': before['section_id']}
            )
            return jsonify({'success': True})

    except Exception as e:
        logger.error(f"Error deleting item: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@items_bp.route('/api/items/<item_id>/meta', methods=['PUT'])
@login_required_wrapper
def save_item_meta(item_id):
    """Upsert the metadata of the item's section"""
    auth = get_auth()
    try:
        user = current_user()
        data = get_json_body()

        with get_db_session() as session:
            repo = ItemRepository(session, user['id'])
            item = repo.get_item(item_id)
            if not item:
                return not_found('Item')
            if not auth.can_edit_item(user, item):
                return forbidden()

            meta = repo.save_section_meta(item_id, item['section_id'], data)
            if meta is None:
                return bad_request(f"Section '{item['section_id']}' has no metadata")
            return jsonify({'success': True, 'meta': meta})

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error saving item metadata: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
