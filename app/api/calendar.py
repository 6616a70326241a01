"""
Calendar Routes Blueprint

- /api/calendar/events: Item and task due dates as calendar events
- /api/calendar/events/<event_type>/<record_id>/reschedule: Drag an event to a new date
"""

from flask import Blueprint, jsonify
import logging

from app.utils import (
    get_auth, get_json_body, query_list, query_bool, current_user,
    login_required_wrapper, forbidden, not_found, bad_request
)
from database.connection import get_db_session
from services.activity_logger import get_activity_logger
from services.calendar_service import ALL_SECTIONS, EVENT_TYPES, build_calendar_events
from services.item_repository import ItemRepository
from services.task_repository import TaskRepository
from validators import ValidationError

logger = logging.getLogger(__name__)

# Create blueprint
calendar_bp = Blueprint('calendar_bp', __name__)


@calendar_bp.route('/api/calendar/events', methods=['GET'])
@login_required_wrapper
def list_events():
    """
    Events for the selected sections.

    Query: sections (defaults to all), show_completed (default true)
    """
    try:
        sections = query_list('sections') or ALL_SECTIONS
        unknown = [s for s in sections if s not in ALL_SECTIONS]
        if unknown:
            return bad_request(f"Unknown section: {unknown[0]}", 'sections')

        with get_db_session() as session:
            items = ItemRepository(session).list_items()
            tasks = TaskRepository(session).list_tasks(include_archived=False)

        events = build_calendar_events(
            items, tasks, sections=sections,
            show_completed=query_bool('show_completed', True)
        )
        return jsonify({'success': True, 'events': events})

    except Exception as e:
        logger.error(f"Error building calendar events: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@calendar_bp.route('/api/calendar/events/<event_type>/<record_id>/reschedule', methods=['POST'])
@login_required_wrapper
def reschedule_event(event_type, record_id):
    """Set a new due date ({"due_date": ...}) on the item or task behind an event"""
    auth = get_auth()
    try:
        if event_type not in EVENT_TYPES:
            return bad_request(f"Unknown event type: {event_type}", 'event_type')

        due_date = get_json_body().get('due_date')
        if not due_date:
            return bad_request('due_date is required', 'due_date')

        user = current_user()
        with get_db_session() as session:
            if event_type == 'item':
                repo = ItemRepository(session, user['id'])
                before = repo.get_item(record_id)
                if not before:
                    return not_found('Item')
                if not auth.can_edit_item(user, before):
                    return forbidden()
                after = repo.update_item(record_id, {'due_date': due_date})
                metadata = {'section': after['section_id']}
            else:
                repo = TaskRepository(session, user['id'])
                before = repo.get_task(record_id)
                if not before:
                    return not_found('Task')
                if not auth.can_edit_task(user, before):
                    return forbidden()
                after = repo.update_task(record_id, {'due_date': due_date})
                metadata = {'item_id': after['item_id']}

            metadata['source'] = 'calendar'
            get_activity_logger(session, user['id']).log_update(
                event_type, record_id, before=before, after=after, metadata=metadata
            )
            return jsonify({'success': True, event_type: after})

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error rescheduling {event_type} {record_id}: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
