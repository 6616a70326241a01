"""
Kanban Board Routes Blueprint

Handles the stage board:
- /api/kanban/board: Columns for one item (single) or a whole section (combined)
- /api/kanban/tasks/<task_id>/move: Move a task to another stage
"""

from flask import Blueprint, request, jsonify
import logging

from app.utils import (
    get_auth, get_json_body, query_list, current_user, login_required_wrapper,
    forbidden, not_found, bad_request
)
from database.connection import get_db_session
from services.activity_logger import get_activity_logger
from services.kanban_board import KanbanBoard, VIEW_MODES, GROUP_BY
from services.lookups_repository import SectionRepository, StageRepository
from services.task_repository import TaskRepository
from validators import ValidationError

logger = logging.getLogger(__name__)

# Create blueprint
kanban_bp = Blueprint('kanban_bp', __name__)


@kanban_bp.route('/api/kanban/board', methods=['GET'])
@login_required_wrapper
def get_board():
    """
    Board columns.

    Query: section_id, item_id, view (single|combined), group_by
    (none|item|assignee), assignees, tags, priorities, items
    """
    try:
        section_id = request.args.get('section_id')
        item_id = request.args.get('item_id')
        view_mode = request.args.get('view') or ('single' if item_id else 'combined')
        group_by = request.args.get('group_by') or 'none'

        if view_mode not in VIEW_MODES:
            return bad_request(f"Unknown view mode: {view_mode}", 'view')
        if group_by not in GROUP_BY:
            return bad_request(f"Unknown grouping: {group_by}", 'group_by')
        if view_mode == 'single' and not item_id:
            return bad_request('item_id is required for the single view', 'item_id')
        if view_mode == 'combined' and not section_id:
            return bad_request('section_id is required for the combined view', 'section_id')

        with get_db_session() as session:
            repo = TaskRepository(session)
            if view_mode == 'single':
                section_id = SectionRepository(session).section_for_item(item_id)
                if not section_id:
                    return not_found('Item')
                tasks = repo.list_tasks(item_id=item_id)
            else:
                tasks = repo.list_section_tasks(section_id)
            stages = StageRepository(session).list_stages(section_id)

        board = KanbanBoard(tasks, stages, section_id=section_id,
                            view_mode=view_mode, group_by=group_by)
        board.set_filters(
            assignees=query_list('assignees'),
            tags=query_list('tags'),
            priorities=query_list('priorities'),
            items=query_list('items')
        )
        return jsonify({'success': True, 'board': board.to_dict()})

    except Exception as e:
        logger.error(f"Error building kanban board: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@kanban_bp.route('/api/kanban/tasks/<task_id>/move', methods=['POST'])
@login_required_wrapper
def move_task(task_id):
    """Move a task to the stage named in {"stage": ...} and log the move"""
    auth = get_auth()
    try:
        user = current_user()
        new_stage = get_json_body().get('stage')
        new_stage = new_stage.strip() if isinstance(new_stage, str) else ''
        if not new_stage:
            return bad_request('stage is required', 'stage')

        with get_db_session() as session:
            repo = TaskRepository(session, user['id'])
            task = repo.get_task(task_id)
            if not task:
                return not_found('Task')
            if not auth.can_edit_task(user, task):
                return forbidden()

            section_id = (task.get('item') or {}).get('section_id')
            stage_names = {s['name'] for s in StageRepository(session).list_stages(section_id)}
            if new_stage not in stage_names:
                return bad_request(f"Unknown stage: {new_stage}", 'stage')

            if task['stage'] == new_stage:
                return jsonify({'success': True, 'moved': False, 'task': task})

            result = repo.move_task(task_id, new_stage)
            get_activity_logger(session, user['id']).log_move(
                task_id, result['old_stage'], new_stage,
                metadata={'item_id': task['item_id']}
            )
            return jsonify({'success': True, 'moved': True, 'task': result['task']})

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error moving task: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
