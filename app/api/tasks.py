"""
Tasks Routes Blueprint

Handles hierarchical tasks:
- /api/tasks: List / create
- /api/tasks/tree: Tasks nested under their parents
- /api/tasks/parent-options: Candidate parents for the task form
- /api/tasks/<task_id>: Get / update / delete
"""

from flask import Blueprint, request, jsonify
import logging

from app.utils import (
    get_auth, get_json_body, query_bool, current_user, login_required_wrapper,
    forbidden, not_found, bad_request
)
from database.connection import get_db_session
from services.activity_logger import get_activity_logger
from services.task_hierarchy import build_task_tree, parent_options
from services.task_repository import TaskRepository
from validators import ValidationError, validate_task_request

logger = logging.getLogger(__name__)

# Create blueprint
tasks_bp = Blueprint('tasks_bp', __name__)


@tasks_bp.route('/api/tasks', methods=['GET'])
@login_required_wrapper
def list_tasks():
    """List tasks newest first, optionally for one item"""
    try:
        with get_db_session() as session:
            tasks = TaskRepository(session).list_tasks(
                item_id=request.args.get('item_id'),
                include_archived=query_bool('include_archived', True)
            )
            return jsonify({'success': True, 'tasks': tasks})
    except Exception as e:
        logger.error(f"Error listing tasks: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@tasks_bp.route('/api/tasks/tree', methods=['GET'])
@login_required_wrapper
def task_tree():
    """Tasks of an item (or all tasks) as a tree sorted by task_order"""
    try:
        with get_db_session() as session:
            tasks = TaskRepository(session).list_tasks(item_id=request.args.get('item_id'))
            return jsonify({'success': True, 'tasks': build_task_tree(tasks)})
    except Exception as e:
        logger.error(f"Error building task tree: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@tasks_bp.route('/api/tasks/parent-options', methods=['GET'])
@login_required_wrapper
def task_parent_options():
    """Tasks of the item that may parent ?exclude= (itself and subtasks excluded)"""
    try:
        item_id = request.args.get('item_id')
        if not item_id:
            return bad_request('item_id is required', 'item_id')

        with get_db_session() as session:
            tasks = TaskRepository(session).list_tasks(item_id=item_id)
            options = parent_options(tasks, item_id, request.args.get('exclude'))
            return jsonify({'success': True, 'tasks': options})
    except Exception as e:
        logger.error(f"Error listing parent options: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@tasks_bp.route('/api/tasks', methods=['POST'])
@login_required_wrapper
def create_task():
    """Create a task; stage defaults to the first stage"""
    auth = get_auth()
    try:
        user = current_user()
        data = get_json_body()

        if not auth.can_create_task(user, data.get('item_id')):
            return forbidden()

        is_valid, error = validate_task_request(data)
        if not is_valid:
            return bad_request(error)

        with get_db_session() as session:
            task = TaskRepository(session, user['id']).create_task(data)
            get_activity_logger(session, user['id']).log_create(
                'task', task['id'], after=task, metadata={'item_id': task['item_id']}
            )
            return jsonify({'success': True, 'task': task}), 201

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error creating task: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@tasks_bp.route('/api/tasks/<task_id>', methods=['GET'])
@login_required_wrapper
def get_task(task_id):
    """Get a single task with its parent chain"""
    try:
        with get_db_session() as session:
            task = TaskRepository(session).get_task(task_id)
            if not task:
                return not_found('Task')
            return jsonify({'success': True, 'task': task})
    except Exception as e:
        logger.error(f"Error getting task: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@tasks_bp.route('/api/tasks/<task_id>', methods=['PUT'])
@login_required_wrapper
def update_task(task_id):
    """Update a task"""
    auth = get_auth()
    try:
        user = current_user()
        data = get_json_body()

        is_valid, error = validate_task_request(data, partial=True)
        if not is_valid:
            return bad_request(error)

        with get_db_session() as session:
            repo = TaskRepository(session, user['id'])
            before = repo.get_task(task_id)
            if not before:
                return not_found('Task')
            if not auth.can_edit_task(user, before):
                return forbidden()

            task = repo.update_task(task_id, data)
            get_activity_logger(session, user['id']).log_update(
                'task', task_id, before=before, after=task,
                metadata={'item_id': task['item_id']}
            )
            return jsonify({'success': True, 'task': task})

    except ValidationError as e:
        return bad_request(e.message, e.field)
    except Exception as e:
        logger.error(f"Error updating task: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@tasks_bp.route('/api/tasks/<task_id>', methods=['DELETE'])
@login_required_wrapper
def delete_task(task_id):
    """Delete a task and all of its subtasks"""
    auth = get_auth()
    try:
        user = current_user()
        with get_db_session() as session:
            repo = TaskRepository(session, user['id'])
            before = repo.get_task(task_id)
            if not before:
                return not_found('Task')
            if not auth.can_delete_task(user, before):
                return forbidden()

            repo.delete_task(task_id)
            get_activity_logger(session, user['id']).log_delete(
                'task', task_id, before=before, metadata={'item_id': before['item_id']}
            )
            return jsonify({'success': True})

    except Exception as e:
        logger.error(f"Error deleting task: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
