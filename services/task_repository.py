"""
Task Repository - Database operations for hierarchical tasks.
"""

import logging
from typing import List, Dict, Optional
from datetime import datetime
from sqlalchemy.orm import Session, selectinload

from database.models import Task, Item, Comment
from services.item_repository import resolve_users, resolve_tags
from services.lookups_repository import StageRepository
from validators import ValidationError, parse_datetime, sanitize_string, clean_string_list

logger = logging.getLogger(__name__)

TASK_FIELDS = ['title', 'description', 'stage', 'priority', 'status',
               'start_date', 'due_date', 'estimate_hours', 'actual_hours',
               'external_links', 'attachments', 'dependencies', 'archived',
               'task_order', 'parent_task_id']


def _hours(value):
    if value is None or value == '':
        return None
    return float(value)


class TaskRepository:
    """Repository for task database operations."""

    def __init__(self, session: Session, actor_id: str = None):
        self.session = session
        self.actor_id = actor_id

    def _query(self):
        return self.session.query(Task).options(
            selectinload(Task.assignees),
            selectinload(Task.tags),
            selectinload(Task.item),
        )

    def _get_model(self, task_id: str) -> Optional[Task]:
        return self._query().filter(Task.id == task_id).first()

    def _attach_parents(self, tasks: List[Dict]) -> List[Dict]:
        """
        Stitch `parent` and the parent's own `parent` (grandparent) onto
        each serialized task, using two batch lookups.
        """
        parent_ids = {t['parent_task_id'] for t in tasks if t.get('parent_task_id')}
        parents = {}
        if parent_ids:
            rows = self.session.query(
                Task.id, Task.title, Task.task_level, Task.stage, Task.parent_task_id
            ).filter(Task.id.in_(parent_ids)).all()
            parents = {r.id: {'id': r.id, 'title': r.title, 'task_level': r.task_level,
                              'stage': r.stage, 'parent_task_id': r.parent_task_id}
                       for r in rows}

        grandparent_ids = {p['parent_task_id'] for p in parents.values() if p['parent_task_id']}
        grandparents = {}
        if grandparent_ids:
            rows = self.session.query(
                Task.id, Task.title, Task.task_level, Task.stage
            ).filter(Task.id.in_(grandparent_ids)).all()
            grandparents = {r.id: {'id': r.id, 'title': r.title, 'task_level': r.task_level,
                                   'stage': r.stage}
                            for r in rows}

        for parent in parents.values():
            if parent['parent_task_id']:
                parent['parent'] = grandparents.get(parent['parent_task_id'])

        for task in tasks:
            parent_id = task.get('parent_task_id')
            task['parent'] = parents.get(parent_id) if parent_id else None
        return tasks

    def list_tasks(self, item_id: str = None, item_ids: List[str] = None,
                   include_archived: bool = True) -> List[Dict]:
        """List tasks newest first, with parent and grandparent attached."""
        query = self._query()
        if item_id:
            query = query.filter(Task.item_id == item_id)
        elif item_ids is not None:
            if not item_ids:
                return []
            query = query.filter(Task.item_id.in_(item_ids))
        if not include_archived:
            query = query.filter(Task.archived.is_(False))

        tasks = [t.to_dict() for t in query.order_by(Task.created_at.desc()).all()]
        return self._attach_parents(tasks)

    def list_section_tasks(self, section_id: str, include_archived: bool = True) -> List[Dict]:
        """Tasks of every item in a section (combined kanban view)."""
        item_ids = [row[0] for row in
                    self.session.query(Item.id).filter(Item.section_id == section_id).all()]
        return self.list_tasks(item_ids=item_ids, include_archived=include_archived)

    def get_task(self, task_id: str) -> Optional[Dict]:
        """Get a single task by ID."""
        task = self._get_model(task_id)
        if not task:
            return None
        return self._attach_parents([task.to_dict()])[0]

    def _level_for_parent(self, parent_task_id: Optional[str], item_id: str) -> int:
        if not parent_task_id:
            return 0
        parent = self.session.query(Task).filter(Task.id == parent_task_id).first()
        if not parent:
            raise ValidationError("Parent task not found", 'parent_task_id')
        if parent.item_id != item_id:
            raise ValidationError("Parent task belongs to another item", 'parent_task_id')
        return (parent.task_level or 0) + 1

    def create_task(self, data: Dict) -> Dict:
        """
        Create a new task.

        Without a stage the task lands in the first stage, or "Planning"
        when no stages exist.
        """
        item_id = data['item_id']
        if not self.session.query(Item.id).filter(Item.id == item_id).first():
            raise ValidationError("Item not found", 'item_id')

        stage = data.get('stage') or StageRepository(self.session).default_stage_name()
        parent_task_id = data.get('parent_task_id') or None

        task = Task(
            item_id=item_id,
            parent_task_id=parent_task_id,
            task_level=self._level_for_parent(parent_task_id, item_id),
            task_order=data.get('task_order') or 0,
            title=sanitize_string(data['title'], max_length=500),
            description=data.get('description'),
            stage=stage,
            priority=data.get('priority') or 'normal',
            status=data.get('status') or 'active',
            start_date=parse_datetime(data.get('start_date')),
            due_date=parse_datetime(data.get('due_date')),
            estimate_hours=_hours(data.get('estimate_hours')),
            actual_hours=_hours(data.get('actual_hours')),
            external_links=clean_string_list(data.get('external_links')),
            attachments=data.get('attachments') or [],
            dependencies=data.get('dependencies') or [],
            archived=bool(data.get('archived', False)),
            created_by=self.actor_id,
            updated_by=self.actor_id,
        )
        task.assignees = resolve_users(self.session, data.get('assignee_ids') or [])
        task.tags = resolve_tags(self.session, data.get('tag_ids') or [])

        self.session.add(task)
        self.session.flush()
        logger.info(f"Created task: {task.id} on item {item_id} in stage '{stage}'")
        return self.get_task(task.id)

    def update_task(self, task_id: str, updates: Dict) -> Optional[Dict]:
        """Update a task; join rows follow the same rules as items."""
        task = self._get_model(task_id)
        if not task:
            return None

        if 'parent_task_id' in updates:
            parent_id = updates['parent_task_id'] or None
            if parent_id == task_id:
                raise ValidationError("A task cannot be its own parent", 'parent_task_id')
            if parent_id and parent_id in self._descendant_ids(task_id):
                raise ValidationError("A task cannot be moved under its own subtask", 'parent_task_id')
            task.task_level = self._level_for_parent(parent_id, task.item_id)
            updates = dict(updates, parent_task_id=parent_id)

        for field in TASK_FIELDS:
            if field not in updates:
                continue
            value = updates[field]
            if field in ('start_date', 'due_date'):
                value = parse_datetime(value)
            elif field in ('estimate_hours', 'actual_hours'):
                value = _hours(value)
            elif field == 'title':
                value = sanitize_string(value, max_length=500)
            elif field == 'external_links':
                value = clean_string_list(value)
            elif field == 'stage' and not value:
                raise ValidationError("Stage cannot be empty", 'stage')
            setattr(task, field, value)

        if 'parent_task_id' in updates:
            self._relevel_descendants(task)

        if 'assignee_ids' in updates:
            task.assignees = resolve_users(self.session, updates['assignee_ids'] or [])
        if 'tag_ids' in updates:
            task.tags = resolve_tags(self.session, updates['tag_ids'] or [])

        task.updated_by = self.actor_id
        task.updated_at = datetime.utcnow()
        self.session.flush()
        logger.info(f"Updated task: {task_id}")
        return self.get_task(task_id)

    def move_task(self, task_id: str, new_stage: str) -> Optional[Dict]:
        """
        Change a task's stage.

        Returns:
            Dict with old_stage and the updated task, or None if missing
        """
        task = self._get_model(task_id)
        if not task:
            return None
        old_stage = task.stage
        task.stage = new_stage
        task.updated_by = self.actor_id
        task.updated_at = datetime.utcnow()
        self.session.flush()
        logger.info(f"Moved task {task_id} from '{old_stage}' to '{new_stage}'")
        return {'old_stage': old_stage, 'task': self.get_task(task_id)}

    def _relevel_descendants(self, task: Task):
        """Recompute task_level below a task whose parent changed."""
        frontier = [task]
        while frontier:
            parent = frontier.pop()
            children = self.session.query(Task).filter(Task.parent_task_id == parent.id).all()
            for child in children:
                child.task_level = (parent.task_level or 0) + 1
                frontier.append(child)

    def _descendant_ids(self, task_id: str) -> set:
        found = set()
        frontier = [task_id]
        while frontier:
            rows = self.session.query(Task.id).filter(Task.parent_task_id.in_(frontier)).all()
            frontier = [r[0] for r in rows if r[0] not in found and r[0] != task_id]
            found.update(frontier)
        return found

    def delete_task(self, task_id: str) -> bool:
        """Delete a task, all of its descendants and their comments."""
        task = self.session.query(Task).filter(Task.id == task_id).first()
        if not task:
            return False

        removed = self._descendant_ids(task_id) | {task_id}
        self.session.query(Comment).filter(
            Comment.parent_type == 'task', Comment.parent_id.in_(removed)
        ).delete(synchronize_session=False)

        self.session.delete(task)
        self.session.flush()
        logger.info(f"Deleted task: {task_id} ({len(removed) - 1} subtasks)")
        return True
