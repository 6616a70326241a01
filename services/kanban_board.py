"""
Kanban board state: stage columns, filters, grouping and optimistic moves.

The board works on serialized tasks and stages so the same class backs
the /api/kanban/board endpoint and the HTTP client.
"""

import copy
import logging
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Any

logger = logging.getLogger(__name__)

VIEW_MODES = ('single', 'combined')
GROUP_BY = ('none', 'item', 'assignee')

UNKNOWN_PROJECT = 'Unknown Project'
UNASSIGNED = 'Unassigned'


def board_stages(stages: List[Dict], section_id: str = None) -> List[Dict]:
    """Global stages plus the section's own stages, in stage order."""
    selected = [s for s in stages
                if s.get('is_global') or (section_id and s.get('section_id') == section_id)]
    return sorted(selected, key=lambda s: s.get('order') or 0)


class KanbanBoard:
    """Local copy of a board's tasks with optimistic stage moves."""

    def __init__(self, tasks: List[Dict], stages: List[Dict], section_id: str = None,
                 view_mode: str = 'single', group_by: str = 'none'):
        if view_mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode: {view_mode}")
        if group_by not in GROUP_BY:
            raise ValueError(f"Unknown grouping: {group_by}")

        self.tasks = [copy.deepcopy(t) for t in tasks]
        self.stages = board_stages(stages, section_id)
        self.section_id = section_id
        self.view_mode = view_mode
        self.group_by = group_by
        self.filters = {'assignees': [], 'tags': [], 'priorities': [], 'items': []}

    # ------------------------------------------------------------------
    # Filtering and layout
    # ------------------------------------------------------------------

    def set_filters(self, assignees=None, tags=None, priorities=None, items=None):
        """Replace the active filters; each list matches any of its values."""
        self.filters = {
            'assignees': list(assignees or []),
            'tags': list(tags or []),
            'priorities': list(priorities or []),
            'items': list(items or []),
        }

    def _passes(self, task: Dict) -> bool:
        f = self.filters
        if f['assignees']:
            if not any(a.get('id') in f['assignees'] for a in task.get('assignees') or []):
                return False
        if f['tags']:
            if not any(t.get('id') in f['tags'] for t in task.get('tags') or []):
                return False
        if f['priorities'] and task.get('priority') not in f['priorities']:
            return False
        if f['items'] and task.get('item_id') not in f['items']:
            return False
        return True

    def filtered_tasks(self) -> List[Dict]:
        return [t for t in self.tasks if self._passes(t)]

    def _group(self, tasks: List[Dict]) -> List[Dict[str, Any]]:
        if self.view_mode != 'combined' or self.group_by == 'none':
            return [{'key': 'all', 'title': None, 'tasks': tasks}]

        grouped: "OrderedDict[str, List[Dict]]" = OrderedDict()
        for task in tasks:
            if self.group_by == 'item':
                key = (task.get('item') or {}).get('title') or UNKNOWN_PROJECT
            else:
                assignees = task.get('assignees') or []
                key = (assignees[0].get('name') if assignees else None) or UNASSIGNED
            grouped.setdefault(key, []).append(task)

        return [{'key': key, 'title': key, 'tasks': group} for key, group in grouped.items()]

    def columns(self) -> List[Dict[str, Any]]:
        """One column per stage holding the filtered tasks of that stage."""
        visible = self.filtered_tasks()
        result = []
        for stage in self.stages:
            stage_tasks = [t for t in visible if t.get('stage') == stage['name']]
            result.append({
                'stage': stage,
                'count': len(stage_tasks),
                'groups': self._group(stage_tasks),
            })
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            'section_id': self.section_id,
            'view_mode': self.view_mode,
            'group_by': self.group_by,
            'filters': self.filters,
            'stages': self.stages,
            'columns': self.columns(),
            'total_tasks': len(self.tasks),
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def get_task(self, task_id: str) -> Optional[Dict]:
        return next((t for t in self.tasks if t['id'] == task_id), None)

    def _set_stage(self, task_id: str, stage: str):
        for task in self.tasks:
            if task['id'] == task_id:
                task['stage'] = stage

    def move_task(self, task_id: str, new_stage: str,
                  persist: Callable[[Dict, str], Any]) -> bool:
        """
        Move a task to another stage, optimistically.

        The local copy changes first, then persist(task, new_stage) runs.
        If persist raises, the local stage is restored and the error
        propagates.

        Returns:
            False for a no-op (unknown task or same stage), True otherwise
        """
        task = self.get_task(task_id)
        if not task or task.get('stage') == new_stage:
            return False

        old_stage = task['stage']
        self._set_stage(task_id, new_stage)

        try:
            persist(dict(task, stage=old_stage), new_stage)
        except Exception:
            self._set_stage(task_id, old_stage)
            logger.error(f"Failed to move task {task_id} to '{new_stage}', reverted to '{old_stage}'")
            raise

        logger.info(f"Moved task {task_id} from '{old_stage}' to '{new_stage}'")
        return True

    def remove_task(self, task_id: str) -> int:
        """Drop a deleted task and its direct children from the local copy."""
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks
                      if t['id'] != task_id and t.get('parent_task_id') != task_id]
        return before - len(self.tasks)
