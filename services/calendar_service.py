"""
Calendar feed built from item and task due dates.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Iterable

from services.task_hierarchy import hierarchical_title

logger = logging.getLogger(__name__)

ALL_SECTIONS = ['legal', 'deals', 'real-estate', 'others']

SECTION_NAMES = {
    'legal': 'Legal Fights',
    'deals': 'Business Deals',
    'real-estate': 'Real Estate',
    'others': 'Others',
}

EVENT_TYPES = ('item', 'task')


def section_name(section_id: Optional[str]) -> str:
    return SECTION_NAMES.get(section_id or '', 'Unknown')


def _is_completed(record: Dict) -> bool:
    return (record.get('status') or '').lower() == 'completed'


def _resource(event_type: str, record: Dict, item_id: str, section_id: str) -> Dict:
    completed = _is_completed(record)
    return {
        'type': event_type,
        'id': record['id'],
        'item_id': item_id,
        'section_id': section_id,
        'priority': record.get('priority'),
        'status': record.get('status'),
        'completed': completed,
        'section_name': section_name(section_id),
    }


def item_event(item: Dict) -> Dict:
    """All-day event on the item's due date."""
    due = item['due_date']
    return {
        'id': f"item-{item['id']}",
        'title': item['title'],
        'start': due,
        'end': due,
        'all_day': True,
        'resource': _resource('item', item, item['id'], item['section_id']),
    }


def task_event(task: Dict, section_id: str) -> Dict:
    """
    Event for a task due date. Midnight means all day; any other time
    gets a one-hour slot.
    """
    start = datetime.fromisoformat(task['due_date'])
    all_day = start.hour == 0 and start.minute == 0
    end = start if all_day else start + timedelta(hours=1)

    return {
        'id': f"task-{task['id']}",
        'title': f"Task: {hierarchical_title(task)}",
        'start': start.isoformat(),
        'end': end.isoformat(),
        'all_day': all_day,
        'resource': _resource('task', task, task['item_id'], section_id),
    }


def build_calendar_events(items: List[Dict], tasks: List[Dict],
                          sections: Iterable[str] = None,
                          show_completed: bool = True) -> List[Dict]:
    """
    Calendar events for items and non-archived tasks with due dates whose
    section is selected.
    """
    selected = set(sections or ALL_SECTIONS)
    items_by_id = {item['id']: item for item in items}
    events = []

    for item in items:
        if not item.get('due_date') or item.get('section_id') not in selected:
            continue
        if _is_completed(item) and not show_completed:
            continue
        events.append(item_event(item))

    for task in tasks:
        if not task.get('due_date') or task.get('archived'):
            continue
        item = items_by_id.get(task.get('item_id'))
        if not item or item.get('section_id') not in selected:
            continue
        if _is_completed(task) and not show_completed:
            continue
        events.append(task_event(task, item['section_id']))

    return events
