"""
Task hierarchy helpers.

The tree is rebuilt from the flat task list on every request; the
parent_task_id column is the only source of truth.
"""

from typing import Dict, List, Set, Any


def build_task_tree(tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Nest serialized tasks under their parents.

    Tasks whose parent is in the list become that parent's children;
    tasks without a parent are roots; tasks whose parent is missing are
    dropped. Every sibling list is sorted by task_order.
    """
    task_map = {t['id']: dict(t, children=[]) for t in tasks}
    roots = []

    for task in task_map.values():
        parent_id = task.get('parent_task_id')
        if parent_id and parent_id in task_map and parent_id != task['id']:
            task_map[parent_id]['children'].append(task)
        elif not parent_id:
            roots.append(task)

    # Walk iteratively from the roots; a parent cycle in the input is
    # simply unreachable, so this always terminates
    stack = list(roots)
    while stack:
        node = stack.pop()
        node['children'].sort(key=_order_key)
        stack.extend(node['children'])

    roots.sort(key=_order_key)
    return roots


def _order_key(task):
    return task.get('task_order') or 0


def hierarchical_title(task: Dict[str, Any]) -> str:
    """
    Title prefixed with its ancestors: "grandparent > parent > task".

    Uses the stitched `parent` (and its `parent`) from the task listing.
    """
    parent = task.get('parent')
    level = task.get('task_level') or 0

    if level == 2 and parent and parent.get('parent'):
        return f"{parent['parent']['title']} > {parent['title']} > {task['title']}"
    if level > 0 and parent:
        return f"{parent['title']} > {task['title']}"
    return task['title']


def descendant_ids(tasks: List[Dict[str, Any]], task_id: str) -> Set[str]:
    """Ids of every task below task_id in the flat list."""
    children_by_parent: Dict[str, List[str]] = {}
    for t in tasks:
        if t.get('parent_task_id'):
            children_by_parent.setdefault(t['parent_task_id'], []).append(t['id'])

    found: Set[str] = set()
    stack = list(children_by_parent.get(task_id, []))
    while stack:
        current = stack.pop()
        if current in found or current == task_id:
            continue
        found.add(current)
        stack.extend(children_by_parent.get(current, []))
    return found


def parent_options(tasks: List[Dict[str, Any]], item_id: str, exclude_task_id: str = None) -> List[Dict[str, Any]]:
    """
    Candidate parents for the task form: tasks of the same item, minus the
    task being edited and its descendants.
    """
    excluded: Set[str] = set()
    if exclude_task_id:
        excluded = descendant_ids(tasks, exclude_task_id)
        excluded.add(exclude_task_id)

    return [t for t in tasks if t.get('item_id') == item_id and t['id'] not in excluded]
