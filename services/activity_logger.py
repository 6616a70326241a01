"""
Activity Logger Service - Audit trail behind the item and task activity feeds.

Every create, update, move, delete and comment on an item or task is
recorded with the acting user, a before/after snapshot and free-form
metadata (the owning section or item).
"""

import logging
from typing import Dict, Optional, List, Any

logger = logging.getLogger(__name__)

# Action types shown in the feed
ACTIONS = {
    'created': 'Record was created',
    'updated': 'Record was updated',
    'deleted': 'Record was deleted',
    'assigned': 'Record was assigned to someone',
    'status_changed': 'Status was changed',
    'moved': 'Task was moved to another stage',
    'commented': 'Comment was added',
}

TARGET_TYPES = ['item', 'task']


class ActivityLogger:
    """Service for writing and reading activity log entries."""

    def __init__(self, session, actor_id: str = None):
        """
        Initialize the activity logger.

        Args:
            session: SQLAlchemy database session
            actor_id: ID of the acting user, None for system actions
        """
        self.session = session
        self.actor_id = actor_id

    def log(self, action: str, target_type: str, target_id: str,
            before: Dict = None, after: Dict = None,
            metadata: Dict = None) -> Optional[Dict]:
        """
        Record one activity entry.

        The insert runs in a savepoint so a failed log entry never poisons
        the surrounding unit of work.

        Returns:
            The created entry as a dict, or None on failure
        """
        try:
            from database.models import ActivityLog

            with self.session.begin_nested():
                entry = ActivityLog(
                    actor_id=self.actor_id,
                    action=action,
                    target_type=target_type,
                    target_id=target_id,
                    before_data=before,
                    after_data=after,
                    extra_data=metadata or {}
                )
                self.session.add(entry)
                self.session.flush()

            logger.debug(f"Activity logged: {action} on {target_type}:{target_id}")
            return entry.to_dict()

        except Exception as e:
            logger.error(f"Failed to log activity: {e}")
            return None

    def log_create(self, target_type: str, target_id: str, after: Dict = None,
                   metadata: Dict = None) -> Optional[Dict]:
        """Log a creation."""
        return self.log('created', target_type, target_id, after=after, metadata=metadata)

    def log_update(self, target_type: str, target_id: str, before: Dict = None,
                   after: Dict = None, metadata: Dict = None) -> Optional[Dict]:
        """Log an update with before/after snapshots."""
        return self.log('updated', target_type, target_id,
                        before=before, after=after, metadata=metadata)

    def log_delete(self, target_type: str, target_id: str, before: Dict = None,
                   metadata: Dict = None) -> Optional[Dict]:
        """Log a deletion."""
        return self.log('deleted', target_type, target_id, before=before, metadata=metadata)

    def log_move(self, task_id: str, old_stage: str, new_stage: str,
                 metadata: Dict = None) -> Optional[Dict]:
        """Log a kanban stage change."""
        return self.log('moved', 'task', task_id,
                        before={'stage': old_stage}, after={'stage': new_stage},
                        metadata=metadata)

    def get_target_history(self, target_type: str, target_id: str,
                           limit: int = 100) -> List[Dict]:
        """Get the activity history for one item or task, newest first."""
        from database.models import ActivityLog

        entries = self.session.query(ActivityLog).filter(
            ActivityLog.target_type == target_type,
            ActivityLog.target_id == target_id
        ).order_by(ActivityLog.created_at.desc()).limit(limit).all()

        return [e.to_dict() for e in entries]


def format_action(activity: Dict[str, Any], target_type: str) -> str:
    """
    Render an activity entry as a feed sentence.

    >>> format_action({'action': 'commented', 'actor': {'name': 'Ada'}}, 'item')
    'Ada added a comment'
    """
    actor_name = (activity.get('actor') or {}).get('name') or 'Anonymous'
    before = activity.get('before_data') or {}
    after = activity.get('after_data') or {}
    action = activity.get('action')

    if action == 'created':
        return f"{actor_name} created this {target_type}"
    if action == 'updated':
        return f"{actor_name} updated this {target_type}"
    if action == 'assigned':
        return f"{actor_name} assigned this {target_type}"
    if action == 'status_changed':
        return f'{actor_name} changed status from "{before.get("status")}" to "{after.get("status")}"'
    if action == 'moved':
        return f'{actor_name} moved task from "{before.get("stage")}" to "{after.get("stage")}"'
    if action == 'commented':
        return f"{actor_name} added a comment"
    return f"{actor_name} performed action: {action}"


def get_activity_logger(session, user_id: str = None) -> ActivityLogger:
    """
    Factory function to create an ActivityLogger instance.

    Args:
        session: SQLAlchemy database session
        user_id: Optional id of the acting user

    Returns:
        ActivityLogger instance
    """
    return ActivityLogger(session, user_id)
