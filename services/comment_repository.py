"""
Comment Repository - Comments on items and tasks, with @mentions.
"""

import re
import logging
from typing import List, Dict
from sqlalchemy.orm import Session, selectinload

from database.models import Comment, Item, Task, User
from validators import ValidationError

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r'@(\w+)', re.ASCII)

PARENT_MODELS = {'item': Item, 'task': Task}


def extract_mentions(body: str, users: List[Dict]) -> List[str]:
    """
    Resolve @word tokens to user ids.

    Each token maps to the first user whose name or email contains it,
    case-insensitively. Unresolved tokens are ignored and each user is
    listed once.
    """
    mentions = []
    for token in MENTION_PATTERN.findall(body or ''):
        needle = token.lower()
        match = next(
            (u for u in users
             if needle in (u.get('name') or '').lower()
             or needle in (u.get('email') or '').lower()),
            None
        )
        if match and match['id'] not in mentions:
            mentions.append(match['id'])
    return mentions


class CommentRepository:
    """Repository for comment database operations."""

    def __init__(self, session: Session, actor_id: str = None):
        self.session = session
        self.actor_id = actor_id

    def list_comments(self, parent_type: str, parent_id: str) -> List[Dict]:
        """Comments on one item or task, oldest first."""
        comments = self.session.query(Comment).options(
            selectinload(Comment.author)
        ).filter(
            Comment.parent_type == parent_type,
            Comment.parent_id == parent_id
        ).order_by(Comment.created_at.asc()).all()
        return [c.to_dict() for c in comments]

    def parent_exists(self, parent_type: str, parent_id: str) -> bool:
        model = PARENT_MODELS.get(parent_type)
        if model is None:
            return False
        return self.session.query(model.id).filter(model.id == parent_id).first() is not None

    def create_comment(self, parent_type: str, parent_id: str, body: str) -> Dict:
        """
        Create a comment authored by the current actor.

        Raises:
            ValidationError: If the body is blank or the parent is missing
        """
        body = (body or '').strip()
        if not body:
            raise ValidationError("Comment cannot be empty", 'body')
        if not self.parent_exists(parent_type, parent_id):
            raise ValidationError(f"{parent_type.capitalize()} not found", 'parent_id')

        users = [u.to_dict() for u in
                 self.session.query(User).order_by(User.created_at.asc()).all()]

        comment = Comment(
            parent_type=parent_type,
            parent_id=parent_id,
            author_id=self.actor_id,
            body=body,
            mentions=extract_mentions(body, users)
        )
        self.session.add(comment)
        self.session.flush()
        logger.info(f"Created comment {comment.id} on {parent_type}:{parent_id} "
                    f"({len(comment.mentions)} mentions)")
        return comment.to_dict()
