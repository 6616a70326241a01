"""
Item Repository - Database operations for items (cases, deals, properties).
"""

import logging
from typing import List, Dict, Optional, Any
from datetime import datetime
from sqlalchemy.orm import Session, selectinload

from database.models import (
    Item, User, Tag, Task, Comment, LegalMeta, DealMeta, RealEstateMeta
)
from database.seed import ensure_sections_exist
from validators import (
    ValidationError, parse_date, sanitize_string, clean_string_list
)

logger = logging.getLogger(__name__)

ITEM_FIELDS = ['section_id', 'title', 'description', 'status', 'priority',
               'start_date', 'due_date', 'external_links', 'attachments',
               'custom_fields']

# section id -> (payload key, model, writable columns)
SECTION_META = {
    'legal': ('legal_meta', LegalMeta,
              ['department', 'jurisdictions', 'parties', 'case_numbers',
               'docket_monitoring', 'critical_dates', 'document_workflow']),
    'deals': ('deal_meta', DealMeta,
              ['deal_name', 'involved_parties', 'business_nature',
               'contact_details', 'proposed_activities']),
    'real-estate': ('real_estate_meta', RealEstateMeta,
                    ['contact_persons', 'business_nature', 'city_approvals',
                     'contact_details', 'documents']),
}

# Free-text lists whose blank entries are dropped on save
META_STRING_LISTS = {'case_numbers', 'involved_parties', 'contact_persons'}


def resolve_users(session: Session, user_ids: List[str]) -> List[User]:
    """Load users for a list of ids, warning about ids that do not exist."""
    if not user_ids:
        return []
    users = session.query(User).filter(User.id.in_(user_ids)).all()
    if len(users) != len(set(user_ids)):
        found = {u.id for u in users}
        logger.warning(f"Ignoring unknown assignee ids: {[i for i in user_ids if i not in found]}")
    return users


def resolve_tags(session: Session, tag_ids: List[str]) -> List[Tag]:
    """Load tags for a list of ids, warning about ids that do not exist."""
    if not tag_ids:
        return []
    tags = session.query(Tag).filter(Tag.id.in_(tag_ids)).all()
    if len(tags) != len(set(tag_ids)):
        found = {t.id for t in tags}
        logger.warning(f"Ignoring unknown tag ids: {[i for i in tag_ids if i not in found]}")
    return tags


class ItemRepository:
    """Repository for item database operations."""

    def __init__(self, session: Session, actor_id: str = None):
        self.session = session
        self.actor_id = actor_id

    def _query(self):
        return self.session.query(Item).options(
            selectinload(Item.assignees),
            selectinload(Item.tags),
            selectinload(Item.legal_meta),
            selectinload(Item.deal_meta),
            selectinload(Item.real_estate_meta),
        )

    def _get_model(self, item_id: str) -> Optional[Item]:
        return self._query().filter(Item.id == item_id).first()

    def list_items(self, section_id: str = None) -> List[Dict]:
        """List items newest first, optionally for one section."""
        ensure_sections_exist(self.session)

        query = self._query()
        if section_id:
            query = query.filter(Item.section_id == section_id)

        items = query.order_by(Item.created_at.desc()).all()
        return [item.to_dict() for item in items]

    def get_item(self, item_id: str) -> Optional[Dict]:
        """Get a single item by ID."""
        item = self._get_model(item_id)
        return item.to_dict() if item else None

    def create_item(self, data: Dict) -> Dict:
        """Create a new item with its assignees and tags."""
        ensure_sections_exist(self.session)

        item = Item(
            section_id=data['section_id'],
            title=sanitize_string(data['title'], max_length=500),
            description=data.get('description') or '',
            status=data.get('status') or 'active',
            priority=data.get('priority') or 'normal',
            start_date=parse_date(data.get('start_date')),
            due_date=parse_date(data.get('due_date')),
            external_links=clean_string_list(data.get('external_links')),
            attachments=data.get('attachments') or [],
            custom_fields=data.get('custom_fields') or {},
            created_by=self.actor_id,
            updated_by=self.actor_id,
        )
        item.assignees = resolve_users(self.session, data.get('assignee_ids') or [])
        item.tags = resolve_tags(self.session, data.get('tag_ids') or [])

        self.session.add(item)
        self.session.flush()
        logger.info(f"Created item: {item.id} in section {item.section_id}")
        return item.to_dict()

    def update_item(self, item_id: str, updates: Dict) -> Optional[Dict]:
        """
        Update an item.

        assignee_ids / tag_ids replace the join rows entirely when present,
        even when empty; absent keys leave them untouched.
        """
        ensure_sections_exist(self.session)

        item = self._get_model(item_id)
        if not item:
            return None

        for field in ITEM_FIELDS:
            if field not in updates:
                continue
            value = updates[field]
            if field in ('start_date', 'due_date'):
                value = parse_date(value)
            elif field == 'title':
                value = sanitize_string(value, max_length=500)
            elif field == 'external_links':
                value = clean_string_list(value)
            setattr(item, field, value)

        if 'assignee_ids' in updates:
            item.assignees = resolve_users(self.session, updates['assignee_ids'] or [])
        if 'tag_ids' in updates:
            item.tags = resolve_tags(self.session, updates['tag_ids'] or [])

        item.updated_by = self.actor_id
        item.updated_at = datetime.utcnow()
        self.session.flush()
        logger.info(f"Updated item: {item_id}")
        return item.to_dict()

    def delete_item(self, item_id: str) -> bool:
        """Delete an item with its tasks, metadata and comments."""
        item = self.session.query(Item).filter(Item.id == item_id).first()
        if not item:
            return False

        task_ids = [row[0] for row in
                    self.session.query(Task.id).filter(Task.item_id == item_id).all()]

        self.session.query(Comment).filter(
            Comment.parent_type == 'item', Comment.parent_id == item_id
        ).delete(synchronize_session=False)
        if task_ids:
            self.session.query(Comment).filter(
                Comment.parent_type == 'task', Comment.parent_id.in_(task_ids)
            ).delete(synchronize_session=False)

        self.session.delete(item)
        self.session.flush()
        logger.info(f"Deleted item: {item_id} ({len(task_ids)} tasks)")
        return True

    # ------------------------------------------------------------------
    # Section metadata
    # ------------------------------------------------------------------

    def save_section_meta(self, item_id: str, section_id: str, meta: Dict) -> Optional[Dict]:
        """
        Upsert the metadata row matching the item's section.

        Returns:
            The saved metadata, or None for sections without metadata

        Raises:
            ValidationError: If the payload is not an object
        """
        if section_id not in SECTION_META:
            return None
        if not isinstance(meta, dict):
            raise ValidationError("Section metadata must be an object", 'meta')

        _, model, columns = SECTION_META[section_id]
        row = self.session.query(model).filter(model.item_id == item_id).first()
        if row is None:
            row = model(item_id=item_id)
            self.session.add(row)

        for column in columns:
            if column not in meta:
                continue
            value = meta[column]
            if column in META_STRING_LISTS:
                value = clean_string_list(value)
            elif isinstance(value, str) and not value.strip():
                value = None
            setattr(row, column, value)

        self.session.flush()
        logger.info(f"Saved {section_id} metadata for item {item_id}")
        return row.to_dict()

    def apply_section_meta(self, item: Dict, payload: Dict) -> Dict:
        """
        Save the section metadata carried in an item payload.

        A failed metadata save is logged and leaves the item save intact.

        Returns:
            The item reloaded with its metadata
        """
        entry = SECTION_META.get(item['section_id'])
        if not entry or not isinstance(payload.get(entry[0]), dict):
            return item

        try:
            with self.session.begin_nested():
                self.save_section_meta(item['id'], item['section_id'], payload[entry[0]])
        except Exception as e:
            logger.warning(f"Metadata not saved for item {item['id']}: {e}")

        self.session.expire_all()
        return self.get_item(item['id'])


def _matches_text(item: Dict, query: str) -> bool:
    query = query.lower()
    return (
        query in (item.get('title') or '').lower()
        or query in (item.get('description') or '').lower()
        or any(query in (a.get('name') or '').lower() for a in item.get('assignees') or [])
        or any(query in (t.get('name') or '').lower() for t in item.get('tags') or [])
    )


def _created_on(item: Dict):
    created = item.get('created_at')
    if not created:
        return None
    return datetime.fromisoformat(created)


def filter_items(items: List[Dict], filters: Dict[str, Any], section_id: str = None) -> List[Dict]:
    """
    Filter serialized items the way the section list view does.

    Supported keys: search, status[], priority[], assignees[], tags[],
    selected_tag, selected_department (legal only), selected_assignee,
    date_start, date_end (compared with created_at).
    """
    search = (filters.get('search') or '').strip()
    statuses = filters.get('status') or []
    priorities = filters.get('priority') or []
    assignees = filters.get('assignees') or []
    tags = filters.get('tags') or []
    selected_tag = filters.get('selected_tag')
    selected_department = filters.get('selected_department')
    selected_assignee = filters.get('selected_assignee')
    date_start = filters.get('date_start')
    date_end = filters.get('date_end')

    start = datetime.combine(parse_date(date_start), datetime.min.time()) if date_start else None
    end = datetime.combine(parse_date(date_end), datetime.min.time()) if date_end else None

    result = []
    for item in items:
        assignee_ids = {a['id'] for a in item.get('assignees') or []}
        tag_ids = {t['id'] for t in item.get('tags') or []}

        if search and not _matches_text(item, search):
            continue
        if statuses and item.get('status') not in statuses:
            continue
        if priorities and item.get('priority') not in priorities:
            continue
        if assignees and not assignee_ids.intersection(assignees):
            continue
        if tags and not tag_ids.intersection(tags):
            continue
        if selected_tag and selected_tag not in tag_ids:
            continue
        if selected_department and section_id == 'legal':
            if (item.get('legal_meta') or {}).get('department') != selected_department:
                continue
        if selected_assignee and selected_assignee not in assignee_ids:
            continue
        if start or end:
            created = _created_on(item)
            if created is None:
                continue
            if start and created < start:
                continue
            if end and created > end:
                continue

        result.append(item)
    return result
