"""
SQLAlchemy models for LegalFlow.
Defines the tables behind sections, items, tasks, comments and activity.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, DateTime, Date,
    ForeignKey, JSON, Table, Index
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, backref
from database.connection import Base


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in dev/tests)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


def generate_uuid():
    """Generate a new UUID."""
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


# =============================================================================
# JOIN TABLES
# =============================================================================

item_assignees = Table(
    'item_assignees', Base.metadata,
    Column('item_id', String(36), ForeignKey('items.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', String(36), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
)

item_tags = Table(
    'item_tags', Base.metadata,
    Column('item_id', String(36), ForeignKey('items.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', String(36), ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
)

task_assignees = Table(
    'task_assignees', Base.metadata,
    Column('task_id', String(36), ForeignKey('tasks.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', String(36), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
)

task_tags = Table(
    'task_tags', Base.metadata,
    Column('task_id', String(36), ForeignKey('tasks.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', String(36), ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
)


# =============================================================================
# USERS
# =============================================================================

class User(Base):
    """Staff members with a role from the fixed permission matrix."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255))
    role = Column(String(20), default='staff')  # admin, manager, staff, viewer
    active = Column(Boolean, default=True)
    notification_prefs = Column(JSONType, default=dict)
    force_password_change = Column(Boolean, default=False)
    timezone = Column(String(64), default='America/New_York')
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_users_email', 'email'),
    )

    def to_dict(self, include_sensitive=False):
        data = {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'active': self.active,
            'notification_prefs': self.notification_prefs or {},
            'force_password_change': self.force_password_change,
            'timezone': self.timezone,
            'last_login': _iso(self.last_login),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }
        if include_sensitive:
            data['password_hash'] = self.password_hash
        return data


# =============================================================================
# SECTIONS, TAGS, STAGES
# =============================================================================

class Section(Base):
    """One of the four fixed top-level domains. The id is the slug."""
    __tablename__ = 'sections'

    id = Column(String(50), primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(50), unique=True, nullable=False)
    icon = Column(String(50))
    color = Column(String(20))
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'icon': self.icon,
            'color': self.color,
            'created_at': _iso(self.created_at)
        }


class Tag(Base):
    __tablename__ = 'tags'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    color = Column(String(20), default='#6b7280')
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'created_at': _iso(self.created_at)
        }


class Stage(Base):
    """Kanban column. Global stages apply to every section."""
    __tablename__ = 'stages'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    section_id = Column(String(50), ForeignKey('sections.id'))
    name = Column(String(100), nullable=False)
    order = Column('order', Integer, default=0)
    is_global = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'section_id': self.section_id,
            'name': self.name,
            'order': self.order,
            'is_global': self.is_global,
            'created_at': _iso(self.created_at)
        }


# =============================================================================
# ITEMS
# =============================================================================

class Item(Base):
    """A case, deal, property or other record inside a section."""
    __tablename__ = 'items'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    section_id = Column(String(50), ForeignKey('sections.id'), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, default='')
    status = Column(String(50), default='active')
    priority = Column(String(20), default='normal')  # low, normal, high, urgent
    start_date = Column(Date)
    due_date = Column(Date)
    external_links = Column(JSONType, default=list)
    attachments = Column(JSONType, default=list)
    custom_fields = Column(JSONType, default=dict)
    created_by = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    updated_by = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    assignees = relationship('User', secondary=item_assignees, order_by='User.name')
    tags = relationship('Tag', secondary=item_tags, order_by='Tag.name')
    legal_meta = relationship('LegalMeta', uselist=False, cascade='all, delete-orphan')
    deal_meta = relationship('DealMeta', uselist=False, cascade='all, delete-orphan')
    real_estate_meta = relationship('RealEstateMeta', uselist=False, cascade='all, delete-orphan')
    tasks = relationship('Task', back_populates='item', cascade='all, delete-orphan')

    __table_args__ = (
        Index('ix_items_section', 'section_id'),
        Index('ix_items_due_date', 'due_date'),
    )

    def to_dict(self, include_relations=True):
        data = {
            'id': self.id,
            'section_id': self.section_id,
            'title': self.title,
            'description': self.description or '',
            'status': self.status,
            'priority': self.priority,
            'start_date': _iso(self.start_date),
            'due_date': _iso(self.due_date),
            'external_links': self.external_links or [],
            'attachments': self.attachments or [],
            'custom_fields': self.custom_fields or {},
            'created_by': self.created_by,
            'updated_by': self.updated_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }
        if include_relations:
            data['assignees'] = [u.to_dict() for u in self.assignees]
            data['tags'] = [t.to_dict() for t in self.tags]
            data['assignee_ids'] = [u.id for u in self.assignees]
            data['tag_ids'] = [t.id for t in self.tags]
            data['legal_meta'] = self.legal_meta.to_dict() if self.legal_meta else None
            data['deal_meta'] = self.deal_meta.to_dict() if self.deal_meta else None
            data['real_estate_meta'] = (
                self.real_estate_meta.to_dict() if self.real_estate_meta else None
            )
        return data


class LegalMeta(Base):
    __tablename__ = 'legal_meta'

    item_id = Column(String(36), ForeignKey('items.id', ondelete='CASCADE'), primary_key=True)
    department = Column(String(255))
    jurisdictions = Column(JSONType, default=list)
    parties = Column(JSONType, default=dict)
    case_numbers = Column(JSONType, default=list)
    docket_monitoring = Column(Boolean, default=False)
    critical_dates = Column(JSONType, default=list)
    document_workflow = Column(JSONType, default=list)

    def to_dict(self):
        parties = {'appellants': [], 'appellees': [], 'plaintiffs': [], 'defendants': []}
        parties.update(self.parties or {})
        return {
            'item_id': self.item_id,
            'department': self.department,
            'jurisdictions': self.jurisdictions or [],
            'parties': parties,
            'case_numbers': self.case_numbers or [],
            'docket_monitoring': bool(self.docket_monitoring),
            'critical_dates': self.critical_dates or [],
            'document_workflow': self.document_workflow or []
        }


class DealMeta(Base):
    __tablename__ = 'deal_meta'

    item_id = Column(String(36), ForeignKey('items.id', ondelete='CASCADE'), primary_key=True)
    deal_name = Column(String(255))
    involved_parties = Column(JSONType, default=list)
    business_nature = Column(String(255))
    contact_details = Column(JSONType, default=dict)
    proposed_activities = Column(Text)

    def to_dict(self):
        return {
            'item_id': self.item_id,
            'deal_name': self.deal_name,
            'involved_parties': self.involved_parties or [],
            'business_nature': self.business_nature,
            'contact_details': self.contact_details or {},
            'proposed_activities': self.proposed_activities
        }


class RealEstateMeta(Base):
    __tablename__ = 'real_estate_meta'

    item_id = Column(String(36), ForeignKey('items.id', ondelete='CASCADE'), primary_key=True)
    contact_persons = Column(JSONType, default=list)
    business_nature = Column(String(255))
    city_approvals = Column(JSONType, default=list)
    contact_details = Column(JSONType, default=dict)
    documents = Column(JSONType, default=list)

    def to_dict(self):
        return {
            'item_id': self.item_id,
            'contact_persons': self.contact_persons or [],
            'business_nature': self.business_nature,
            'city_approvals': self.city_approvals or [],
            'contact_details': self.contact_details or {},
            'documents': self.documents or []
        }


# =============================================================================
# TASKS
# =============================================================================

class Task(Base):
    """Unit of work on an item, optionally nested under a parent task."""
    __tablename__ = 'tasks'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    item_id = Column(String(36), ForeignKey('items.id', ondelete='CASCADE'), nullable=False)
    parent_task_id = Column(String(36), ForeignKey('tasks.id', ondelete='CASCADE'))
    task_level = Column(Integer, default=0)
    task_order = Column(Integer, default=0)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    stage = Column(String(100), nullable=False)  # Stage name, not id
    priority = Column(String(20), default='normal')
    status = Column(String(50), default='active')
    start_date = Column(DateTime)
    due_date = Column(DateTime)
    estimate_hours = Column(Float)
    actual_hours = Column(Float)
    external_links = Column(JSONType, default=list)
    attachments = Column(JSONType, default=list)
    dependencies = Column(JSONType, default=list)
    archived = Column(Boolean, default=False)
    created_by = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    updated_by = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    item = relationship('Item', back_populates='tasks')
    assignees = relationship('User', secondary=task_assignees, order_by='User.name')
    tags = relationship('Tag', secondary=task_tags, order_by='Tag.name')
    children = relationship(
        'Task',
        backref=backref('parent', remote_side=[id]),
        cascade='all, delete'
    )

    __table_args__ = (
        Index('ix_tasks_item', 'item_id'),
        Index('ix_tasks_parent', 'parent_task_id'),
        Index('ix_tasks_stage', 'stage'),
    )

    def to_dict(self, include_relations=True):
        data = {
            'id': self.id,
            'item_id': self.item_id,
            'parent_task_id': self.parent_task_id,
            'task_level': self.task_level or 0,
            'task_order': self.task_order or 0,
            'title': self.title,
            'description': self.description,
            'stage': self.stage,
            'priority': self.priority,
            'status': self.status,
            'start_date': _iso(self.start_date),
            'due_date': _iso(self.due_date),
            'estimate_hours': self.estimate_hours,
            'actual_hours': self.actual_hours,
            'external_links': self.external_links or [],
            'attachments': self.attachments or [],
            'dependencies': self.dependencies or [],
            'archived': bool(self.archived),
            'created_by': self.created_by,
            'updated_by': self.updated_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }
        if include_relations:
            data['assignees'] = [u.to_dict() for u in self.assignees]
            data['tags'] = [t.to_dict() for t in self.tags]
            data['assignee_ids'] = [u.id for u in self.assignees]
            data['tag_ids'] = [t.id for t in self.tags]
            data['item'] = self.item.to_dict(include_relations=False) if self.item else None
        return data


# =============================================================================
# COMMENTS & ACTIVITY
# =============================================================================

class Comment(Base):
    """Comment on an item or a task."""
    __tablename__ = 'comments'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    parent_type = Column(String(20), nullable=False)  # item, task
    parent_id = Column(String(36), nullable=False)
    author_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    body = Column(Text, nullable=False)
    mentions = Column(JSONType, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship('User')

    __table_args__ = (
        Index('ix_comments_parent', 'parent_type', 'parent_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'parent_type': self.parent_type,
            'parent_id': self.parent_id,
            'author_id': self.author_id,
            'body': self.body,
            'mentions': self.mentions or [],
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'author': self.author.to_dict() if self.author else None
        }


class ActivityLog(Base):
    """Audit trail entry shown in the activity feed."""
    __tablename__ = 'activity_logs'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    actor_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    action = Column(String(50), nullable=False)  # created, updated, moved, deleted, commented...
    target_type = Column(String(20), nullable=False)
    target_id = Column(String(36), nullable=False)
    before_data = Column(JSONType)
    after_data = Column(JSONType)
    extra_data = Column('metadata', JSONType, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    actor = relationship('User')

    __table_args__ = (
        Index('ix_activity_logs_target', 'target_type', 'target_id'),
        Index('ix_activity_logs_created_at', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'actor_id': self.actor_id,
            'action': self.action,
            'target_type': self.target_type,
            'target_id': self.target_id,
            'before_data': self.before_data,
            'after_data': self.after_data,
            'metadata': self.extra_data or {},
            'created_at': _iso(self.created_at),
            'actor': self.actor.to_dict() if self.actor else None
        }


# =============================================================================
# SYSTEM SETTINGS
# =============================================================================

class SystemSetting(Base):
    """Admin-editable option lists, one row per list."""
    __tablename__ = 'system_settings'

    key = Column(String(100), primary_key=True)
    value = Column(JSONType, default=list)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'key': self.key,
            'value': self.value,
            'updated_at': _iso(self.updated_at)
        }
