"""Initial database schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18

Creates all core tables for LegalFlow.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    # Users table
    op.create_table('users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255)),
        sa.Column('role', sa.String(20), default='staff'),
        sa.Column('active', sa.Boolean(), default=True),
        sa.Column('notification_prefs', JSONType),
        sa.Column('force_password_change', sa.Boolean(), default=False),
        sa.Column('timezone', sa.String(64)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_email', 'users', ['email'])

    # Sections table
    op.create_table('sections',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(50), nullable=False),
        sa.Column('icon', sa.String(50)),
        sa.Column('color', sa.String(20)),
        sa.Column('created_at', sa.DateTime()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )

    # Tags table
    op.create_table('tags',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20)),
        sa.Column('created_at', sa.DateTime()),
        sa.PrimaryKeyConstraint('id')
    )

    # Stages table
    op.create_table('stages',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('section_id', sa.String(50)),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('order', sa.Integer(), default=0),
        sa.Column('is_global', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime()),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id']),
        sa.PrimaryKeyConstraint('id')
    )

    # Items table
    op.create_table('items',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('section_id', sa.String(50), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('status', sa.String(50)),
        sa.Column('priority', sa.String(20)),
        sa.Column('start_date', sa.Date()),
        sa.Column('due_date', sa.Date()),
        sa.Column('external_links', JSONType),
        sa.Column('attachments', JSONType),
        sa.Column('custom_fields', JSONType),
        sa.Column('created_by', sa.String(36)),
        sa.Column('updated_by', sa.String(36)),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_items_section', 'items', ['section_id'])
    op.create_index('ix_items_due_date', 'items', ['due_date'])

    # Section metadata tables (one row per item)
    op.create_table('legal_meta',
        sa.Column('item_id', sa.String(36), nullable=False),
        sa.Column('department', sa.String(255)),
        sa.Column('jurisdictions', JSONType),
        sa.Column('parties', JSONType),
        sa.Column('case_numbers', JSONType),
        sa.Column('docket_monitoring', sa.Boolean(), default=False),
        sa.Column('critical_dates', JSONType),
        sa.Column('document_workflow', JSONType),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('item_id')
    )

    op.create_table('deal_meta',
        sa.Column('item_id', sa.String(36), nullable=False),
        sa.Column('deal_name', sa.String(255)),
        sa.Column('involved_parties', JSONType),
        sa.Column('business_nature', sa.String(255)),
        sa.Column('contact_details', JSONType),
        sa.Column('proposed_activities', sa.Text()),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('item_id')
    )

    op.create_table('real_estate_meta',
        sa.Column('item_id', sa.String(36), nullable=False),
        sa.Column('contact_persons', JSONType),
        sa.Column('business_nature', sa.String(255)),
        sa.Column('city_approvals', JSONType),
        sa.Column('contact_details', JSONType),
        sa.Column('documents', JSONType),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('item_id')
    )

    # Tasks table
    op.create_table('tasks',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('item_id', sa.String(36), nullable=False),
        sa.Column('parent_task_id', sa.String(36)),
        sa.Column('task_level', sa.Integer(), default=0),
        sa.Column('task_order', sa.Integer(), default=0),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('stage', sa.String(100), nullable=False),
        sa.Column('priority', sa.String(20)),
        sa.Column('status', sa.String(50)),
        sa.Column('start_date', sa.DateTime()),
        sa.Column('due_date', sa.DateTime()),
        sa.Column('estimate_hours', sa.Float()),
        sa.Column('actual_hours', sa.Float()),
        sa.Column('external_links', JSONType),
        sa.Column('attachments', JSONType),
        sa.Column('dependencies', JSONType),
        sa.Column('archived', sa.Boolean(), default=False),
        sa.Column('created_by', sa.String(36)),
        sa.Column('updated_by', sa.String(36)),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_task_id'], ['tasks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tasks_item', 'tasks', ['item_id'])
    op.create_index('ix_tasks_parent', 'tasks', ['parent_task_id'])
    op.create_index('ix_tasks_stage', 'tasks', ['stage'])

    # Join tables
    for name, left, left_table, right, right_table in (
        ('item_assignees', 'item_id', 'items', 'user_id', 'users'),
        ('item_tags', 'item_id', 'items', 'tag_id', 'tags'),
        ('task_assignees', 'task_id', 'tasks', 'user_id', 'users'),
        ('task_tags', 'task_id', 'tasks', 'tag_id', 'tags'),
    ):
        op.create_table(name,
            sa.Column(left, sa.String(36), nullable=False),
            sa.Column(right, sa.String(36), nullable=False),
            sa.ForeignKeyConstraint([left], [f'{left_table}.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint([right], [f'{right_table}.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint(left, right)
        )

    # Comments table
    op.create_table('comments',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('parent_type', sa.String(20), nullable=False),
        sa.Column('parent_id', sa.String(36), nullable=False),
        sa.Column('author_id', sa.String(36)),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('mentions', JSONType),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_comments_parent', 'comments', ['parent_type', 'parent_id'])

    # Activity log table
    op.create_table('activity_logs',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('actor_id', sa.String(36)),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('target_type', sa.String(20), nullable=False),
        sa.Column('target_id', sa.String(36), nullable=False),
        sa.Column('before_data', JSONType),
        sa.Column('after_data', JSONType),
        sa.Column('metadata', JSONType),
        sa.Column('created_at', sa.DateTime()),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_activity_logs_target', 'activity_logs', ['target_type', 'target_id'])
    op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'])

    # System settings table
    op.create_table('system_settings',
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', JSONType),
        sa.Column('updated_at', sa.DateTime()),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    op.drop_table('system_settings')
    op.drop_index('ix_activity_logs_created_at', table_name='activity_logs')
    op.drop_index('ix_activity_logs_target', table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index('ix_comments_parent', table_name='comments')
    op.drop_table('comments')
    for name in ('task_tags', 'task_assignees', 'item_tags', 'item_assignees'):
        op.drop_table(name)
    op.drop_index('ix_tasks_stage', table_name='tasks')
    op.drop_index('ix_tasks_parent', table_name='tasks')
    op.drop_index('ix_tasks_item', table_name='tasks')
    op.drop_table('tasks')
    op.drop_table('real_estate_meta')
    op.drop_table('deal_meta')
    op.drop_table('legal_meta')
    op.drop_index('ix_items_due_date', table_name='items')
    op.drop_index('ix_items_section', table_name='items')
    op.drop_table('items')
    op.drop_table('stages')
    op.drop_table('tags')
    op.drop_table('sections')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
