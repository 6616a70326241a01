"""
Database package for LegalFlow.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    init_engine,
    get_engine,
    get_db_session,
    init_db,
    check_db_connection
)

from database.models import (
    User,
    Section,
    Tag,
    Stage,
    Item,
    LegalMeta,
    DealMeta,
    RealEstateMeta,
    Task,
    Comment,
    ActivityLog,
    SystemSetting
)

__all__ = [
    # Connection
    'Base',
    'init_engine',
    'get_engine',
    'get_db_session',
    'init_db',
    'check_db_connection',
    # Models
    'User',
    'Section',
    'Tag',
    'Stage',
    'Item',
    'LegalMeta',
    'DealMeta',
    'RealEstateMeta',
    'Task',
    'Comment',
    'ActivityLog',
    'SystemSetting'
]
