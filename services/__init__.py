"""
Services package for LegalFlow.
Contains repository classes for database access and the pure domain
helpers behind the kanban board, task tree and calendar.
"""

from services.users_repository import UsersRepository
from services.item_repository import ItemRepository
from services.task_repository import TaskRepository
from services.comment_repository import CommentRepository
from services.settings_repository import SettingsRepository
from services.lookups_repository import SectionRepository, TagRepository, StageRepository
from services.activity_logger import ActivityLogger, get_activity_logger

__all__ = [
    'UsersRepository',
    'ItemRepository',
    'TaskRepository',
    'CommentRepository',
    'SettingsRepository',
    'SectionRepository',
    'TagRepository',
    'StageRepository',
    'ActivityLogger',
    'get_activity_logger'
]
