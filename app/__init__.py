"""
LegalFlow - Application Package

This package contains the modular backend structure:
- api/: HTTP route handlers (Flask Blueprints)
- utils/: Shared request helpers and auth wrappers

The app factory and core Flask setup remain in app_init.py at the project root.
Business logic and repositories live in the top-level services/ package.
"""

import logging

logger = logging.getLogger(__name__)

# Import blueprints
from app.api.auth_routes import auth_bp
from app.api.users import users_bp
from app.api.lookups import lookups_bp
from app.api.items import items_bp
from app.api.tasks import tasks_bp
from app.api.kanban import kanban_bp
from app.api.comments import comments_bp
from app.api.activity import activity_bp
from app.api.calendar import calendar_bp
from app.api.admin import admin_bp

BLUEPRINTS = [
    auth_bp,
    users_bp,
    lookups_bp,
    items_bp,
    tasks_bp,
    kanban_bp,
    comments_bp,
    activity_bp,
    calendar_bp,
    admin_bp,
]


def register_blueprints(app):
    """
    Register all API blueprints with the Flask app.
    Called from app_init.create_app after infrastructure setup.

    Args:
        app: Flask application instance
    """
    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)
    logger.info(f"Registered {len(BLUEPRINTS)} API blueprints")


__all__ = ['register_blueprints', 'BLUEPRINTS', 'auth_bp', 'users_bp', 'lookups_bp', 'items_bp',
           'tasks_bp', 'kanban_bp', 'comments_bp', 'activity_bp', 'calendar_bp', 'admin_bp']
