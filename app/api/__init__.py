"""
API Blueprints Package

All HTTP route handlers for the application, organized by domain.
Each module defines a Flask Blueprint registered in app/__init__.py.

BLUEPRINT REFERENCE:
====================

Records:
- items.py       : Items per section, section metadata (/api/items/*)
- tasks.py       : Hierarchical tasks, tree and parent options (/api/tasks/*)
- kanban.py      : Stage board and task moves (/api/kanban/*)
- comments.py    : Comments with @mentions (/api/comments)
- activity.py    : Activity feed (/api/activity)
- calendar.py    : Due-date events and rescheduling (/api/calendar/*)

People & Settings:
- auth_routes.py : Login / logout / current user (/api/auth/*)
- users.py       : User management (/api/users/*)
- lookups.py     : Sections, tags, stages
- admin.py       : System option lists (/api/admin/*)

Health endpoints live in health_checks.py at the project root.
"""

# All blueprints are imported and registered in app/__init__.py
# This file serves as documentation only

__all__ = []
