"""
Utilities Package

Shared helper functions used across the API blueprints.
"""

from app.utils.helpers import (
    get_auth,
    get_json_body,
    query_list,
    query_bool,
    current_user,
    login_required_wrapper,
    admin_required_wrapper,
    permission_required_wrapper,
    forbidden,
    not_found,
    bad_request,
)

__all__ = [
    'get_auth',
    'get_json_body',
    'query_list',
    'query_bool',
    'current_user',
    'login_required_wrapper',
    'admin_required_wrapper',
    'permission_required_wrapper',
    'forbidden',
    'not_found',
    'bad_request',
]
