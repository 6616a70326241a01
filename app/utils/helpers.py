"""
Helper utilities shared by the API blueprints: request parsing and the
auth wrappers used on routes.
"""

from functools import wraps
from flask import request, jsonify

from validators import ValidationError


def get_auth():
    """Get auth module - imported lazily to avoid circular imports"""
    import auth
    return auth


def get_json_body():
    """
    Request JSON as a dict.

    A missing or non-JSON body yields an empty dict so validators can
    report the missing fields. Any other JSON value (an array, a string)
    raises ValidationError.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def query_list(name):
    """
    Read a list query parameter, accepting both repeated keys
    (?tags=a&tags=b) and comma-separated values (?tags=a,b).
    """
    values = []
    for raw in request.args.getlist(name):
        values.extend(v.strip() for v in raw.split(',') if v.strip())
    return values


def query_bool(name, default=False):
    """Read a boolean query parameter ('true', '1', 'yes' are truthy)."""
    value = request.args.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('true', '1', 'yes', 'on')


def current_user():
    """The logged in user as a dict, or None"""
    return get_auth().get_current_user()


def login_required_wrapper(f):
    """Wrapper for login_required that works with blueprint"""
    @wraps(f)
    def decorated(*args, **kwargs):
        return get_auth().login_required(f)(*args, **kwargs)
    return decorated


def admin_required_wrapper(f):
    """Wrapper for admin_required that works with blueprint"""
    @wraps(f)
    def decorated(*args, **kwargs):
        return get_auth().admin_required(f)(*args, **kwargs)
    return decorated


def permission_required_wrapper(check_name):
    """
    Wrapper for permission_required that works with blueprint.
    check_name names a record-independent check in auth, e.g. 'can_create_item'.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            auth = get_auth()
            return auth.permission_required(getattr(auth, check_name))(f)(*args, **kwargs)
        return decorated
    return decorator


def forbidden(message='Permission denied'):
    return jsonify({'success': False, 'error': message}), 403


def not_found(entity):
    return jsonify({'success': False, 'error': f'{entity} not found'}), 404


def bad_request(message, field=None):
    body = {'success': False, 'error': message}
    if field:
        body['field'] = field
    return jsonify(body), 400
