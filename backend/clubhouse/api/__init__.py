from functools import wraps

from flask import request
from flask_login import current_user, login_required

from clubhouse.errors import InvalidInputError, PermissionDeniedError


def admin_required(view):
    @wraps(view)
    @login_required
    def wrapper(*args, **kwargs):
        if not current_user.is_admin:
            raise PermissionDeniedError('Administrator access required.')
        return view(*args, **kwargs)
    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError('Request body must be a JSON object.')
    return data
