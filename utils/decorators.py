from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from api.errors import ServiceErrorResponse
from models import storage
from models.user import User
from services.errors import unauthorized

ACCESS_COOKIE = "accessToken"


def _presented_access_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip()
    return request.cookies.get(ACCESS_COOKIE)


def jwt_required():
    """
    Require a valid access token (cookie, or Authorization: Bearer header).
    Sets g.current_user and g.current_user_id for the view.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            sessions = current_app.extensions["session_service"]
            result = sessions.authenticate(_presented_access_token())
            if not result.is_ok:
                raise ServiceErrorResponse(result.error)

            user = storage.get(User, result.value)
            if not user:
                raise ServiceErrorResponse(unauthorized("Invalid or expired access token"))
            g.current_user = user
            g.current_user_id = user.id
            return fn(*args, **kwargs)

        return wrapper

    return decorator
