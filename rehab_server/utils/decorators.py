"""Route decorators for error handling and authentication.

Handlers wrapped by `require_auth` receive the caller as a `session`
keyword argument.
"""
import functools
import logging
from typing import Callable

from flask import request
from pymongo.errors import PyMongoError

from rehab_server.exception import UnauthorizedError, ForbiddenError, NotFoundError
from rehab_server.security.authentication import get_auth_payload
from rehab_server.security.session import session_from_payload
from rehab_server.utils.helpers import respond_error

logger = logging.getLogger(__name__)


def handle_errors(func: Callable) -> Callable:
    """Decorator to handle common exceptions in route handlers.

    Catches:
    - UnauthorizedError -> 401
    - ForbiddenError -> 403
    - NotFoundError -> 404
    - ValueError -> 400
    - PyMongoError -> 503 (store unavailable, retryable)
    - Other exceptions -> 500
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UnauthorizedError as e:
            logger.warning("Unauthorized: %s", e)
            return respond_error(str(e), status=401)
        except ForbiddenError as e:
            logger.warning("Forbidden: %s", e)
            return respond_error(str(e), status=403)
        except NotFoundError as e:
            return respond_error(str(e), status=404)
        except ValueError as e:
            logger.warning("Validation error: %s", e)
            return respond_error(str(e), status=400)
        except PyMongoError as e:
            logger.warning("Database unavailable in %s: %s", func.__name__, e)
            return respond_error('Service temporarily unavailable, please retry', status=503)
        except Exception:
            logger.exception("Unexpected error in %s", func.__name__)
            return respond_error('Server error', status=500)
    return wrapper


def require_auth(func: Callable) -> Callable:
    """Decorator to require authentication and inject the caller's session.

    Usage:
        @bp.route('/protected')
        @require_auth
        def protected(session):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        payload = get_auth_payload(request)
        kwargs['session'] = session_from_payload(payload)
        return func(*args, **kwargs)
    return wrapper
