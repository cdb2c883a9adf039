"""Socket event error reporting.

Handlers never let an exception escape; failures become a `chat:error`
event to the calling socket only.
"""
import functools
import logging

from flask_socketio import emit
from pymongo.errors import PyMongoError

from rehab_server.exception import UnauthorizedError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

EVENT_ERROR = 'chat:error'


def error_code(exc: Exception) -> str:
    if isinstance(exc, UnauthorizedError):
        return 'UNAUTHORIZED'
    if isinstance(exc, ForbiddenError):
        return 'FORBIDDEN'
    if isinstance(exc, NotFoundError):
        return 'NOT_FOUND'
    if isinstance(exc, ValueError):
        return 'INVALID_DATA'
    if isinstance(exc, PyMongoError):
        return 'SERVICE_UNAVAILABLE'
    return 'SERVER_ERROR'


def emit_error(code: str, message: str, temp_id=None):
    emit(EVENT_ERROR, {'code': code, 'message': message, 'tempId': temp_id})


def socket_event(func):
    """Run a socket handler, reporting any failure as `chat:error`."""
    @functools.wraps(func)
    def wrapper(data=None):
        data = data if isinstance(data, dict) else {}
        temp_id = data.get('tempId')
        try:
            return func(data)
        except (UnauthorizedError, ForbiddenError, NotFoundError, ValueError) as e:
            logger.warning(f"{func.__name__} rejected: {e}")
            emit_error(error_code(e), str(e), temp_id)
        except PyMongoError as e:
            logger.warning(f"{func.__name__} store failure: {e}")
            emit_error('SERVICE_UNAVAILABLE', 'Service temporarily unavailable, please retry', temp_id)
        except Exception:
            logger.exception(f"Unexpected error in {func.__name__}")
            emit_error('SERVER_ERROR', 'Server error', temp_id)
        return None
    return wrapper
