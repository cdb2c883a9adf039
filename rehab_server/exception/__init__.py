from rehab_server.exception.UnauthorizedError import UnauthorizedError
from rehab_server.exception.ForbiddenError import ForbiddenError
from rehab_server.exception.NotFoundError import NotFoundError

__all__ = ['UnauthorizedError', 'ForbiddenError', 'NotFoundError']
