"""Explicit session context.

Authenticated operations take a `Session` argument instead of reading a
global "current user"; `require_session` is the single place that turns a
missing session into an UnauthorizedError.
"""
from dataclasses import dataclass
from typing import Optional

from rehab_server.exception.UnauthorizedError import UnauthorizedError


@dataclass(frozen=True)
class Session:
    user_key: str
    display_name: Optional[str] = None


def require_session(session: Optional[Session]) -> Session:
    if session is None or not session.user_key:
        raise UnauthorizedError('Not authenticated')
    return session


def session_from_payload(payload: Optional[dict]) -> Session:
    """Build a session from a decoded token payload (`user_key`, optional `name`)."""
    if not payload:
        raise UnauthorizedError('Not authenticated')
    user_key = payload.get('user_key') or payload.get('sub')
    if not user_key:
        raise UnauthorizedError('Token has no user identity')
    return Session(user_key=str(user_key), display_name=payload.get('name') or payload.get('display_name'))
