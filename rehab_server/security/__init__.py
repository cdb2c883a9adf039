from rehab_server.security.authentication import AuthSecurity, get_auth_payload, extract_bearer_token
from rehab_server.security.session import Session, require_session, session_from_payload

__all__ = [
    'AuthSecurity', 'get_auth_payload', 'extract_bearer_token',
    'Session', 'require_session', 'session_from_payload'
]
