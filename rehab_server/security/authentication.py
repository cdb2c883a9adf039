from datetime import datetime, timedelta, timezone
import time

from jose import jwt, JWTError

from rehab_server.exception.UnauthorizedError import UnauthorizedError

MALFORMED_TOKEN = "Malformed or missing token. Please provide a valid JWT token in the Authorization header."
EXPIRED_TOKEN = "Token expired. Please login again or refresh your session."


class AuthSecurity:
    secret_key = None
    algorithm = 'HS256'
    access_token_expire_minutes = 7 * 24 * 60

    @classmethod
    def configure(cls, secret_key, algorithm='HS256', access_token_expire_minutes=7 * 24 * 60):
        cls.secret_key = secret_key
        cls.algorithm = algorithm
        cls.access_token_expire_minutes = access_token_expire_minutes

    @classmethod
    def encode_token(cls, data: dict, expires_delta: timedelta = None) -> str:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=cls.access_token_expire_minutes))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, cls.secret_key, algorithm=cls.algorithm)

    @classmethod
    def decode_token(cls, token: str) -> dict:
        # a JWT has exactly three dot-separated segments
        if not token or token.count('.') != 2:
            raise UnauthorizedError(MALFORMED_TOKEN)
        try:
            payload = jwt.decode(token, cls.secret_key, algorithms=[cls.algorithm])
        except JWTError as e:
            msg = str(e)
            if 'expired' in msg.lower():
                raise UnauthorizedError(EXPIRED_TOKEN)
            elif 'Not enough segments' in msg or 'Invalid header string' in msg:
                raise UnauthorizedError(MALFORMED_TOKEN)
            elif 'Signature verification failed' in msg:
                raise UnauthorizedError("Invalid token signature. Please login again.")
            raise UnauthorizedError(f"Invalid token: {msg}")
        exp = payload.get('exp')
        if exp is not None and int(float(exp)) < int(time.time()):
            raise UnauthorizedError(EXPIRED_TOKEN)
        return payload


def extract_bearer_token(header_value):
    if not header_value or not header_value.startswith('Bearer '):
        raise UnauthorizedError('Missing or invalid token')
    return header_value.split(' ', 1)[1].strip()


def get_auth_payload(request):
    """
    Extracts and decodes the Bearer token from the Authorization header in the request.
    Raises UnauthorizedError if missing or invalid.
    Returns the decoded payload.
    """
    token = extract_bearer_token(request.headers.get('Authorization'))
    return AuthSecurity.decode_token(token)
