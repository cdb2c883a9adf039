class UnauthorizedError(Exception):
    """Raised when there is no authenticated session or the token is invalid, expired, or malformed."""
    def __init__(self, message='Not authenticated'):
        super().__init__(message)
