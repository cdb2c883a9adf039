class ForbiddenError(Exception):
    """Raised when an authenticated user mutates a record they do not own."""
    def __init__(self, message='Not allowed'):
        super().__init__(message)
