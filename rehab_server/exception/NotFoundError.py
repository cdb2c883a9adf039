class NotFoundError(Exception):
    """Raised when a listing, review, message or media object does not exist."""
    def __init__(self, message='Not found'):
        super().__init__(message)
