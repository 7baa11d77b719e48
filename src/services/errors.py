"""
Domain errors raised by services and repositories.

Routes translate them into HTTP responses; nothing below the route layer
knows about status codes.
"""


class LogbookError(Exception):
    """Base class for logbook errors"""


class ValidationError(LogbookError):
    """Malformed input (bad code format, wrong field count, day out of range)"""


class NotFoundError(LogbookError):
    """Requested participant or entry does not exist"""


class DuplicateError(LogbookError):
    """Participant code already in use"""


class PersistenceError(LogbookError):
    """Backend call failed"""
