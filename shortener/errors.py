"""Exceptions raised by the shortening service and its storage backends.

Classes:
    ShortenerError:
        Generic base class for shortener exceptions.

    ValidationError:
        Raised when caller input is empty or malformed. Never retried.

    NotFoundError:
        Raised when no record exists for a short code.

    GoneError:
        Raised when the record for a short code exists but is tombstoned.

    ShortCodeCollisionError:
        Raised when a short code is already bound to a different URL.

    BackendError:
        Raised on I/O or connectivity failures of a storage backend.

Example:
    >>> from shortener.errors import GoneError
    >>> raise GoneError("Short URL with code 'abc123' was deleted.")
    Traceback (most recent call last):
        ...
    shortener.errors.GoneError: Short URL with code 'abc123' was deleted.
"""


class ShortenerError(Exception):
    """Generic base class for shortener exceptions."""

    pass


class ValidationError(ShortenerError):
    """Exception raised when caller input is empty or malformed."""

    pass


class NotFoundError(ShortenerError):
    """Exception raised when a short code has no record."""

    pass


class GoneError(ShortenerError):
    """Exception raised when a short code's record is tombstoned."""

    pass


class ShortCodeCollisionError(ShortenerError):
    """Exception raised when a short code already maps to a different URL."""

    pass


class BackendError(ShortenerError):
    """Exception raised when a storage backend fails.

    e.g. file write errors, lost database connections, timeouts, etc.
    """

    pass
