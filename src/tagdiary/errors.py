"""Error types raised by the diary core and its storage adapters."""


class DiaryError(Exception):
    """Base class for diary errors."""

    pass


class NotAuthenticated(DiaryError):
    """Raised when no owner is bound or the store rejects the owner's credentials."""

    pass


class StoreUnavailable(DiaryError):
    """Raised when the backing store cannot be reached. Callers decide whether to retry."""

    pass


class MalformedDate(DiaryError, ValueError):
    """Raised when a date key cannot be parsed."""

    pass
