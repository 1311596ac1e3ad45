"""
Domain-specific exception hierarchy for the washbook application.
"""


class WashbookError(Exception):
    """Base class for all application-level errors."""


class DataSourceError(WashbookError):
    """Raised when working hours or change history cannot be fetched or parsed."""


class UnsortedHistoryError(WashbookError, ValueError):
    """Raised when change records are not in ascending ``created_at`` order."""
