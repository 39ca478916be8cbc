"""
Custom exceptions for Tempest operations.

Read paths never raise for missing data; they resolve to ``None`` or an
empty result. These exceptions cover the failures that do reach callers.
"""


class TempestError(Exception):
    """Base exception for all Tempest errors."""

    pass


class NotFoundError(TempestError):
    """Raised when a requested asset, channel or program does not exist."""

    pass


class SourceUnavailableError(TempestError):
    """Raised when an external asset source cannot be read."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Asset source {source!r} unavailable: {reason}")
        self.source = source
        self.reason = reason


class InvalidInputError(TempestError, ValueError):
    """Raised when a time range, duration or day filter is malformed."""

    pass


class AssetRecordError(TempestError):
    """Raised when a single asset record cannot be interpreted."""

    def __init__(self, message: str, record_id: str | None = None):
        super().__init__(message)
        self.record_id = record_id
