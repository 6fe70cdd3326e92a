class SyncError(Exception):
    """Base error for candidate synchronization."""


class NetworkError(SyncError):
    """Raised when a remote is unreachable, unconfigured, or answers with a non-success status."""


class ParseError(SyncError):
    """Raised when a tabular payload cannot be decoded."""


class RemoteWriteError(SyncError):
    """Raised when the roster store reports a failed write."""


class ValidationError(SyncError):
    """Raised when a record fails the roster constraints before any remote call."""
