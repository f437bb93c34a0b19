"""
Exception hierarchy for Cull.

Per-file hashing, decoding and deletion failures are not exceptions at this
level: they are logged and the file is excluded (or reported in a
DeletionResult). Only scan-level conditions are raised.
"""


class CullError(Exception):
    """Base exception for all Cull errors."""
    pass


class DirectoryAccessError(CullError):
    """Raised when the scan root is missing, not a directory, or unreadable."""

    def __init__(self, path: str, reason: str = ""):
        self.path = str(path)
        self.reason = reason
        message = f"Cannot access directory: {self.path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CancellationError(CullError):
    """Raised when a scan is cancelled cooperatively. Not a failure."""

    def __init__(self, message: str = "Scan was cancelled"):
        super().__init__(message)
