"""Exceptions raised by the duplicate scanner."""
import os


class ScanError(Exception):
    """Base class for scan failures."""


class InvalidRootError(ScanError):
    """The root path is empty or does not exist.

    This is the only error that aborts a scan. It is raised before any traversal begins.
    """

    def __init__(self, root: str | os.PathLike):
        super().__init__(root)
        self.root = root

    def __str__(self):
        return f"Root directory does not exist: {self.root}"


class UnreadableFileError(ScanError):
    """A file could not be opened or read while computing its digest.

    Arguments are passed through to Exception so instances survive pickling across the
    worker pool boundary.
    """

    def __init__(self, path: str | os.PathLike, reason: str):
        super().__init__(path, reason)
        self.path = path
        self.reason = reason

    def __str__(self):
        return f"Cannot read {self.path}: {self.reason}"


class ScanCancelled(ScanError):
    """Cancellation was requested while the scan was in progress."""
