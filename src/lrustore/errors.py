"""lrustore exception hierarchy.

Keep this module small and dependency-free: it is imported by every other
module and by tests.
"""


class LRUStoreError(Exception):
    """Base exception for all lrustore errors."""


class LRUStoreConfigError(LRUStoreError):
    """Raised for an invalid store capacity or an invalid `lrustore.toml`."""


class SnapshotError(LRUStoreError):
    """Base exception for snapshot persistence errors."""


class SnapshotIOError(SnapshotError):
    """Raised when a snapshot cannot be read or written (other than absence)."""


class SnapshotFormatError(SnapshotError):
    """Raised when a single snapshot record cannot be decoded."""
