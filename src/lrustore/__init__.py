from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from lrustore.errors import (
    LRUStoreConfigError,
    LRUStoreError,
    SnapshotError,
    SnapshotFormatError,
    SnapshotIOError,
)
from lrustore.snapshot import LoadReport, export_snapshot, import_snapshot
from lrustore.store import Cache, LRUStore


def _package_version() -> str:
    try:
        return version("lrustore")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "Cache",
    "LRUStore",
    "LRUStoreConfigError",
    "LRUStoreError",
    "LoadReport",
    "SnapshotError",
    "SnapshotFormatError",
    "SnapshotIOError",
    "__version__",
    "export_snapshot",
    "import_snapshot",
]
