"""
Remote synchronization.

:class:`RemoteStore` is the abstract document store; the reconciler
translates local edits into calls against it.
"""

from .file_store import JsonFileRemoteStore
from .memory import InMemoryRemoteStore
from .reconciler import AreaRecord, LoadResult, PointRecord, SyncReconciler
from .remote import (
    PermissionDenied,
    ProjectMetadata,
    RemoteArea,
    RemoteError,
    RemotePoint,
    RemoteStore,
    RemoteUnavailable,
)

__all__ = [
    "RemoteStore",
    "RemoteError",
    "RemoteUnavailable",
    "PermissionDenied",
    "ProjectMetadata",
    "RemotePoint",
    "RemoteArea",
    "InMemoryRemoteStore",
    "JsonFileRemoteStore",
    "SyncReconciler",
    "LoadResult",
    "PointRecord",
    "AreaRecord",
]
