"""
filefield

Mounts an externally loaded SDK file field widget onto a placeholder,
keeps its attached records in sync and tears it down when done.
"""

from .component import FileFieldComponent
from .controller import LifecycleState, MountController, MountResult
from .errors import (
    ConfigurationError,
    FileFieldError,
    MountFailed,
    RegistryUnavailable,
    SyncFailed,
    UnmountFailed,
)
from .poller import Readiness, await_ready
from .registry import Registry, get_registry
from .reporting import ErrorSlot
from .schemas import FieldConfig, RemoteRecord, WidgetRecord
from .sync import SyncEngine, SyncResult

__version__ = "0.1.0"
__all__ = [
    "FileFieldComponent",
    "LifecycleState",
    "MountController",
    "MountResult",
    "ConfigurationError",
    "FileFieldError",
    "MountFailed",
    "RegistryUnavailable",
    "SyncFailed",
    "UnmountFailed",
    "Readiness",
    "await_ready",
    "Registry",
    "get_registry",
    "ErrorSlot",
    "FieldConfig",
    "RemoteRecord",
    "WidgetRecord",
    "SyncEngine",
    "SyncResult",
]
