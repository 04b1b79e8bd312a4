# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Global registry through which the host exposes the file field SDK.

The SDK is loaded out of band and publishes itself under a well-known name
whenever it is ready. Nothing here waits for it; see poller.py.
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

logger = logging.getLogger("filefield.registry")

CAPABILITY_NAME = "file_uploader"
REQUIRED_PRIMITIVES = ("mount", "update_attached", "clear_field", "unmount", "to_widget_shape")

Lookup = Callable[[], Optional[Any]]


class FileFieldHandle(Protocol):
    """Control surface the SDK exposes for file fields.

    mount/update_attached/clear_field/unmount may be plain functions or
    coroutines. to_widget_shape is synchronous.
    """

    def mount(self, anchor_id: str, config: dict) -> Union[Awaitable[Any], Any]: ...

    def update_attached(self, target_key: str, records: list[dict]) -> Union[Awaitable[Any], Any]: ...

    def clear_field(self, target_key: str) -> Union[Awaitable[Any], Any]: ...

    def unmount(self, anchor_id: str) -> Union[Awaitable[Any], Any]: ...

    def to_widget_shape(self, records: list[dict]) -> list[dict]: ...


async def call_primitive(func: Callable[..., Any], *args: Any) -> Any:
    """Call an SDK primitive, awaiting the result if it is awaitable."""
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _member(obj: Any, name: str) -> Any:
    """Read name from a mapping or an object; None if reading it raises."""
    try:
        if isinstance(obj, Mapping):
            return obj.get(name)
        return getattr(obj, name, None)
    except Exception as e:
        logger.debug(f"Reading {name!r} from SDK entry raised: {e}")
        return None


def resolve_capability(entry: Any) -> Optional[FileFieldHandle]:
    """Return the file field capability of an SDK entry, if it is complete.

    An entry that is still initializing (accessors raising) counts as absent.
    """
    if entry is None:
        return None
    handle = _member(entry, CAPABILITY_NAME)
    if handle is None:
        return None
    for name in REQUIRED_PRIMITIVES:
        if not callable(_member(handle, name)):
            return None
    if isinstance(handle, Mapping):
        return _MappingHandle(handle)
    return handle


class _MappingHandle:
    """Attribute access over a dict of primitives."""

    def __init__(self, primitives: Mapping):
        self._primitives = primitives

    def __getattr__(self, name: str) -> Any:
        try:
            return self._primitives[name]
        except KeyError:
            raise AttributeError(name) from None


class Registry:
    """Name -> entry map standing in for the host's global namespace."""

    def __init__(self):
        self._entries: dict[str, Any] = {}

    def publish(self, name: str, entry: Any):
        """Make an entry visible under name, replacing any previous one."""
        self._entries[name] = entry
        logger.info(f"Published registry entry: {name}")

    def withdraw(self, name: str):
        """Remove an entry. Missing names are ignored."""
        if self._entries.pop(name, None) is not None:
            logger.info(f"Withdrew registry entry: {name}")

    def lookup(self, name: str) -> Optional[Any]:
        return self._entries.get(name)

    def lookup_for(self, name: str) -> Lookup:
        """Zero-argument lookup function bound to one name."""
        return lambda: self.lookup(name)


# Global registry instance
_registry: Optional[Registry] = None


def get_registry() -> Registry:
    """Get or create the global registry instance."""
    global _registry
    if _registry is None:
        _registry = Registry()
    return _registry
