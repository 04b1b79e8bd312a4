# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""File field component: readiness polling, mount lifecycle and record sync.

Usage:

    async with FileFieldComponent() as field:
        await field.update({"fieldName": "file_data_c", "fieldKey": "file_data_c",
                            "tableName": "file_c", "existingFiles": files}, "upload-1")
        ...
        await field.update({**config, "existingFiles": new_files}, "upload-1")

Every notification goes through update(). Identity changes (anchor, field
name, field key, table) unmount and remount; anything else is synced in place.
"""

import asyncio
import logging
from typing import Any, Optional

from .config import get_config
from .controller import LifecycleState, MountController, MountResult
from .errors import ConfigurationError, FileFieldError
from .poller import await_ready
from .registry import Lookup, get_registry
from .reporting import ErrorSlot
from .schemas import FieldConfig
from .sync import SyncEngine

logger = logging.getLogger("filefield.component")

Identity = tuple[str, str, str, str]


class FileFieldComponent:
    """One anchor's connection to the SDK file field widget.

    Failures never propagate out of update() or dispose(); they end up in
    ``errors`` (see reporting.py).
    """

    def __init__(
        self,
        lookup: Optional[Lookup] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        sdk_name: Optional[str] = None,
    ):
        """Create a component.

        Args:
            lookup: Returns the SDK entry or None (defaults to the global registry)
            max_attempts: Registry checks before giving up (defaults to config)
            interval: Seconds between registry checks (defaults to config)
            sdk_name: Registry name of the SDK (defaults to config)
        """
        config = get_config()
        self.sdk_name = sdk_name or config.get_sdk_name()
        self._lookup = lookup or get_registry().lookup_for(self.sdk_name)
        self._max_attempts = max_attempts if max_attempts is not None else config.get_poll_attempts()
        self._interval = interval if interval is not None else config.get_poll_interval()

        self.errors = ErrorSlot()
        self._controller = MountController(self.errors)
        self._engine = SyncEngine(self._controller, self.errors)

        self._config: Optional[FieldConfig] = None
        self._anchor_id: Optional[str] = None
        self._identity: Optional[Identity] = None
        self._requested_identity: Optional[Identity] = None
        self._cycle_cancelled = asyncio.Event()
        self._lock = asyncio.Lock()
        self._disposed = False

    async def __aenter__(self) -> "FileFieldComponent":
        return self

    async def __aexit__(self, *exc_info):
        await self.dispose()

    @property
    def state(self) -> LifecycleState:
        return self._controller.state

    @property
    def is_ready(self) -> bool:
        return self._controller.state in (LifecycleState.READY, LifecycleState.UPDATING)

    @property
    def error(self) -> Optional[FileFieldError]:
        return self.errors.error

    @property
    def error_message(self) -> Optional[str]:
        return self.errors.message

    @property
    def config(self) -> Optional[FieldConfig]:
        return self._config

    @property
    def anchor_id(self) -> Optional[str]:
        return self._anchor_id

    async def update(self, config: Any, anchor_id: str):
        """Apply a (possibly changed) configuration for anchor_id."""
        if self._disposed:
            logger.warning(f"Ignoring update for disposed file field on {anchor_id}")
            return

        try:
            field_config = FieldConfig.parse(config)
            if not isinstance(anchor_id, str) or not anchor_id:
                raise ConfigurationError("Anchor id must be a non-empty string")
        except ConfigurationError as e:
            logger.error(f"Rejected file field configuration: {e}")
            self.errors.report(e)
            return

        identity = (anchor_id, *field_config.identity)
        if identity != self._requested_identity:
            # Stop a poll still running for the outgoing identity
            self._requested_identity = identity
            self._cycle_cancelled.set()

        async with self._lock:
            if self._disposed:
                return
            if identity != self._requested_identity:
                # Superseded by a newer identity queued behind this one
                logger.debug(f"Skipping superseded file field update for {anchor_id}")
                return
            self._config = field_config
            self._anchor_id = anchor_id
            if identity != self._identity:
                await self._restart(identity, field_config)
            await self._engine.sync(field_config.initial_records, field_config.target_key)

    async def _restart(self, identity: Identity, config: FieldConfig):
        """Unmount the outgoing widget, then poll and mount for identity."""
        await self._controller.unmount()
        self._engine.reset()

        anchor_id = identity[0]
        self._identity = identity
        self._cycle_cancelled = asyncio.Event()
        self._controller.begin()

        readiness = await await_ready(
            self._lookup,
            self._max_attempts,
            self._interval,
            cancelled=self._cycle_cancelled,
            sdk_name=self.sdk_name,
        )
        if readiness.cancelled:
            self._controller.abort()
            self._identity = None
            return
        if not readiness.ok:
            self._controller.fail(readiness.error)
            return

        result = await self._controller.mount(anchor_id, config, readiness.handle)
        if result is MountResult.MOUNTED:
            self._engine.prime(config.initial_records)

    async def dispose(self):
        """Stop polling and unmount. Later updates are ignored."""
        if self._disposed:
            return
        self._disposed = True
        self._cycle_cancelled.set()
        async with self._lock:
            await self._controller.unmount()
            self._engine.reset()
            self._identity = None
        logger.debug(f"Disposed file field on {self._anchor_id}")
