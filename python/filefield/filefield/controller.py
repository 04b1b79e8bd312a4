# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Mount/unmount of the SDK widget against an anchor.

The controller is the only writer of the lifecycle state:

    UNMOUNTED -> INITIALIZING -> READY <-> UPDATING
    READY -> UNMOUNTING -> UNMOUNTED
    INITIALIZING -> FAILED (registry timeout or mount error)
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Optional

from .errors import FileFieldError, MountFailed, UnmountFailed, reason
from .registry import FileFieldHandle, call_primitive
from .reporting import ErrorSlot
from .schemas import FieldConfig, to_widget_records

logger = logging.getLogger("filefield.controller")


class LifecycleState(Enum):
    """Lifecycle of one anchor's widget."""
    UNMOUNTED = "unmounted"
    INITIALIZING = "initializing"
    READY = "ready"
    UPDATING = "updating"
    UNMOUNTING = "unmounting"
    FAILED = "failed"


class MountResult(Enum):
    MOUNTED = "mounted"
    FAILED = "failed"


class MountController:
    """Owns the mount bookkeeping and lifecycle state for one component."""

    def __init__(self, errors: ErrorSlot):
        self._errors = errors
        self._state = LifecycleState.UNMOUNTED
        self._anchor_id: Optional[str] = None
        self._handle: Optional[FileFieldHandle] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def mounted_anchor(self) -> Optional[str]:
        """Anchor of the successful mount, or None."""
        return self._anchor_id

    @property
    def handle(self) -> Optional[FileFieldHandle]:
        """SDK handle the current widget was mounted with."""
        return self._handle

    def _transition(self, new_state: LifecycleState):
        if new_state is not self._state:
            logger.debug(f"Lifecycle {self._state.value} -> {new_state.value}")
            self._state = new_state

    def begin(self):
        """Start a new mount cycle. Clears the previous failure."""
        if self._state not in (LifecycleState.UNMOUNTED, LifecycleState.FAILED):
            raise RuntimeError(f"Cannot start a mount cycle from state {self._state.value}")
        self._errors.clear()
        self._transition(LifecycleState.INITIALIZING)

    def abort(self):
        """Abandon a cycle that never reached mount (polling was cancelled)."""
        if self._state is LifecycleState.INITIALIZING:
            self._transition(LifecycleState.UNMOUNTED)

    def fail(self, error: FileFieldError):
        """Mark the current cycle failed and report why."""
        self._transition(LifecycleState.FAILED)
        self._errors.report(error)

    async def mount(self, anchor_id: str, config: FieldConfig, handle: FileFieldHandle) -> MountResult:
        """Mount the widget exactly once for this cycle.

        The initial snapshot is normalized to widget-native shape before it is
        embedded in the mount config. No retry on failure.
        """
        if self._state is not LifecycleState.INITIALIZING:
            raise RuntimeError(f"Cannot mount from state {self._state.value}")

        try:
            records = to_widget_records(config.initial_records, handle.to_widget_shape)
            await call_primitive(handle.mount, anchor_id, config.mount_payload(records))
        except Exception as e:
            logger.error(f"Error mounting file field on {anchor_id}: {e}", exc_info=True)
            error = MountFailed(reason(e))
            error.__cause__ = e
            self.fail(error)
            return MountResult.FAILED

        self._anchor_id = anchor_id
        self._handle = handle
        self._transition(LifecycleState.READY)
        logger.info(f"Mounted file field {config.target_field!r} on {anchor_id}")
        return MountResult.MOUNTED

    async def unmount(self):
        """Tear down the widget if, and only if, it was mounted.

        Safe to call any number of times. Errors from the SDK are logged and
        swallowed; local state is reset regardless.
        """
        anchor_id, handle = self._anchor_id, self._handle
        if anchor_id is None or handle is None:
            self._transition(LifecycleState.UNMOUNTED)
            return

        self._transition(LifecycleState.UNMOUNTING)
        try:
            await call_primitive(handle.unmount, anchor_id)
            logger.info(f"Unmounted file field on {anchor_id}")
        except Exception as e:
            error = UnmountFailed(reason(e))
            logger.error(f"Error unmounting file field on {anchor_id}: {error}", exc_info=True)
        finally:
            self._anchor_id = None
            self._handle = None
            self._transition(LifecycleState.UNMOUNTED)

    @contextmanager
    def updating(self):
        """Mark READY -> UPDATING for the duration of a push."""
        if self._state is not LifecycleState.READY:
            raise RuntimeError(f"Cannot update from state {self._state.value}")
        self._transition(LifecycleState.UPDATING)
        try:
            yield
        finally:
            if self._state is LifecycleState.UPDATING:
                self._transition(LifecycleState.READY)
