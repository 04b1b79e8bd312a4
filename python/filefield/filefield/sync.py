# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Push record snapshot changes to a mounted widget.

Callers must not start a sync while another one is still awaiting the SDK.
A sync issued during a push sees the UPDATING state and is skipped.
"""

import logging
from enum import Enum
from typing import Sequence

from pydantic import BaseModel

from .controller import LifecycleState, MountController
from .errors import SyncFailed, reason
from .registry import call_primitive
from .reporting import ErrorSlot
from .schemas import snapshots_equal, to_widget_records

logger = logging.getLogger("filefield.sync")


class SyncResult(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


class SyncEngine:
    """Detects snapshot changes and pushes them as an update or a clear."""

    def __init__(self, controller: MountController, errors: ErrorSlot):
        self._controller = controller
        self._errors = errors
        self._last_synced: list[BaseModel] = []

    def prime(self, snapshot: Sequence[BaseModel]):
        """Record the snapshot the widget was mounted with."""
        self._last_synced = list(snapshot)

    def reset(self):
        self._last_synced = []

    async def sync(self, snapshot: Sequence[BaseModel], target_key: str) -> SyncResult:
        """Bring the widget's attached records in line with snapshot.

        Returns:
            APPLIED after exactly one update or clear call, SKIPPED when the
            widget is not ready or nothing changed, FAILED when the SDK raised.
        """
        handle = self._controller.handle
        if self._controller.state is not LifecycleState.READY or handle is None:
            return SyncResult.SKIPPED
        if not target_key:
            logger.debug("No field key configured; skipping sync")
            return SyncResult.SKIPPED
        if snapshots_equal(snapshot, self._last_synced):
            return SyncResult.SKIPPED

        with self._controller.updating():
            try:
                records = to_widget_records(snapshot, handle.to_widget_shape)
                if records:
                    await call_primitive(handle.update_attached, target_key, records)
                else:
                    await call_primitive(handle.clear_field, target_key)
            except Exception as e:
                logger.error(f"Error updating files for field {target_key}: {e}", exc_info=True)
                error = SyncFailed(reason(e))
                error.__cause__ = e
                self._errors.report(error)
                return SyncResult.FAILED

        # Cache the caller's shape so the next comparison is like for like
        self._last_synced = list(snapshot)
        logger.debug(f"Synced {len(snapshot)} record(s) to field {target_key}")
        return SyncResult.APPLIED
