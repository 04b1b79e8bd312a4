# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Bounded polling for the SDK to appear in the registry."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_SDK_NAME
from .errors import RegistryUnavailable
from .registry import FileFieldHandle, Lookup, resolve_capability

logger = logging.getLogger("filefield.poller")


@dataclass
class Readiness:
    """Outcome of await_ready.

    Exactly one of ``handle`` (ready), ``error`` (timed out) or ``cancelled``
    is meaningful.
    """
    handle: Optional[FileFieldHandle] = None
    error: Optional[RegistryUnavailable] = None
    attempts: int = 0
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.handle is not None


async def _wait(interval: float, cancelled: Optional[asyncio.Event]) -> bool:
    """Sleep for interval. Returns True if cancelled was set meanwhile."""
    if cancelled is None:
        await asyncio.sleep(interval)
        return False
    try:
        await asyncio.wait_for(cancelled.wait(), timeout=interval)
        return True
    except asyncio.TimeoutError:
        return False


async def await_ready(
    lookup: Lookup,
    max_attempts: int,
    interval: float,
    cancelled: Optional[asyncio.Event] = None,
    sdk_name: str = DEFAULT_SDK_NAME,
) -> Readiness:
    """Poll lookup until the SDK and its file field capability are present.

    Args:
        lookup: Zero-argument function returning the SDK entry or None
        max_attempts: Number of checks before giving up
        interval: Seconds to wait between two checks
        cancelled: Event that stops polling when set
        sdk_name: Name used in the failure message

    Returns:
        Readiness carrying the capability handle, or a RegistryUnavailable
        error after max_attempts checks. Never raises.
    """
    entry_seen = False
    attempts = 0

    while attempts < max_attempts:
        if cancelled is not None and cancelled.is_set():
            logger.debug(f"Polling for {sdk_name} cancelled after {attempts} attempt(s)")
            return Readiness(attempts=attempts, cancelled=True)

        attempts += 1
        handle = None
        try:
            entry = lookup()
            if entry is not None:
                entry_seen = True
                handle = resolve_capability(entry)
        except Exception as e:
            logger.warning(f"Registry lookup for {sdk_name} raised: {e}")

        if handle is not None:
            logger.info(f"{sdk_name} ready after {attempts} attempt(s)")
            return Readiness(handle=handle, attempts=attempts)

        if attempts < max_attempts and await _wait(interval, cancelled):
            logger.debug(f"Polling for {sdk_name} cancelled after {attempts} attempt(s)")
            return Readiness(attempts=attempts, cancelled=True)

    if entry_seen:
        message = f"File uploader not available in {sdk_name}."
    else:
        message = f"{sdk_name} not loaded. Please ensure the SDK script is included before this component."
    logger.error(f"{message} (gave up after {attempts} attempt(s))")
    return Readiness(error=RegistryUnavailable(message, attempts), attempts=attempts)
