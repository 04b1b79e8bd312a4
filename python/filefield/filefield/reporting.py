# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Single observable slot holding the most recent unrecovered failure."""

import logging
from typing import Callable, Optional

from .errors import FileFieldError

logger = logging.getLogger("filefield.reporting")

Listener = Callable[[Optional[FileFieldError]], None]


class ErrorSlot:
    """Latest failure reported by the poller, controller or sync engine."""

    def __init__(self):
        self._error: Optional[FileFieldError] = None
        self._listeners: list[Listener] = []

    @property
    def error(self) -> Optional[FileFieldError]:
        return self._error

    @property
    def message(self) -> Optional[str]:
        return self._error.message if self._error is not None else None

    def report(self, error: FileFieldError):
        self._error = error
        self._notify()

    def clear(self):
        if self._error is None:
            return
        self._error = None
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self._error)
            except Exception as e:
                logger.error(f"Error slot listener failed: {e}", exc_info=True)
