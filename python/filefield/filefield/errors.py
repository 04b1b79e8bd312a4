# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Error taxonomy for the file field adapter.

None of these propagate past the component boundary. They are reported
through the error slot (see reporting.py), except UnmountFailed which is
only logged.
"""


class FileFieldError(Exception):
    """Base class for all adapter failures."""

    kind = "error"

    @property
    def message(self) -> str:
        return str(self)


class RegistryUnavailable(FileFieldError):
    """The SDK never appeared in the registry within the attempt budget."""

    kind = "registry_unavailable"

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class MountFailed(FileFieldError):
    """The SDK rejected or raised from its mount primitive."""

    kind = "mount_failed"


class SyncFailed(FileFieldError):
    """Conversion, update or clear raised while pushing a snapshot."""

    kind = "sync_failed"


class UnmountFailed(FileFieldError):
    """The SDK raised from its unmount primitive. Logged, never reported."""

    kind = "unmount_failed"


class ConfigurationError(FileFieldError):
    """The caller supplied a configuration that does not validate."""

    kind = "configuration_error"


def reason(exc: BaseException) -> str:
    """Human-readable reason for an exception raised by the SDK."""
    return str(exc) or type(exc).__name__
