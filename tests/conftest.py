"""Shared pytest fixtures for the file field test suite."""

from unittest.mock import MagicMock

import pytest

from filefield import config as config_module
from filefield.registry import Registry


# =============================================================================
# Fakes
# =============================================================================

class FakeFileUploader:
    """Records every primitive call in order.

    Set ``fail_on`` to a primitive name to make that primitive raise.
    """

    def __init__(self):
        self.calls = []
        self.fail_on = set()
        self.to_widget_shape = MagicMock(side_effect=self._convert)

    def _maybe_fail(self, name):
        if name in self.fail_on:
            raise RuntimeError(f"{name} exploded")

    @staticmethod
    def _convert(records):
        return [
            {"id": record["Id"], **{k: v for k, v in record.items() if k != "Id"}}
            for record in records
        ]

    async def mount(self, anchor_id, config):
        self.calls.append(("mount", anchor_id, config))
        self._maybe_fail("mount")

    async def update_attached(self, target_key, records):
        self.calls.append(("update_attached", target_key, records))
        self._maybe_fail("update_attached")

    async def clear_field(self, target_key):
        self.calls.append(("clear_field", target_key))
        self._maybe_fail("clear_field")

    async def unmount(self, anchor_id):
        self.calls.append(("unmount", anchor_id))
        self._maybe_fail("unmount")

    def names(self):
        return [call[0] for call in self.calls]

    def count(self, name):
        return self.names().count(name)


class FakeSDK:
    def __init__(self):
        self.file_uploader = FakeFileUploader()


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's settings file and environment out of the tests."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("FILEFIELD_SDK_NAME", "FILEFIELD_POLL_ATTEMPTS", "FILEFIELD_POLL_INTERVAL_MS"):
        monkeypatch.delenv(name, raising=False)
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def sdk() -> FakeSDK:
    return FakeSDK()


@pytest.fixture
def uploader(sdk) -> FakeFileUploader:
    return sdk.file_uploader


@pytest.fixture
def registry(sdk) -> Registry:
    """Registry with the SDK already published."""
    registry = Registry()
    registry.publish("ApperSDK", sdk)
    return registry


@pytest.fixture
def field_config() -> dict:
    return {
        "fieldName": "file_data_c",
        "fieldKey": "file_data_c",
        "tableName": "file_c",
        "existingFiles": [],
        "description": "Attachments",
    }


@pytest.fixture
def remote_files() -> list:
    return [
        {"Id": 1, "name": "report.pdf", "fileSizeKb": 84},
        {"Id": 2, "name": "photo.png", "fileSizeKb": 512},
    ]


@pytest.fixture
def widget_files() -> list:
    return [
        {"id": "a1", "name": "report.pdf", "size": 86016},
    ]
