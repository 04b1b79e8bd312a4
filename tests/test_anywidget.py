"""Tests for the anywidget front of the component."""

import pytest

from filefield import anywidget as widget_module
from filefield.anywidget import FileFieldWidget, file_field
from filefield.component import FileFieldComponent
from filefield.registry import Registry


def make_widget(registry, **traits):
    component = FileFieldComponent(
        lookup=registry.lookup_for("ApperSDK"),
        max_attempts=5,
        interval=0.005,
    )
    return FileFieldWidget(component=component, **traits)


class TestFileFieldWidget:

    @pytest.mark.asyncio
    async def test_mounts_from_traits(self, registry, uploader, field_config):
        widget = make_widget(registry, config=field_config, anchor_id="upload-1")

        await widget.settle()

        assert widget.is_ready
        assert widget.error is None
        assert uploader.names() == ["mount"]
        assert uploader.calls[0][1] == "upload-1"

    @pytest.mark.asyncio
    async def test_no_config_no_mount(self, registry, uploader):
        widget = make_widget(registry)

        await widget.settle()

        assert not widget.is_ready
        assert uploader.calls == []
        assert widget.anchor_id.startswith("file-field-")

    @pytest.mark.asyncio
    async def test_trait_changes_apply_in_order(self, registry, uploader, field_config, widget_files):
        widget = make_widget(registry, config=field_config, anchor_id="upload-1")
        await widget.settle()

        widget.config = {**field_config, "existingFiles": widget_files}
        widget.config = {**field_config, "existingFiles": []}
        await widget.settle()

        assert uploader.names() == ["mount", "update_attached", "clear_field"]

    @pytest.mark.asyncio
    async def test_anchor_change_remounts(self, registry, uploader, field_config):
        widget = make_widget(registry, config=field_config, anchor_id="upload-1")
        await widget.settle()

        widget.anchor_id = "upload-2"
        await widget.settle()

        assert uploader.names() == ["mount", "unmount", "mount"]

    @pytest.mark.asyncio
    async def test_error_trait_follows_error_slot(self, field_config):
        widget = make_widget(Registry(), config=field_config, anchor_id="upload-1")

        await widget.settle()

        assert not widget.is_ready
        assert "ApperSDK not loaded" in widget.error

    @pytest.mark.asyncio
    async def test_dispose_unmounts(self, registry, uploader, field_config):
        widget = make_widget(registry, config=field_config, anchor_id="upload-1")
        await widget.settle()

        await widget.dispose()

        assert uploader.names() == ["mount", "unmount"]
        assert not widget.is_ready


def test_widget_created_without_loop_applies_on_settle(registry, uploader, field_config):
    import asyncio

    widget = make_widget(registry, config=field_config, anchor_id="upload-1")
    assert uploader.calls == []

    asyncio.run(widget.settle())

    assert uploader.names() == ["mount"]


def test_file_field_wraps_for_marimo(monkeypatch, field_config):
    wrapped = []
    monkeypatch.setattr(widget_module.mo.ui, "anywidget", lambda widget: wrapped.append(widget) or widget)

    result = file_field(field_config, anchor_id="upload-9", max_attempts=3)

    assert wrapped == [result]
    assert isinstance(result, FileFieldWidget)
    assert result.anchor_id == "upload-9"
    assert result.config == field_config


@pytest.mark.asyncio
async def test_failed_change_does_not_stop_later_changes(registry, field_config, monkeypatch):
    from unittest.mock import AsyncMock

    widget = make_widget(registry)
    update = AsyncMock(side_effect=[RuntimeError("boom"), None])
    monkeypatch.setattr(widget.component, "update", update)

    widget.config = field_config
    widget.config = {**field_config, "description": "Second"}
    await widget.settle()

    assert update.await_count == 2
    assert update.await_args.args[0]["description"] == "Second"
