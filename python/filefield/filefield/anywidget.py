# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""
Anywidget integration for the file field component.

Renders the placeholder the SDK mounts into and drives a FileFieldComponent
from the widget's traits.
"""

import asyncio
import logging
import uuid
from typing import Awaitable, Callable, Optional

import anywidget
import traitlets
import marimo as mo

from .component import FileFieldComponent
from .errors import FileFieldError

logger = logging.getLogger("filefield.anywidget")


class FileFieldWidget(anywidget.AnyWidget):
    """
    An anywidget that hosts an SDK file field.

    Changes to ``config`` or ``anchor_id`` are applied to the underlying
    component one at a time, in the order they happened.

    Attributes:
        config (dict): Field configuration (fieldName, fieldKey, tableName,
                       existingFiles, plus anything the SDK accepts).
        anchor_id (str): Id of the placeholder element the SDK mounts into.
        is_ready (bool): True while the SDK widget is mounted.
        error (str): Message of the most recent unrecovered failure, if any.
    """

    # Placeholder element plus loading and error states
    _esm = """
function render({ model, el }) {
  const anchor = document.createElement("div");
  const status = document.createElement("div");
  el.append(anchor, status);

  function draw() {
    anchor.id = model.get("anchor_id");
    const error = model.get("error");
    if (error) {
      status.textContent = `File Upload Error: ${error}`;
    } else if (!model.get("is_ready")) {
      status.textContent = "Loading file uploader...";
    } else {
      status.textContent = "";
    }
  }

  model.on("change:anchor_id", draw);
  model.on("change:is_ready", draw);
  model.on("change:error", draw);
  draw();
}
export default { render };
"""

    config = traitlets.Dict().tag(sync=True)
    anchor_id = traitlets.Unicode().tag(sync=True)
    is_ready = traitlets.Bool(False).tag(sync=True)
    error = traitlets.Unicode(None, allow_none=True).tag(sync=True)

    def __init__(self, component: Optional[FileFieldComponent] = None, **kwargs):
        self._component = component or FileFieldComponent()
        self._tail: Optional[asyncio.Task] = None
        self._pending = False
        super().__init__(**kwargs)
        self._unsubscribe = self._component.errors.subscribe(self._on_error)

    @traitlets.default("anchor_id")
    def _default_anchor_id(self) -> str:
        return f"file-field-{uuid.uuid4().hex[:8]}"

    @property
    def component(self) -> FileFieldComponent:
        return self._component

    @traitlets.observe("config", "anchor_id")
    def _on_inputs_changed(self, change):
        self._schedule(self._apply_inputs)

    def _on_error(self, error: Optional[FileFieldError]):
        self.error = error.message if error is not None else None

    def _schedule(self, step: Callable[[], Awaitable[None]]):
        """Queue step behind whatever is already running."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Applied on the next settle()
            self._pending = True
            return

        previous = self._tail

        async def run():
            if previous is not None:
                try:
                    await previous
                except Exception as e:
                    logger.error(f"Queued file field change failed: {e}", exc_info=True)
            await step()

        self._tail = loop.create_task(run())

    async def _apply_inputs(self):
        if not self.config:
            return
        await self._component.update(self.config, self.anchor_id)
        self.is_ready = self._component.is_ready

    async def settle(self):
        """Wait until every queued change has been applied."""
        if self._pending:
            self._pending = False
            self._schedule(self._apply_inputs)
        while self._tail is not None and not self._tail.done():
            await self._tail

    async def dispose(self):
        """Unmount the SDK widget and stop reacting to changes."""
        self._schedule(self._component.dispose)
        await self.settle()
        self._unsubscribe()
        self.is_ready = False


def file_field(config: dict, anchor_id: Optional[str] = None, **kwargs):
    """
    Create a FileFieldWidget for use in Marimo notebooks.

    Args:
        config: Field configuration
        anchor_id: Placeholder element id (generated when omitted)
        **kwargs: Passed to FileFieldComponent

    Returns:
        The widget wrapped with mo.ui.anywidget.
    """
    widget_kwargs = {"config": config}
    if anchor_id:
        widget_kwargs["anchor_id"] = anchor_id
    component = FileFieldComponent(**kwargs) if kwargs else None
    return mo.ui.anywidget(FileFieldWidget(component=component, **widget_kwargs))
