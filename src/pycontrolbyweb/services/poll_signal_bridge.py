"""
Qt signal bridge for poll notifications.

Poll listeners run on the controller's worker thread. A presentation
layer built on Qt should not touch widgets from that thread; connecting
to these signals lets Qt queue delivery onto the receiver's thread.
"""

import logging
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

from pycontrolbyweb.controllers.module_controller import ModuleController


class PollSignalBridge(QObject):
    """
    Re-emits a controller's poll notifications as Qt signals.

    Signals:
        polled: Emitted with the new state snapshot after each successful poll
        poll_failed: Emitted with the causing error when the poll cycle stops
    """

    polled = pyqtSignal(object)
    poll_failed = pyqtSignal(object)

    def __init__(self, controller: Optional[ModuleController] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self._controller: Optional[ModuleController] = None
        if controller is not None:
            self.attach(controller)

    @property
    def controller(self) -> Optional[ModuleController]:
        return self._controller

    def attach(self, controller: ModuleController) -> None:
        """Forward notifications from controller; detaches any previous one."""
        self.detach()
        controller.add_polled_listener(self._on_polled)
        controller.add_poll_failed_listener(self._on_poll_failed)
        self._controller = controller
        self.logger.debug(f"Attached to {controller.family} controller at {controller.endpoint}")

    def detach(self) -> None:
        if self._controller is None:
            return
        self._controller.remove_polled_listener(self._on_polled)
        self._controller.remove_poll_failed_listener(self._on_poll_failed)
        self._controller = None

    def _on_polled(self, state) -> None:
        self.polled.emit(state)

    def _on_poll_failed(self, error) -> None:
        self.poll_failed.emit(error)
