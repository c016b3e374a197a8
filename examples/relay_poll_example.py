"""
Example: Polling a module from a Qt application

Polls a WebRelay-Quad, prints every state on the Qt main thread through
PollSignalBridge and switches relay 1 whenever input state changes are
seen. Requires the "qt" extra.

Run with:
    python examples/relay_poll_example.py 192.168.1.2
"""

import sys
import logging
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from PyQt5.QtCore import QCoreApplication, QTimer

from pycontrolbyweb import Endpoint, RelayState, WebRelayQuadController
from pycontrolbyweb.cli import describe
from pycontrolbyweb.core.error_formatting import format_error
from pycontrolbyweb.services.poll_signal_bridge import PollSignalBridge


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class RelayPollDemo:
    """Mirrors relay 2 onto relay 1 while polling."""

    def __init__(self, app: QCoreApplication, address: str):
        self.app = app
        self.controller = WebRelayQuadController(Endpoint(address), poll_interval=1.0)
        self.bridge = PollSignalBridge(self.controller)
        self.bridge.polled.connect(self.on_polled)
        self.bridge.poll_failed.connect(self.on_poll_failed)

    def start(self):
        print(f"Polling {self.controller.endpoint} (Ctrl-C to stop)")
        self.controller.begin_poll_cycle()

    def on_polled(self, state):
        print(describe(state))
        wanted = state.get_relay(2).state
        if state.get_relay(1).state != wanted and wanted in (RelayState.ON, RelayState.OFF):
            self.controller.set_state(state.with_relay(1, wanted))

    def on_poll_failed(self, error):
        print(format_error(error, 'user'))
        self.app.quit()

    def shutdown(self):
        self.bridge.detach()
        self.controller.close(timeout=5.0)


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        return 2

    app = QCoreApplication(sys.argv)
    demo = RelayPollDemo(app, sys.argv[1])

    # Let Python handle Ctrl-C between Qt events
    timer = QTimer()
    timer.timeout.connect(lambda: None)
    timer.start(200)

    demo.start()
    try:
        return app.exec_()
    except KeyboardInterrupt:
        return 0
    finally:
        demo.shutdown()


if __name__ == '__main__':
    sys.exit(main())
