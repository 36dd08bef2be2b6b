"""SIGINT hook for the command line session loop.

The first Ctrl+C only raises a flag; the loop polls ``should_stop`` and leaves
through the controller's context manager, so the magnetometer subscription is
released. A second Ctrl+C falls through to the previous handler.
"""

import signal


class CtrlCHandler:
    def __init__(self):
        self.should_stop = False
        self._previous = signal.signal(signal.SIGINT, self._on_interrupt)

    def _on_interrupt(self, sig, frame):
        if self.should_stop:
            self.restore()
            signal.raise_signal(signal.SIGINT)
            return
        print("\n[INFO] Ctrl+C received, releasing the compass sensor...")
        self.should_stop = True

    def restore(self):
        """Put back the handler that was installed before this one."""
        if self._previous is not None:
            signal.signal(signal.SIGINT, self._previous)
            self._previous = None
