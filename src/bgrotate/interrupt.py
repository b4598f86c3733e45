# src/bgrotate/interrupt.py: Interruptible sleep between rotation passes.
# The scheduler sleeps by calling InterruptChannel.wait, which returns as soon
# as the interval elapses or an Advance or Shutdown request arrives. Requests
# come from POSIX signal handlers: SIGUSR1 asks for the next pass now,
# SIGINT and SIGTERM ask the daemon to stop.

import queue
import signal
from enum import Enum, auto
from typing import Dict

from .util.log import get_logger

logger = get_logger(__name__)

class Interrupt(Enum):
    """Why a wait returned."""
    TIMEOUT = auto()
    ADVANCE = auto()
    SHUTDOWN = auto()

ADVANCE_SIGNAL = signal.SIGUSR1
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

class InterruptChannel:
    """
    Delivers Advance and Shutdown requests to a waiting scheduler.

    Requests are carried by a queue.SimpleQueue, whose put() is reentrant and
    therefore safe to call from a signal handler that interrupts the main
    thread inside wait(). Shutdown is sticky: once requested, every later wait
    returns SHUTDOWN immediately. Several pending Advance requests collapse into
    one early wake.
    """

    def __init__(self):
        self._queue = queue.SimpleQueue()
        self._shutdown = False
        self._previous_handlers: Dict[int, object] = {}

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown

    def request_advance(self) -> None:
        self._queue.put(Interrupt.ADVANCE)

    def request_shutdown(self) -> None:
        self._shutdown = True
        self._queue.put(Interrupt.SHUTDOWN)

    def wait(self, timeout: float) -> Interrupt:
        """Block until timeout seconds pass or a request arrives."""
        if self._shutdown:
            return Interrupt.SHUTDOWN
        try:
            reason = self._queue.get(timeout=timeout)
        except queue.Empty:
            return Interrupt.TIMEOUT
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        if self._shutdown:
            return Interrupt.SHUTDOWN
        return reason

    def install_signal_handlers(self) -> None:
        """Route the advance and shutdown signals to this channel. Main thread only."""
        self._previous_handlers[ADVANCE_SIGNAL] = signal.signal(
            ADVANCE_SIGNAL, lambda signum, frame: self.request_advance()
        )
        for signum in SHUTDOWN_SIGNALS:
            self._previous_handlers[signum] = signal.signal(
                signum, lambda signum, frame: self.request_shutdown()
            )

    def restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)
        self._previous_handlers.clear()
