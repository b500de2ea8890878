"""Cooperative cancellation driven by SIGINT."""

from __future__ import annotations

import logging
import signal
import threading

from retypist.exceptions import Cancelled

logger = logging.getLogger("retypist.interrupt")


class CancellationToken:
    """One-shot cancellation flag shared by the campaign and process runner.

    Once cancelled it stays cancelled; there is no way to resume.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        """Raise Cancelled if cancellation has been requested."""
        if self._event.is_set():
            raise Cancelled()


def install_interrupt_handler(token: CancellationToken) -> None:
    """Route SIGINT into ``token`` instead of raising KeyboardInterrupt."""

    def _handler(signum, frame):
        if not token.cancelled:
            logger.info("Interrupt received, stopping")
        token.cancel()

    signal.signal(signal.SIGINT, _handler)
