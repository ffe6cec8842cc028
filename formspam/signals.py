"""Interrupt handling for a running engine."""

import asyncio
import logging
import signal
from typing import Callable, Iterable

from .errors import SignalError


logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def install_interrupt_handler(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event,
                              signals: Iterable[int] = STOP_SIGNALS) -> Callable[[], None]:
    """Set ``stop_event`` when one of ``signals`` arrives.

    Returns a callable that removes the handlers again.

    Raises:
        SignalError: the loop does not support signal handlers here
            (not the main thread, or a platform without them).
    """
    installed = []

    def _on_signal(signum: int) -> None:
        if not stop_event.is_set():
            logger.info("Received %s, stopping", signal.Signals(signum).name)
        stop_event.set()

    def _remove() -> None:
        for signum in installed:
            loop.remove_signal_handler(signum)
        installed.clear()

    for signum in signals:
        try:
            loop.add_signal_handler(signum, _on_signal, signum)
        except (NotImplementedError, RuntimeError, ValueError) as e:
            _remove()
            raise SignalError(f"Cannot install handler for signal {signum}: {e}") from e
        installed.append(signum)

    return _remove
