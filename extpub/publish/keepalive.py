"""Keep CI jobs alive during long, silent host calls.

CI services cancel a step that prints nothing for several minutes, while
closing a staging repository can take twenty. ``keep_alive`` prints a line at
a fixed interval until the wrapped block finishes.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

from extpub.output.console import ConsoleProtocol, Style

__all__ = ["keep_alive", "KEEP_ALIVE_INTERVAL_SECONDS"]

KEEP_ALIVE_INTERVAL_SECONDS = 60.0


@contextmanager
def keep_alive(
    console: ConsoleProtocol,
    message: str = "Still waiting for the artifact host",
    interval: float = KEEP_ALIVE_INTERVAL_SECONDS,
) -> Iterator[None]:
    stop = threading.Event()
    started = time.monotonic()

    def ping() -> None:
        while not stop.wait(interval):
            elapsed = int(time.monotonic() - started)
            console.print(f"{message} ({elapsed}s elapsed)", Style.DIM)

    thread = threading.Thread(target=ping, name="extpub-keep-alive", daemon=True)
    thread.start()
    try:
        yield
    finally:
        stop.set()
        thread.join()
