"""Forward mongod stderr to the logging sink."""
from __future__ import annotations

import logging
import threading
from typing import IO, Optional

from scratchmongo.core.server.classifier import iter_lines


class StreamRelay:
    """Copy every line of ``stream`` to ``logger`` until it closes.

    stderr only ever feeds the log; it never decides the startup outcome.
    """

    def __init__(self, stream: IO[str], logger: logging.Logger, *, label: str = "mongod stderr") -> None:
        self._stream = stream
        self._logger = logger
        self._label = label
        self._thread = threading.Thread(
            target=self._run,
            name=f"scratchmongo-{label.replace(' ', '-')}",
            daemon=True,
        )

    def start(self) -> "StreamRelay":
        self._thread.start()
        return self

    def _run(self) -> None:
        try:
            for line in iter_lines(self._stream):
                self._logger.debug("[%s] %s", self._label, line)
        except (OSError, ValueError) as exc:
            self._logger.warning("reading %s failed: %s", self._label, exc)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread.is_alive():
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread.is_alive()


__all__ = ["StreamRelay"]
