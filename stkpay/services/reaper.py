"""
Reaper
Background thread that periodically sweeps expired state out of the
in-memory stores (callback outcomes, rate-limit windows).
"""

import threading
from typing import Iterable, Optional

from stkpay.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 30


class Reaper:
    """
    Calls ``sweep()`` on every target once per tick.

    A failing target is logged and skipped; it never stops the thread or
    the other targets.
    """

    def __init__(self, targets: Iterable, interval_seconds: float = DEFAULT_INTERVAL_SECONDS):
        self.targets = list(targets)
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> int:
        removed = 0
        for target in self.targets:
            try:
                removed += target.sweep()
            except Exception:
                logger.exception(f'Sweep failed for {type(target).__name__}')
        if removed:
            logger.info(f'Reaper removed {removed} expired entries')
        return removed

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='stkpay-reaper', daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.run_once()
