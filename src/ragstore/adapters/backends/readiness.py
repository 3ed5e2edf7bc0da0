from __future__ import annotations

import logging
import time
from typing import Callable

from ragstore.domain.errors import BackendNotReady
from ragstore.ports import BackendIndex

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 120.0
DEFAULT_INTERVAL_S = 5.0


def wait_until_ready(
    index: BackendIndex,
    *,
    timeout: float = DEFAULT_TIMEOUT_S,
    interval: float = DEFAULT_INTERVAL_S,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Poll index.is_ready() at a fixed interval until it reports ready.

    Raises:
        BackendNotReady: if the index is still not ready after `timeout` seconds.
    """
    deadline = clock() + timeout
    attempts = 0
    while True:
        attempts += 1
        if index.is_ready():
            logger.info("Backend index ready", extra={"attempts": attempts})
            return
        remaining = deadline - clock()
        if remaining <= 0:
            raise BackendNotReady(f"Backend index not ready after {timeout:.0f}s ({attempts} checks)")
        sleep(min(interval, remaining))
