"""
Status polling.

Checks the scan status on a fixed cadence until the API reports a terminal
status or the deadline passes, in which case ScanStatus.TIMEOUT is returned.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from core.models import ScanStatus

StatusFn = Callable[[str], Awaitable[ScanStatus]]

logger = logging.getLogger(__name__)


async def wait_for_scan(
    get_status: StatusFn,
    status_url: str,
    *,
    interval: float,
    timeout: float,
    log: Optional[logging.Logger] = None,
) -> ScanStatus:
    log = log or logger
    interval = max(0.0, float(interval))

    # Monotonic deadline so a wall-clock jump can't stretch or cut the wait.
    deadline = time.monotonic() + max(0.0, float(timeout))

    while True:
        status = await get_status(status_url)
        if status.is_terminal:
            log.info("Scan status: %s", status.value)
            return status

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            log.warning("Scan did not reach a final status in %ss (last: %s)", timeout, status.value)
            return ScanStatus.TIMEOUT

        log.info("Scan status: %s. Checking again in %ss...", status.value, interval)
        await asyncio.sleep(min(interval, remaining))
