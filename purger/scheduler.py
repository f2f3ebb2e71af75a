"""Recurring purge scheduling.

:class:`PurgeScheduler` is created once per process.  Each registered access
log gets its own asyncio loop that waits the initial delay, then runs a purge
cycle on the shared thread pool, waits for it to finish and sleeps the
execution interval before the next one (fixed delay, not fixed rate).
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, time, timedelta
from typing import List, Optional

from purger.accesslog import AccessLogDescriptor
from purger.config import PurgeConfig, validate_config
from purger.task import PurgeTask

log = logging.getLogger(__name__)


def initial_delay(execute_on_startup: bool, now: Optional[datetime] = None) -> float:
    """Seconds to wait before the first cycle: none, or until next local midnight."""
    if execute_on_startup:
        return 0.0
    now = now or datetime.now()
    midnight = datetime.combine(now.date() + timedelta(days=1), time.min)
    return (midnight - now).total_seconds()


class PurgeScheduler:
    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or os.cpu_count() or 1
        self._executor: Optional[ThreadPoolExecutor] = None
        self._tasks: List[asyncio.Task] = []

    @property
    def tasks(self) -> List[asyncio.Task]:
        return list(self._tasks)

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="purger"
            )
        return self._executor

    def schedule(
        self, config: PurgeConfig, descriptor: AccessLogDescriptor
    ) -> Optional[asyncio.Task]:
        """Start purging ``descriptor`` forever. Must be called from a running loop."""
        if not (config.enabled and descriptor.enabled):
            log.info(
                "Access log purge disabled for %s (purge enabled=%s, access log enabled=%s)",
                descriptor.directory,
                config.enabled,
                descriptor.enabled,
            )
            return None

        validate_config(config)
        purge_task = PurgeTask(config, descriptor)
        delay = initial_delay(config.execute_on_startup)
        interval = config.execution_interval_seconds
        log.info(
            "Scheduling access log purge for %s: first run in %.0fs, then every %d %s",
            descriptor.directory,
            delay,
            config.execution_interval,
            config.execution_interval_unit.name,
        )
        task = asyncio.create_task(self._run_with_fixed_delay(purge_task, delay, interval))
        self._tasks.append(task)
        return task

    async def _run_with_fixed_delay(self, purge_task: PurgeTask, delay: float, interval: float) -> None:
        await asyncio.sleep(delay)
        loop = asyncio.get_running_loop()
        executor = self._get_executor()
        while True:
            try:
                await loop.run_in_executor(executor, purge_task.run)
            except Exception:
                log.error("Purge cycle failed for %r", purge_task, exc_info=True)
            await asyncio.sleep(interval)

    async def close(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        executor, self._executor = self._executor, None
        if executor is not None:
            # Waits for an in-flight cycle without blocking the event loop.
            await asyncio.get_running_loop().run_in_executor(
                None, functools.partial(executor.shutdown, wait=True)
            )
        if tasks:
            log.info("Stopped %d access log purge task(s)", len(tasks))

    async def __aenter__(self) -> "PurgeScheduler":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
