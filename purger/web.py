from __future__ import annotations

import logging
from typing import AsyncIterator, Iterable, Optional

from aiohttp import web

from purger.accesslog import AccessLogDescriptor
from purger.config import PurgeConfig, validate_config
from purger.scheduler import PurgeScheduler

log = logging.getLogger(__name__)

PURGE_SCHEDULER_KEY = web.AppKey("purge_scheduler", PurgeScheduler)


def setup_purge(
    app: web.Application,
    config: PurgeConfig,
    descriptors: Iterable[AccessLogDescriptor],
    max_workers: Optional[int] = None,
) -> None:
    """Purge the given access logs for as long as ``app`` runs.

    The config is validated here, before the app starts serving.
    """
    validate_config(config)
    descriptors = list(descriptors)
    scheduler = PurgeScheduler(max_workers=max_workers)
    app[PURGE_SCHEDULER_KEY] = scheduler

    async def _purge_ctx(app: web.Application) -> AsyncIterator[None]:
        for descriptor in descriptors:
            scheduler.schedule(config, descriptor)
        yield
        await scheduler.close()

    app.cleanup_ctx.append(_purge_ctx)
    log.debug("Registered access log purge for %d access log(s)", len(descriptors))
