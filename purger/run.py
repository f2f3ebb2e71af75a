# File: run.py
"""Standalone access-log purger.

Reads ``PURGE_CONFIG`` (default ``purge.yml``) and purges every enabled
access log listed under ``server.accesslog``.  With ``PURGE_ONCE=1`` a single
cycle runs per access log and the process exits; otherwise the scheduler runs
until interrupted.
"""
import os
import sys
import asyncio
import logging
from typing import List

from dotenv import load_dotenv

from purger.accesslog import AccessLogDescriptor, descriptors_from_settings
from purger.config import PurgeConfig, PurgeConfigError, config_from_settings, load_settings
from purger.scheduler import PurgeScheduler
from purger.task import PurgeTask
from purger.utils.logger_setup import add_file_handler, setup_logger

log = logging.getLogger(__name__)


def _load_env() -> None:
    # .env files saved by Windows editors are not always UTF-8
    try:
        load_dotenv()
    except UnicodeDecodeError:
        load_dotenv(encoding="latin-1")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        number = int(value)
    except ValueError:
        raise PurgeConfigError(f"{name} must be an integer, got {value!r}") from None
    if number < 0:
        raise PurgeConfigError(f"{name} must not be negative, got {number}")
    return number


def purge_once(config: PurgeConfig, descriptors: List[AccessLogDescriptor]) -> int:
    """Run one cycle for each enabled access log. Returns how many ran."""
    ran = 0
    for descriptor in descriptors:
        if config.enabled and descriptor.enabled:
            PurgeTask(config, descriptor).run()
            ran += 1
    return ran


async def serve(config: PurgeConfig, descriptors: List[AccessLogDescriptor]) -> None:
    async with PurgeScheduler() as scheduler:
        tasks = [t for t in (scheduler.schedule(config, d) for d in descriptors) if t]
        if not tasks:
            log.warning("No access log has purging enabled; nothing to do")
            return
        await asyncio.gather(*tasks)


def main() -> int:
    _load_env()
    logger = setup_logger("purger", os.getenv("PURGE_LOG_LEVEL"))

    path = os.getenv("PURGE_CONFIG", "purge.yml")
    try:
        settings = load_settings(path)
        config = config_from_settings(settings)
        descriptors = descriptors_from_settings(settings)
        add_file_handler(
            logger,
            os.getenv("PURGE_LOG_FILE", "logs/purger.log"),
            descriptors,
            max_bytes=_env_int("PURGE_LOG_MAX_BYTES", 2_000_000),
            backup_count=_env_int("PURGE_LOG_BACKUP_COUNT", 5),
        )
    except PurgeConfigError as e:
        log.error("Invalid purge configuration in %s: %s", path, e)
        return 2

    if os.getenv("PURGE_ONCE", "0") == "1":
        ran = purge_once(config, descriptors)
        log.info("Ran %d purge cycle(s)", ran)
        return 0

    try:
        asyncio.run(serve(config, descriptors))
    except KeyboardInterrupt:
        log.info("Interrupted, stopping purger")
    return 0


if __name__ == "__main__":
    sys.exit(main())
