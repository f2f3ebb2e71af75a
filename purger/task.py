"""One purge cycle over an access-log directory.

A :class:`PurgeTask` lists the directory, keeps the live log file and any
name that does not look like one of its rotations, and deletes the rotated
files older than ``max_history``.  Nothing is carried over between runs, so
calling :meth:`PurgeTask.run` repeatedly is safe.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable

from purger.accesslog import AccessLogDescriptor
from purger.config import PurgeConfig
from purger.pattern import build_pattern, current_log_file_name

log = logging.getLogger(__name__)


class PurgeTask:
    def __init__(
        self,
        config: PurgeConfig,
        descriptor: AccessLogDescriptor,
        clock: Callable[[], int] = time.time_ns,
    ):
        self.config = config
        self.directory = descriptor.directory
        self.current_log_file_name = current_log_file_name(descriptor.prefix, descriptor.suffix)
        self.pattern = build_pattern(descriptor.prefix, descriptor.suffix)
        self._clock = clock

    def __repr__(self) -> str:
        return f"<PurgeTask {self.directory / self.current_log_file_name}>"

    def run(self) -> None:
        log.debug("Purging access log files in %s...", self.directory)
        try:
            with os.scandir(self.directory) as it:
                entries = list(it)
        except OSError as e:
            log.error("Could not list access log directory %s: %s", self.directory, e)
            return

        deleted = 0
        for entry in entries:
            if self._entry_is_purgeable(entry) and self.purge(entry.path):
                deleted += 1

        if deleted:
            log.info("Purged %d access log file(s) from %s", deleted, self.directory)
        log.debug("Purging finished!")

    def _entry_is_purgeable(self, entry: os.DirEntry) -> bool:
        try:
            if not entry.is_file():
                return False
            mtime_ns = entry.stat().st_mtime_ns
        except OSError as e:
            # Gone between listing and stat, most likely rotated or removed.
            log.debug("Skipping %s: %s", entry.name, e)
            return False
        return self.is_purgeable(entry.name, mtime_ns)

    def is_purgeable(self, file_name: str, mtime_ns: int) -> bool:
        """Decide whether ``file_name``, last modified at ``mtime_ns``, is due.

        Both timestamps are truncated into ``max_history_unit`` before
        subtracting, so the boundary can shift by up to one unit.
        """
        log.debug("File name: %s", file_name)
        if file_name == self.current_log_file_name:
            log.debug("Purgeable: False (current log file)")
            return False
        if not self.pattern.fullmatch(file_name):
            log.debug("Purgeable: False (name does not match %s)", self.pattern.pattern)
            return False

        unit = self.config.max_history_unit
        last_modified = unit.convert(mtime_ns)
        now = unit.convert(self._clock())
        age = now - last_modified
        log.debug("Last modified: %d, now: %d, age: %d %s", last_modified, now, age, unit.name)

        purgeable = age > self.config.max_history
        log.debug("Purgeable: %s", purgeable)
        return purgeable

    def purge(self, path) -> bool:
        """Delete ``path``. Returns False if it was already gone or could not be removed."""
        try:
            os.remove(path)
        except FileNotFoundError:
            log.debug("Already deleted: %s", path)
            return False
        except OSError:
            log.error("Failed to delete access log file %s", path, exc_info=True)
            return False
        log.debug("Deleted: %s", path)
        return True
