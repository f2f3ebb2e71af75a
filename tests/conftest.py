import logging
import os
import sys
import time

import pytest

# Ensure project root on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from purger.accesslog import AccessLogDescriptor
from purger.config import PurgeConfig
from purger.units import TimeUnit


def age_file(path, seconds):
    """Set ``path``'s mtime ``seconds`` in the past."""
    then = time.time() - seconds
    os.utime(path, (then, then))


@pytest.fixture
def log_dir(tmp_path):
    d = tmp_path / "access_log_test"
    d.mkdir()
    return d


@pytest.fixture
def descriptor(log_dir):
    return AccessLogDescriptor(directory=log_dir, enabled=True)


@pytest.fixture
def seconds_config():
    return PurgeConfig(
        enabled=True,
        execution_interval=1,
        execution_interval_unit=TimeUnit.SECONDS,
        max_history=5,
        max_history_unit=TimeUnit.SECONDS,
    )


@pytest.fixture(autouse=True)
def _reset_purger_logger():
    yield
    logger = logging.getLogger("purger")
    logger.setLevel(logging.NOTSET)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
