import re
from typing import Pattern

ANY_CHARACTERS = ".*"


def current_log_file_name(prefix: str, suffix: str) -> str:
    return prefix + suffix


def build_pattern(prefix: str, suffix: str) -> Pattern[str]:
    """Compile ``prefix.*suffix.*`` with both parts matched literally.

    Use ``fullmatch``: rotated names like ``access.2024-05-01.log.gz`` match
    prefix ``access`` and suffix ``.log``.
    """
    return re.compile(
        re.escape(prefix) + ANY_CHARACTERS + re.escape(suffix) + ANY_CHARACTERS,
        re.DOTALL,
    )
