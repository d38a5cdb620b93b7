"""
Logging setup for applications embedding feedscrub.
Installs rotating Loguru file sinks and enables the package's log records.
"""

from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config import LOG_DIR, LOG_LEVEL, LOG_RETENTION

_HANDLER_IDS: List[int] = []


def setup_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> List[int]:
    """
    Add file sinks for sanitizer logs. Safe to call more than once.

    Args:
        log_dir: Directory for the log files, defaults to ``LOG_DIR``
        level: Minimum level for the main log, defaults to ``LOG_LEVEL``

    Returns:
        The Loguru handler ids of the installed sinks
    """
    if _HANDLER_IDS:
        return list(_HANDLER_IDS)

    target = Path(log_dir or LOG_DIR)
    target.mkdir(parents=True, exist_ok=True)

    _HANDLER_IDS.append(
        logger.add(
            str(target / "feedscrub.log"),
            rotation="1 day",
            retention=LOG_RETENTION,
            level=level or LOG_LEVEL,
        )
    )
    _HANDLER_IDS.append(
        logger.add(
            str(target / "errors.log"),
            rotation="1 day",
            retention=LOG_RETENTION,
            level="ERROR",
        )
    )
    logger.enable("feedscrub")
    logger.info(f"feedscrub logging to {target}")
    return list(_HANDLER_IDS)
