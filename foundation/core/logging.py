import os
import sys
from typing import List, Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{thread.name}</cyan> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(debug_mode: bool = True, log_dir: Optional[str] = "logs") -> List[int]:
    """
    Configure loguru sinks for the controller runtime.

    The console shows the thread name: construction and navigation happen on
    the UI thread, timers and lookups may not.

    Args:
        debug_mode: DEBUG on the console instead of INFO
        log_dir: Directory for rotating log files, None for console only

    Returns:
        Ids of the added sinks, usable with ``logger.remove()``
    """
    logger.remove()

    sinks = [logger.add(sys.stderr, level="DEBUG" if debug_mode else "INFO", format=CONSOLE_FORMAT)]

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        # enqueue: timer threads log too
        sinks.append(logger.add(
            os.path.join(log_dir, "foundation_{time}.log"),
            rotation="10 MB",
            retention="1 week",
            level="DEBUG",
            enqueue=True,
        ))

    logger.info(f"Logging initialized (debug={debug_mode}, log_dir={log_dir})")
    return sinks
