import logging
import logging.handlers
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from verifybot import config


def setup_logging(level: Union[int, str] = logging.INFO, log_dir: Optional[Union[str, Path]] = None):
    """
    Sets up console logging and, when a directory is given, daily rotating file logging.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Prevent duplicate handlers if setup_logging is called multiple times
    if logger.handlers:
        return

    # Format: [2026-01-07 20:35:46] [INFO] verifybot.dispatcher: Message
    formatter = logging.Formatter(config.LOG_FORMAT, datefmt=config.LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        log_dir = Path(log_dir)
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        # 'when="D"' means daily, 'interval=1' means every 1 day
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=log_dir / f"{datetime.now().strftime('%Y-%m-%d')}.log",
            when="D",
            interval=1,
            backupCount=config.LOG_BACKUP_DAYS,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # py-cord is chatty at INFO during gateway reconnects
    logging.getLogger("discord").setLevel(max(logger.level, logging.WARNING))

    logging.info("Logging initialized.")
