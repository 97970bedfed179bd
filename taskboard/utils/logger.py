import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logger(log_file: str = "logs/taskboard.log", level: str = "INFO",
                 fmt: str = DEFAULT_FORMAT, datefmt: str = None,
                 max_bytes: int = 10_000_000, backup_count: int = 5):
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(fmt, datefmt=datefmt)

    # Re-running setup replaces our handlers instead of stacking duplicates
    for handler in list(logger.handlers):
        if getattr(handler, "_taskboard", False):
            logger.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    for handler in (console, file_handler):
        handler.setFormatter(formatter)
        handler._taskboard = True
        logger.addHandler(handler)
    return logger
