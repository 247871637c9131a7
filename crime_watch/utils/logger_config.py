import logging
import os
from datetime import datetime

LOG_DIR_ENV = 'CRIME_WATCH_LOG_DIR'


def _file_handler(log_dir, level):
    os.makedirs(log_dir, exist_ok=True)

    # Configs for how logs will appear in the log dir
    file_format = logging.Formatter(
        '%(levelname)s : %(name)s : %(funcName)s : %(lineno)d : %(message)s'
    )

    log_file = os.path.join(log_dir, f'crime_watch_{datetime.now().strftime("%m%d%Y")}.log')
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(file_format)
    return file_handler


def _package_loggers():
    for name in list(logging.root.manager.loggerDict):
        if name == 'crime_watch' or name.startswith('crime_watch.'):
            yield logging.getLogger(name)


def setup_logger(name, level=logging.DEBUG):
    """
    Basic Custom Logging formatting and handling

    Console output is always on. File output goes to the directory named by
    CRIME_WATCH_LOG_DIR when that variable is set.

    Parameters
    name (str) : Name of the logger
    level (int) : Level for the logger and its handlers

    Returns:
    logging.Logger : Configured Logger Instance
    """

    # Create Logger
    logger = logging.getLogger(name)

    # Modules are imported more than once under test runners
    if logger.handlers:
        return logger

    logger.setLevel(level)

    # Console logs configs
    console_format = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    log_dir = os.getenv(LOG_DIR_ENV)
    if log_dir:
        logger.addHandler(_file_handler(log_dir, level))

    return logger


def enable_file_logging(log_dir=None):
    """
    Attach a dated file handler to every crime_watch logger that lacks one.

    Loggers are built at import time, before a .env file may have been read,
    so entry points call this once the environment is final.

    Parameters
    log_dir (str) : Target directory (Default = CRIME_WATCH_LOG_DIR)

    Returns:
    str or None : Directory in use, None when file logging stays off
    """
    log_dir = log_dir or os.getenv(LOG_DIR_ENV)
    if not log_dir:
        return None

    for logger in _package_loggers():
        if not logger.handlers:
            continue
        if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            continue
        logger.addHandler(_file_handler(log_dir, logger.level))
    return log_dir


def set_level(level):
    """Apply `level` to every crime_watch logger created so far."""
    for logger in _package_loggers():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
