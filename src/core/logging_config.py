"""
Logging configuration for the Road Safety Enforcement Dashboard.

Library modules log under the ``roadsafety`` namespace via get_logger();
Dash callback modules use plain ``logging.getLogger(__name__)`` and so live
under ``dash_app``. setup_logging() attaches the same handlers to both, so
a callback failure lands in the same console and log file as a load error.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Bare message format, used by the export CLI
SIMPLE_FORMAT = "%(message)s"

ROOT_LOGGER_NAME = "roadsafety"
APP_LOGGER_NAMESPACES = (ROOT_LOGGER_NAME, "dash_app")

# requests logs every connection at DEBUG through urllib3
NOISY_LOGGERS = ("urllib3",)


def resolve_level(level: Union[int, str]) -> int:
    """Accept a logging constant or a level name from dashboard.toml."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[Path] = None,
    console: bool = True,
    file_logging: bool = False,
    simple_console: bool = False,
) -> logging.Logger:
    """
    Configure logging for the dashboard and the export CLI.

    Args:
        level: Logging level or level name (default: INFO)
        log_dir: Directory for log files (default: ./logs/)
        console: Whether to log to stdout (default: True)
        file_logging: Whether to also write a timestamped log file
        simple_console: Print only the message on the console

    Returns:
        The ``roadsafety`` namespace logger.
    """
    level = resolve_level(level)
    handlers: list[logging.Handler] = []

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        if simple_console:
            console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
        else:
            console_handler.setFormatter(
                logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
            )
        handlers.append(console_handler)

    if file_logging:
        log_dir = Path(log_dir) if log_dir is not None else Path("./logs")
        log_dir.mkdir(parents=True, exist_ok=True)
        log_filename = f"roadsafety_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_dir / log_filename, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)

    for namespace in APP_LOGGER_NAMESPACES:
        logger = logging.getLogger(namespace)
        # Re-initialisation must not stack handlers
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        logger.setLevel(level)
        for handler in handlers:
            logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return logging.getLogger(ROOT_LOGGER_NAME)


def setup_logging_from_config(logging_config, verbose: bool = False, **kwargs) -> logging.Logger:
    """setup_logging() driven by the ``[logging]`` section; ``verbose`` forces DEBUG."""
    return setup_logging(
        level=logging.DEBUG if verbose else logging_config.level,
        log_dir=Path(logging_config.directory),
        file_logging=logging_config.file_logging,
        **kwargs,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module, namespaced under ``roadsafety``.

    Usage:
        logger = get_logger(__name__)
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
