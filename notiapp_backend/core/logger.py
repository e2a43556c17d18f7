"""
Logging for the NotiApp backend

Everything goes to the console and `notiapp_backend.log`; errors are also
kept in `error.log`. Both files rotate by size, configured under [logging].
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict, List, Optional

from notiapp_backend.config.loader import get_config

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
)

# (file name, minimum level)
LOG_FILES = (
    ("notiapp_backend.log", logging.DEBUG),
    ("error.log", logging.ERROR),
)

_SIZE_UNITS = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}


def parse_size(value: Any) -> int:
    """Bytes for "512", "512KB", "10MB" or "1GB" """
    text = str(value).strip().upper()
    for unit, factor in _SIZE_UNITS.items():
        if text.endswith(unit):
            return int(text[: -len(unit)].strip()) * factor
    return int(text)


def _logging_settings() -> Dict[str, Any]:
    config = get_config()
    level_name = str(config.get("logging.level", "INFO")).upper()
    return {
        "level": getattr(logging, level_name, logging.INFO),
        "logs_dir": Path(config.get("logging.logs_dir", "./logs")),
        "max_bytes": parse_size(config.get("logging.max_file_size", "10MB")),
        "backup_count": int(config.get("logging.backup_count", 5)),
    }


def _build_handlers(settings: Dict[str, Any]) -> List[logging.Handler]:
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers: List[logging.Handler] = [console]

    settings["logs_dir"].mkdir(parents=True, exist_ok=True)
    file_format = logging.Formatter(FILE_FORMAT)
    for file_name, level in LOG_FILES:
        handler = logging.handlers.RotatingFileHandler(
            settings["logs_dir"] / file_name,
            maxBytes=settings["max_bytes"],
            backupCount=settings["backup_count"],
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(file_format)
        handlers.append(handler)
    return handlers


class LoggerManager:
    """Owns the root logger handlers"""

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self.handlers: List[logging.Handler] = []
        self.configure()

    def configure(self) -> None:
        """(Re)install handlers from the current configuration"""
        settings = _logging_settings()
        root_logger = logging.getLogger()

        self.detach()
        root_logger.handlers.clear()
        root_logger.setLevel(settings["level"])

        self.handlers = _build_handlers(settings)
        for handler in self.handlers:
            root_logger.addHandler(handler)

    def detach(self) -> None:
        root_logger = logging.getLogger()
        for handler in self.handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self.handlers = []

    def get_logger(self, name: str) -> logging.Logger:
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]


# Created by setup_logging(); importing a module never reads the config file
_logger_manager: Optional[LoggerManager] = None


def get_logger(name: str) -> logging.Logger:
    """Module logger; handlers attach to the root once setup_logging() runs"""
    if _logger_manager is not None:
        return _logger_manager.get_logger(name)
    return logging.getLogger(name)


def setup_logging() -> LoggerManager:
    global _logger_manager

    if _logger_manager is None:
        _logger_manager = LoggerManager()
    else:
        _logger_manager.configure()
    return _logger_manager


def reset_logging() -> None:
    """Detach and close the handlers installed by setup_logging()"""
    global _logger_manager

    if _logger_manager is None:
        return
    _logger_manager.detach()
    _logger_manager = None
