"""
Logging for the InventoryConsole sync core.

Every module logs through ``get_logger(__name__)``; the handlers live on the
root logger and are owned by a single ``LoggingManager``:
- a colored console stream
- ``inventory_console.log``, rotated by size
- ``inventory_console_errors.log``, ERROR and above only

Steady-state polling logs at DEBUG, background poll failures at WARNING and
rolled-back user mutations at WARNING, so INFO output stays readable while
the console runs for hours.

Usage:
    from InventoryConsole.core.logging import get_logger

    logger = get_logger(__name__)
    logger.debug("Merged %d conversations", len(snapshot))

Configuration:
    from InventoryConsole.core.logging import configure_logging, LogConfig

    configure_logging(LogConfig(level="DEBUG", log_dir="./logs", backup_count=5))

or pick a preset from ``INVENTORY_CONSOLE_ENV`` with ``auto_configure()``.
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

LOG_FILE_NAME = "inventory_console.log"
ERROR_LOG_FILE_NAME = "inventory_console_errors.log"


@dataclass
class LogConfig:
    """
    Settings applied by ``LoggingManager.configure``.

    Attributes:
        level: Root level name or number
        log_dir: Directory holding the two log files
        console_output: Install the colored stdout handler
        file_output: Install the rotating file handlers
        max_bytes: Size at which a log file is rotated
        backup_count: Rotated files to keep per log
        format_string: Overrides the preset record format
        date_format: ``asctime`` format
        component_levels: Per-logger levels, e.g. ``{"aiohttp": "WARNING"}``
    """
    level: str = "INFO"
    log_dir: str = "./logs"
    console_output: bool = True
    file_output: bool = True
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    format_string: Optional[str] = None
    date_format: str = "%Y-%m-%d %H:%M:%S"
    component_levels: Dict[str, str] = field(default_factory=dict)


class ColoredFormatter(logging.Formatter):
    """Colors the level name on terminals that understand ANSI codes."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, fmt: str, datefmt: str = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.platform != 'win32'

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors or record.levelname not in self.COLORS:
            return super().format(record)
        # Other handlers share the record; restore the plain name afterwards
        original = record.levelname
        record.levelname = f"{self.COLORS[original]}{original}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def get_default_format() -> str:
    """Record format for the console stream."""
    return "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_detailed_format() -> str:
    """Record format for the log files, with source location."""
    return (
        "%(asctime)s - %(name)s - %(levelname)s - "
        "[%(filename)s:%(lineno)d - %(funcName)s] - %(message)s"
    )


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper())


class LoggingManager:
    """
    Process-wide owner of the console's log handlers.

    Only handlers installed here are removed on reconfiguration, so
    handlers added by a host application or by pytest's ``caplog`` stay.
    """

    _instance: Optional['LoggingManager'] = None
    _initialized: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._config: Optional[LogConfig] = None
        self._handlers: List[logging.Handler] = []
        self._initialized = True

    @property
    def config(self) -> Optional[LogConfig]:
        return self._config

    @property
    def handlers(self) -> List[logging.Handler]:
        return list(self._handlers)

    def configure(self, config: LogConfig) -> None:
        """Replace this manager's handlers with the ones ``config`` asks for."""
        self._config = config
        level = _to_level(config.level)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        self._detach_all()

        if config.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(
                ColoredFormatter(config.format_string or get_default_format(), config.date_format)
            )
            self.add_handler(console_handler)

        if config.file_output:
            Path(config.log_dir).mkdir(parents=True, exist_ok=True)
            formatter = logging.Formatter(config.format_string or get_detailed_format(), config.date_format)
            for file_name, file_level in ((LOG_FILE_NAME, level), (ERROR_LOG_FILE_NAME, logging.ERROR)):
                file_handler = logging.handlers.RotatingFileHandler(
                    os.path.join(config.log_dir, file_name),
                    maxBytes=config.max_bytes,
                    backupCount=config.backup_count,
                    encoding='utf-8'
                )
                file_handler.setLevel(file_level)
                file_handler.setFormatter(formatter)
                self.add_handler(file_handler)

        for component, component_level in config.component_levels.items():
            logging.getLogger(component).setLevel(_to_level(component_level))

        logging.getLogger(__name__).info("Logging configured at %s", config.level)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def set_level(self, level: Union[str, int]) -> None:
        """Change the root level; the error-file handler keeps ERROR."""
        level = _to_level(level)
        logging.getLogger().setLevel(level)
        for handler in self._handlers:
            if handler.level != logging.ERROR:
                handler.setLevel(level)

    def add_handler(self, handler: logging.Handler) -> None:
        """Attach ``handler`` to the root logger and take ownership of it."""
        logging.getLogger().addHandler(handler)
        self._handlers.append(handler)

    def shutdown(self) -> None:
        """Detach and close every handler this manager installed."""
        self._detach_all()

    def _detach_all(self) -> None:
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers = []


_logging_manager = LoggingManager()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name, normally ``__name__``
    """
    return _logging_manager.get_logger(name)


def configure_logging(config: LogConfig) -> None:
    _logging_manager.configure(config)


def get_logging_manager() -> LoggingManager:
    return _logging_manager


def create_development_config() -> LogConfig:
    """Everything at DEBUG, including each poll tick and gateway request."""
    return LogConfig(
        level="DEBUG",
        log_dir="./logs/dev",
        max_bytes=5 * 1024 * 1024,  # 5MB
        backup_count=3,
        format_string=get_detailed_format(),
        component_levels={
            "aiohttp": "WARNING",
            "asyncio": "WARNING",
        }
    )


def create_production_config() -> LogConfig:
    """File output only; poll ticks and successful requests are not recorded."""
    return LogConfig(
        level="INFO",
        log_dir="./logs/prod",
        console_output=False,
        max_bytes=50 * 1024 * 1024,  # 50MB
        backup_count=10,
        format_string=get_detailed_format(),
        component_levels={
            "InventoryConsole.api": "INFO",
            "InventoryConsole.core.sync.scheduler": "INFO",
            "aiohttp": "ERROR",
            "asyncio": "ERROR",
        }
    )


def create_testing_config() -> LogConfig:
    """Console only, short records, nothing written to disk."""
    return LogConfig(
        level="DEBUG",
        log_dir="./logs/test",
        file_output=False,
        format_string="%(levelname)s - %(name)s - %(message)s",
        component_levels={
            "aiohttp": "ERROR",
        }
    )


_PRESETS = {
    "development": create_development_config,
    "dev": create_development_config,
    "production": create_production_config,
    "prod": create_production_config,
    "testing": create_testing_config,
    "test": create_testing_config,
}


def auto_configure(env: Optional[str] = None) -> None:
    """
    Configure logging from a named preset.

    Args:
        env: development, production or testing. Defaults to
             ``INVENTORY_CONSOLE_ENV``, then development.
             ``INVENTORY_CONSOLE_LOG_LEVEL`` overrides the preset's level.
    """
    if env is None:
        env = os.environ.get("INVENTORY_CONSOLE_ENV", "development")
    env = env.lower()

    config = _PRESETS.get(env, create_development_config)()
    override = os.environ.get("INVENTORY_CONSOLE_LOG_LEVEL")
    if override:
        config.level = override.upper()
    configure_logging(config)

    get_logger(__name__).info("Logging auto-configured for environment: %s", env)


__all__ = [
    'LogConfig',
    'LoggingManager',
    'ColoredFormatter',
    'get_logger',
    'configure_logging',
    'get_logging_manager',
    'create_development_config',
    'create_production_config',
    'create_testing_config',
    'auto_configure',
    'get_default_format',
    'get_detailed_format',
]
