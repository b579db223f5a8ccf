# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Logging for GNSS-IR processing
==============================

Modules log through ``logging.getLogger(__name__)`` below the ``pygnssir``
root logger; this module only installs handlers. A TRACE level (5) below
DEBUG carries per-sample detail of the estimator.
"""

import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Union

ROOT_LOGGER = "pygnssir"

CONSOLE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] %(message)s"


class LogLevel(Enum):
    """Log levels accepted by the setup helpers"""
    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, level: Union[str, int]) -> int:
        """Numeric level of a name such as ``"debug"``, integers pass through"""
        if isinstance(level, int):
            return level
        try:
            return cls[level.strip().upper()].value
        except KeyError:
            raise ValueError(f"Unknown log level: {level}") from None


def _install_trace_level():
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(LogLevel.TRACE.value):
            self._log(LogLevel.TRACE.value, message, args, **kwargs)

    logging.addLevelName(LogLevel.TRACE.value, "TRACE")
    logging.Logger.trace = trace


_install_trace_level()


class ColoredFormatter(logging.Formatter):
    """Console formatter with an ANSI colored level name"""

    PALETTE = {
        LogLevel.TRACE.value: "\033[36m",
        logging.DEBUG: "\033[34m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.PALETTE.get(record.levelno)
        if color is None:
            return super().format(record)
        # other handlers receive the same record object
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logger(name: str = ROOT_LOGGER,
                 level: Union[str, int] = "INFO",
                 log_file: Optional[str] = None,
                 console: bool = True) -> logging.Logger:
    """
    Attach fresh handlers to a logger of the library

    Parameters:
    -----------
    name : str
        Logger name; the default configures every module of the package
    level : Union[str, int]
        TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL or a numeric level
    log_file : Optional[str]
        Also write uncolored records to this file
    console : bool
        Write colored records to stdout

    Returns:
    --------
    logging.Logger
        The configured logger
    """
    numeric_level = LogLevel.parse(level)
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(numeric_level)

    if console:
        logger.addHandler(_console_handler(numeric_level))
    if log_file:
        logger.addHandler(_file_handler(log_file, numeric_level))
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """Temporarily run a logger at another level

    Example:
        >>> with LogContext(logging.getLogger("pygnssir.analysis"), "TRACE"):
        ...     processor.process(store)
    """

    def __init__(self, logger: logging.Logger, level: Union[str, int]):
        self.logger = logger
        self.level = LogLevel.parse(level)
        self._saved: Optional[int] = None

    def __enter__(self) -> logging.Logger:
        self._saved = self.logger.level
        self.logger.setLevel(self.level)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self._saved)
        return False


@contextmanager
def log_duration(logger: logging.Logger, label: str,
                 level: int = logging.DEBUG) -> Iterator[None]:
    """Log the wall-clock time spent in the enclosed block"""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1e3
        logger.log(level, f"{label} took {elapsed_ms:.3f} ms")


@dataclass
class LoggerConfig:
    """Package log level with per-module overrides"""
    default_level: str = "INFO"
    log_file: Optional[str] = None
    console: bool = True
    module_levels: Dict[str, str] = field(default_factory=dict)

    def update(self, config: dict):
        for key in ("default_level", "log_file", "console"):
            if key in config:
                setattr(self, key, config[key])
        for module, level in config.get("module_levels", {}).items():
            LogLevel.parse(level)
            self.module_levels[module] = level

    def level_for(self, module_name: str) -> str:
        return self.module_levels.get(module_name, self.default_level)

    def apply(self):
        root = setup_logger(ROOT_LOGGER, self.default_level, self.log_file, self.console)
        levels = [LogLevel.parse(self.default_level)]
        for module, level in self.module_levels.items():
            levels.append(LogLevel.parse(level))
            logging.getLogger(module).setLevel(levels[-1])
        # module records propagate to the root handlers, which must not filter them
        for handler in root.handlers:
            handler.setLevel(min(levels))


logger_config = LoggerConfig()


def setup_logger_from_config(config: dict) -> LoggerConfig:
    """Configure package logging from a dictionary

    Example config:
    {
        'default_level': 'INFO',
        'log_file': 'gnssir.log',
        'console': True,
        'module_levels': {
            'pygnssir.analysis.lombscargle': 'TRACE',
            'pygnssir.io.nmea': 'WARNING'
        }
    }
    """
    logger_config.update(config)
    logger_config.apply()
    return logger_config
