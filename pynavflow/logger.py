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

"""Logging configuration for pynavflow"""

import logging
import sys
from enum import Enum
from typing import Optional

ROOT_LOGGER = "pynavflow"


class LogLevel(Enum):
    """Log levels for the system"""
    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


# Add TRACE level to logging
logging.addLevelName(LogLevel.TRACE.value, "TRACE")


def _level(level: str) -> int:
    try:
        return getattr(LogLevel, level.upper()).value
    except AttributeError:
        raise ValueError(f"Unknown log level: {level!r}") from None


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter painting the level name with an ANSI color"""

    COLORS = {
        'TRACE': '\033[36m',
        'DEBUG': '\033[34m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        # color a copy, other handlers format the same record
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _attach(logger: logging.Logger, handler: logging.Handler,
            formatter: logging.Formatter, level: int):
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _detach_all(logger: logging.Logger):
    for handler in list(logger.handlers):
        handler.flush()
        logger.removeHandler(handler)
        handler.close()


def setup_logger(name: str = ROOT_LOGGER,
                 level: str = "INFO",
                 log_file: Optional[str] = None,
                 console: bool = True) -> logging.Logger:
    """
    Replace the sinks of a logger

    Parameters:
    -----------
    name : str
        Logger name, the package logger by default
    level : str
        Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file : Optional[str]
        Also write plain text records to this file
    console : bool
        Write colored records to stdout

    Returns:
    --------
    logging.Logger
        Configured logger
    """
    numeric = _level(level)
    logger = logging.getLogger(name)
    logger.setLevel(numeric)
    _detach_all(logger)

    if console:
        _attach(logger, logging.StreamHandler(sys.stdout),
                ColoredFormatter(LOG_FORMAT, datefmt='%H:%M:%S'), numeric)
    if log_file:
        _attach(logger, logging.FileHandler(log_file),
                logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'), numeric)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get logger by name"""
    return logging.getLogger(name)


class Logger:
    """Console sink, optionally mirrored to a file, for the lifetime of the object

    Parameters:
    -----------
    log_file : Optional[str]
        Also write the log to this file
    level : str
        Log level of all sinks

    Examples:
    ---------
    >>> with Logger("/tmp/flow.log", level="DEBUG"):
    ...     run_flow("RinexNavFile.flow")
    """

    def __init__(self, log_file: Optional[str] = None, level: str = "INFO",
                 name: str = ROOT_LOGGER):
        self.log_file = log_file
        self.logger = setup_logger(name, level, log_file, console=True)
        self.logger.debug(f"Logger initialized (file sink: {log_file or 'none'})")

    def close(self):
        """Flush and detach all sinks"""
        _detach_all(self.logger)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class LogContext:
    """Raise or lower the level of a logger inside a ``with`` block"""

    def __init__(self, logger: logging.Logger, level: str):
        self.logger = logger
        self.level = _level(level)
        self._saved = None

    def __enter__(self):
        self._saved = self.logger.level
        self.logger.setLevel(self.level)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self._saved)


class LoggerConfig:
    """Package sinks plus per-module log levels"""

    def __init__(self):
        self.module_levels = {}
        self.default_level = "INFO"
        self.log_file = None
        self.console = True

    def set_module_level(self, module_name: str, level: str):
        self.module_levels[module_name] = level
        logging.getLogger(module_name).setLevel(_level(level))

    def reset(self):
        """Back to the defaults; module loggers follow the package level again"""
        for module in self.module_levels:
            logging.getLogger(module).setLevel(logging.NOTSET)
        self.module_levels = {}
        self.default_level = "INFO"
        self.log_file = None
        self.console = True

    def configure_from_dict(self, config: dict):
        """Replace the configuration, see ``setup_logger_from_config``"""
        self.reset()
        self.default_level = config.get('default_level', self.default_level)
        self.log_file = config.get('log_file', self.log_file)
        self.console = config.get('console', self.console)
        for module, level in config.get('module_levels', {}).items():
            self.set_module_level(module, level)

    def setup_all_loggers(self) -> logging.Logger:
        """Install the sinks on the package logger; module loggers propagate to it"""
        logger = setup_logger(ROOT_LOGGER, self.default_level, self.log_file, self.console)
        for module, level in self.module_levels.items():
            logging.getLogger(module).setLevel(_level(level))
        # sinks must pass records of modules logging below the default level
        lowest = min([_level(self.default_level), *(_level(lv) for lv in self.module_levels.values())])
        for handler in logger.handlers:
            handler.setLevel(lowest)
        return logger


# Global logger configuration
logger_config = LoggerConfig()


def setup_logger_from_config(config: dict) -> logging.Logger:
    """Setup loggers from configuration dictionary

    Example config:
    {
        'default_level': 'INFO',
        'log_file': 'flow.log',
        'console': True,
        'module_levels': {
            'pynavflow.io.rinex_nav': 'DEBUG',
            'pynavflow.flow.scheduler': 'TRACE',
        }
    }
    """
    logger_config.configure_from_dict(config)
    return logger_config.setup_all_loggers()
