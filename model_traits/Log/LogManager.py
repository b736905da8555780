from __future__ import annotations

import logging
import sys
import json
from typing import Any, Dict, Optional, Union
from pathlib import Path
from datetime import datetime

# Every module logs through a child of this logger
ROOT_LOGGER = 'model_traits'


class LaravelFormatter(logging.Formatter):
    """Laravel-style log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record."""
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        log_line = f"[{timestamp}] {record.name}.{record.levelname}: {record.getMessage()}"

        context = getattr(record, 'context', None)
        if context:
            log_line += f" {json.dumps(context, default=str)}"

        if record.exc_info:
            log_line += f"\n{self.formatException(record.exc_info)}"

        return log_line


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'channel': record.name,
            'message': record.getMessage(),
            'context': getattr(record, 'context', {}),
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class LogManager:
    """Laravel-style log manager that wires configured channels onto the package logger."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        if config is None:
            from config import logging as logging_config
            config = {
                'default': logging_config.default,
                'channels': logging_config.channels,
            }
        self._config = config
        self._handlers: Dict[str, logging.Handler] = {}

    def channel_config(self, name: Optional[str] = None) -> Dict[str, Any]:
        name = name or self._config.get('default', 'stderr')
        channels: Dict[str, Dict[str, Any]] = self._config.get('channels', {})
        if name not in channels:
            raise ValueError(f"Log channel [{name}] is not defined.")
        return channels[name]

    def handler(self, name: Optional[str] = None) -> logging.Handler:
        """Get (and cache) the handler for a configured channel."""
        name = name or self._config.get('default', 'stderr')
        if name not in self._handlers:
            self._handlers[name] = self._create_handler(self.channel_config(name))
        return self._handlers[name]

    def _create_handler(self, config: Dict[str, Any]) -> logging.Handler:
        driver = config.get('driver', 'stderr')

        handler: logging.Handler
        if driver == 'single':
            path = Path(config.get('path', 'storage/logs/model_traits.log'))
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path)
        elif driver == 'stderr':
            handler = logging.StreamHandler(sys.stderr)
        elif driver == 'null':
            handler = logging.NullHandler()
        else:
            raise ValueError(f"Log driver [{driver}] is not supported.")

        handler.setLevel(self._level(config.get('level', 'debug')))
        handler.setFormatter(JsonFormatter() if config.get('formatter') == 'json' else LaravelFormatter())
        return handler

    @staticmethod
    def _level(level: Union[str, int]) -> int:
        if isinstance(level, int):
            return level
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.DEBUG

    def configure(self, channel: Optional[str] = None) -> logging.Logger:
        """Attach a channel's handler to the package logger."""
        package_logger = logging.getLogger(ROOT_LOGGER)
        handler = self.handler(channel)
        if handler not in package_logger.handlers:
            package_logger.addHandler(handler)
        if package_logger.level == logging.NOTSET or package_logger.level > handler.level:
            package_logger.setLevel(handler.level)
        return package_logger


# Global log manager instance
log_manager_instance: Optional[LogManager] = None


def get_log_manager() -> LogManager:
    """Get the global log manager instance."""
    global log_manager_instance
    if log_manager_instance is None:
        log_manager_instance = LogManager()
    return log_manager_instance


def configure_logging(channel: Optional[str] = None) -> logging.Logger:
    """Route model_traits log records to a configured channel."""
    return get_log_manager().configure(channel)
