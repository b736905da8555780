from __future__ import annotations

from .LogManager import (
    LogManager,
    LaravelFormatter,
    JsonFormatter,
    ROOT_LOGGER,
    get_log_manager,
    configure_logging
)

__all__ = [
    'LogManager',
    'LaravelFormatter',
    'JsonFormatter',
    'ROOT_LOGGER',
    'get_log_manager',
    'configure_logging'
]
