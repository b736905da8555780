from __future__ import annotations

from typing import Dict, Any

from .env import env_get

# Default logging channel
default: str = env_get('LOG_CHANNEL', 'stderr')

# Default logging level
level: str = env_get('LOG_LEVEL', 'warning')

channels: Dict[str, Dict[str, Any]] = {
    'stderr': {
        'driver': 'stderr',
        'level': level,
        'formatter': 'laravel',
    },

    'single': {
        'driver': 'single',
        'path': env_get('LOG_PATH', 'storage/logs/model_traits.log'),
        'level': level,
        'formatter': 'laravel',
    },

    'json': {
        'driver': 'stderr',
        'level': level,
        'formatter': 'json',
    },

    'null': {
        'driver': 'null',
    },
}
