from __future__ import annotations

from typing import Dict, Any

from .env import env_get

# Default hash driver
default: str = env_get('HASH_DRIVER', 'bcrypt')

# Hash drivers configuration
drivers: Dict[str, Dict[str, Any]] = {
    'bcrypt': {
        'driver': 'bcrypt',
        'rounds': int(env_get('BCRYPT_ROUNDS', 12)),
    },

    'pbkdf2': {
        'driver': 'pbkdf2',
        'algorithm': env_get('PBKDF2_ALGORITHM', 'sha256'),
        'iterations': int(env_get('PBKDF2_ITERATIONS', 100000)),
    },
}
