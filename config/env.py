from __future__ import annotations

import os
from typing import Any, Optional
from pathlib import Path


class Environment:
    """Laravel-style environment configuration loader."""

    def __init__(self, env_file: Optional[str] = None) -> None:
        self.env_file = env_file or os.getenv('MODEL_TRAITS_ENV_FILE', '.env')
        self.loaded = False
        self._load_env_file()

    def _find_env_file(self) -> Optional[Path]:
        env_path = Path(self.env_file)
        if env_path.is_absolute():
            return env_path if env_path.exists() else None

        # Walk up from the working directory
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            candidate = parent / self.env_file
            if candidate.exists():
                return candidate
        return None

    def _load_env_file(self) -> None:
        """Load environment variables from .env file without overriding real ones."""
        if self.loaded:
            return

        env_path = self._find_env_file()
        self.loaded = True
        if env_path is None:
            return

        with open(env_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue

                key, value = line.split('=', 1)
                key = key.strip()
                value = value.strip()

                if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                    value = value[1:-1]

                os.environ.setdefault(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Get environment variable with optional default."""
        return self._convert_type(os.getenv(key, default))

    def _convert_type(self, value: Any) -> Any:
        """Convert string values to appropriate types."""
        if not isinstance(value, str):
            return value

        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        if value.isdigit() or (value.startswith('-') and value[1:].isdigit()):
            return int(value)

        return value

    def has(self, key: str) -> bool:
        """Check if environment variable exists."""
        return key in os.environ


# Global environment instance
env = Environment()


def env_get(key: str, default: Any = None) -> Any:
    """Get environment variable."""
    return env.get(key, default)
