from __future__ import annotations

import re
import hashlib
import hmac
import bcrypt
import secrets
from typing import Any, Dict, Optional, Callable
from abc import ABC, abstractmethod


class Hasher(ABC):
    """Abstract hasher interface."""

    @abstractmethod
    def make(self, value: str, options: Optional[Dict[str, Any]] = None) -> str:
        """Hash the given value."""
        pass

    @abstractmethod
    def check(self, value: str, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the given value matches the hash."""
        pass

    @abstractmethod
    def needs_rehash(self, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the hash needs to be rehashed."""
        pass

    @abstractmethod
    def info(self, hashed: str) -> Dict[str, Any]:
        """Get information about the given hash, with ``algo`` None when unrecognized."""
        pass

    def is_hashed(self, value: Any) -> bool:
        """Determine if the value is a hash this hasher produced."""
        return isinstance(value, str) and self.info(value)['algo'] is not None


class BcryptHasher(Hasher):
    """Bcrypt password hasher."""

    PATTERN = re.compile(r'^\$2[abxy]?\$(\d{2})\$[./A-Za-z0-9]{53}$')

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def make(self, value: str, options: Optional[Dict[str, Any]] = None) -> str:
        """Hash the given value using bcrypt."""
        rounds = options.get('rounds', self.rounds) if options else self.rounds
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(str(value).encode('utf-8'), salt).decode('utf-8')

    def check(self, value: str, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the given value matches the bcrypt hash."""
        if not hashed or not self.is_hashed(hashed):
            return False
        return bcrypt.checkpw(str(value).encode('utf-8'), hashed.encode('utf-8'))

    def needs_rehash(self, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the bcrypt hash was made with fewer rounds than configured."""
        info = self.info(hashed)
        if info['algo'] is None:
            return True
        desired_rounds = options.get('rounds', self.rounds) if options else self.rounds
        return bool(info['options']['cost'] != desired_rounds)

    def info(self, hashed: str) -> Dict[str, Any]:
        match = self.PATTERN.match(hashed or '')
        if not match:
            return {'algo': None, 'algoName': 'unknown', 'options': {}}
        return {
            'algo': 'bcrypt',
            'algoName': 'bcrypt',
            'options': {'cost': int(match.group(1))},
        }


class PBKDF2Hasher(Hasher):
    """PBKDF2 hasher."""

    PATTERN = re.compile(r'^pbkdf2_(\w+)\$(\d+)\$[0-9a-f]+\$[0-9a-f]+$')

    def __init__(self, iterations: int = 100000, hash_name: str = 'sha256') -> None:
        self.iterations = iterations
        self.hash_name = hash_name

    def make(self, value: str, options: Optional[Dict[str, Any]] = None) -> str:
        """Hash the given value using PBKDF2."""
        iterations = options.get('iterations', self.iterations) if options else self.iterations
        hash_name = options.get('hash_name', self.hash_name) if options else self.hash_name
        salt_bytes = options.get('salt') if options else None

        if isinstance(salt_bytes, str):
            salt_bytes = salt_bytes.encode('utf-8')
        elif salt_bytes is None:
            salt_bytes = secrets.token_bytes(32)

        dk = hashlib.pbkdf2_hmac(hash_name, str(value).encode('utf-8'), salt_bytes, iterations)

        # Format: algorithm$iterations$salt$hash
        return f"pbkdf2_{hash_name}${iterations}${salt_bytes.hex()}${dk.hex()}"

    def check(self, value: str, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the given value matches the PBKDF2 hash."""
        if not hashed or not self.is_hashed(hashed):
            return False

        algorithm, iterations_str, salt_hex, hash_hex = hashed.split('$')
        hash_name = algorithm.replace('pbkdf2_', '')
        dk = hashlib.pbkdf2_hmac(
            hash_name, str(value).encode('utf-8'), bytes.fromhex(salt_hex), int(iterations_str)
        )

        return hmac.compare_digest(dk, bytes.fromhex(hash_hex))

    def needs_rehash(self, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the PBKDF2 hash was made with fewer iterations than configured."""
        info = self.info(hashed)
        if info['algo'] is None:
            return True
        desired_iterations = options.get('iterations', self.iterations) if options else self.iterations
        return bool(info['options']['iterations'] < desired_iterations)

    def info(self, hashed: str) -> Dict[str, Any]:
        match = self.PATTERN.match(hashed or '')
        if not match:
            return {'algo': None, 'algoName': 'unknown', 'options': {}}
        return {
            'algo': 'pbkdf2',
            'algoName': 'PBKDF2',
            'options': {'algorithm': match.group(1), 'iterations': int(match.group(2))},
        }


class HashManager:
    """Laravel-style hash manager."""

    def __init__(self, default_driver: Optional[str] = None, config: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        if config is None or default_driver is None:
            from config import hashing
            config = hashing.drivers if config is None else config
            default_driver = default_driver or hashing.default

        self._config = config
        self._default_driver = default_driver
        self._drivers: Dict[str, Hasher] = {}
        self._custom_creators: Dict[str, Callable[[], Hasher]] = {}

    def driver(self, name: Optional[str] = None) -> Hasher:
        """Get a hash driver."""
        name = name or self._default_driver

        if name not in self._drivers:
            self._drivers[name] = self._create_driver(name)

        return self._drivers[name]

    def _create_driver(self, name: str) -> Hasher:
        """Create a hash driver."""
        if name in self._custom_creators:
            return self._custom_creators[name]()

        options = self._config.get(name, {})

        if name == 'bcrypt':
            return BcryptHasher(rounds=options.get('rounds', 12))
        elif name == 'pbkdf2':
            return PBKDF2Hasher(
                iterations=options.get('iterations', 100000),
                hash_name=options.get('algorithm', 'sha256'),
            )
        else:
            raise ValueError(f"Hash driver '{name}' not supported")

    def extend(self, driver: str, creator: Callable[[], Hasher]) -> None:
        """Register a custom hash driver."""
        self._custom_creators[driver] = creator
        self._drivers.pop(driver, None)

    def make(self, value: str, options: Optional[Dict[str, Any]] = None) -> str:
        """Hash the given value using the default driver."""
        return self.driver().make(value, options)

    def check(self, value: str, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the given value matches the hash using the default driver."""
        return self.driver().check(value, hashed, options)

    def needs_rehash(self, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check if the hash needs to be rehashed using the default driver."""
        return self.driver().needs_rehash(hashed, options)

    def info(self, hashed: str) -> Dict[str, Any]:
        """Get information about the given hash."""
        return self.driver().info(hashed)

    def is_hashed(self, value: Any) -> bool:
        return self.driver().is_hashed(value)

    def get_default_driver(self) -> str:
        """Get the default hash driver."""
        return self._default_driver

    def set_default_driver(self, name: str) -> None:
        """Set the default hash driver."""
        self._default_driver = name


# Global hash manager instance
hash_manager_instance: Optional[HashManager] = None


def get_hash_manager() -> HashManager:
    """Get the global hash manager instance."""
    global hash_manager_instance
    if hash_manager_instance is None:
        hash_manager_instance = HashManager()
    return hash_manager_instance


def set_hash_manager(manager: Optional[HashManager]) -> None:
    """Replace the global hash manager, or reset it with ``None``."""
    global hash_manager_instance
    hash_manager_instance = manager


def hash_make(value: str, options: Optional[Dict[str, Any]] = None) -> str:
    """Hash the given value."""
    return get_hash_manager().make(value, options)


def hash_check(value: str, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
    """Check if the given value matches the hash."""
    return get_hash_manager().check(value, hashed, options)
