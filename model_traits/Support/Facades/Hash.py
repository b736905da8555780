from __future__ import annotations

from typing import Any, Dict, Optional
from model_traits.Hash.HashManager import HashManager, Hasher, get_hash_manager, set_hash_manager


class Hash:
    """Laravel-style Hash facade."""

    @staticmethod
    def make(value: str, options: Optional[Dict[str, Any]] = None) -> str:
        """Hash the given value."""
        return get_hash_manager().make(value, options)

    @staticmethod
    def check(value: str, hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        """Check the given plain value against a hash."""
        return get_hash_manager().check(value, hashed, options)

    @staticmethod
    def needs_rehash(hashed: str, options: Optional[Dict[str, Any]] = None) -> bool:
        return get_hash_manager().needs_rehash(hashed, options)

    @staticmethod
    def info(hashed: str) -> Dict[str, Any]:
        return get_hash_manager().info(hashed)

    @staticmethod
    def is_hashed(value: Any) -> bool:
        return get_hash_manager().is_hashed(value)

    @staticmethod
    def driver(name: Optional[str] = None) -> Hasher:
        return get_hash_manager().driver(name)

    @staticmethod
    def swap(manager: Optional[HashManager]) -> None:
        """Swap the manager behind the facade, mainly for tests."""
        set_hash_manager(manager)
