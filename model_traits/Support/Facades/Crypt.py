from __future__ import annotations

from typing import Any
from model_traits.Encryption.Encrypter import Encrypter, encryption_manager


class Crypt:
    """Laravel-style Crypt facade."""

    @staticmethod
    def encrypt(value: Any, serialize: bool = True) -> str:
        """Encrypt a value."""
        return encryption_manager.encrypt(value, serialize)

    @staticmethod
    def decrypt(payload: Any, unserialize: bool = True) -> Any:
        """Decrypt a value."""
        return encryption_manager.decrypt(payload, unserialize)

    @staticmethod
    def encrypt_string(value: str) -> str:
        """Encrypt a string without serialization."""
        return encryption_manager.encrypter().encrypt_string(value)

    @staticmethod
    def decrypt_string(payload: str) -> str:
        """Decrypt a string without unserialization."""
        return encryption_manager.encrypter().decrypt_string(payload)

    @staticmethod
    def generate_key() -> str:
        """Generate a new encryption key."""
        return Encrypter.generate_key()

    @staticmethod
    def get_facade_root() -> Encrypter:
        """Get the encrypter behind the facade."""
        return encryption_manager.encrypter()

    @staticmethod
    def swap(encrypter: Encrypter) -> None:
        """Swap the encrypter behind the facade, mainly for tests."""
        encryption_manager.set_encrypter(encrypter)
