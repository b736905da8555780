from __future__ import annotations

from .Encrypter import (
    Encrypter,
    EncryptionException,
    DecryptException,
    EncryptionManager,
    encryption_manager,
    get_encryption_manager,
    encrypt,
    decrypt
)

__all__ = [
    'Encrypter',
    'EncryptionException',
    'DecryptException',
    'EncryptionManager',
    'encryption_manager',
    'get_encryption_manager',
    'encrypt',
    'decrypt'
]
