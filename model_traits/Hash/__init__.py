from __future__ import annotations

from .HashManager import (
    HashManager,
    Hasher,
    BcryptHasher,
    PBKDF2Hasher,
    get_hash_manager,
    set_hash_manager,
    hash_make,
    hash_check
)

__all__ = [
    'HashManager',
    'Hasher',
    'BcryptHasher',
    'PBKDF2Hasher',
    'get_hash_manager',
    'set_hash_manager',
    'hash_make',
    'hash_check'
]
