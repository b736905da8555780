from __future__ import annotations

import os
import json
import base64
import hmac
import hashlib
import logging
from typing import Any, Dict, Optional
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)


class EncryptionException(Exception):
    """Exception raised when encryption fails."""
    pass


class DecryptException(EncryptionException):
    """Exception raised when a payload cannot be decrypted."""
    pass


class Encrypter:
    """Laravel-style encryption service."""

    SUPPORTED_CIPHERS = ('AES-128-CBC', 'AES-256-CBC')

    def __init__(self, key: str, cipher: str = 'AES-256-CBC') -> None:
        if not key:
            raise EncryptionException("No application encryption key has been specified.")
        if not self.supported(cipher):
            raise EncryptionException(
                f"Unsupported cipher {cipher!r}, expected one of {', '.join(self.SUPPORTED_CIPHERS)}."
            )

        self.key = key
        self.cipher = cipher
        self._fernet = self._create_fernet_instance()

    def _create_fernet_instance(self) -> Fernet:
        """Create Fernet instance from the application key."""
        if self.key.startswith('base64:'):
            key_data = base64.b64decode(self.key[7:])
        else:
            key_data = self.key.encode()

        # Derive a 32-byte key for Fernet
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=b'model_traits_salt',  # Static salt so the same key always decrypts
            iterations=100000,
        )
        derived_key = base64.urlsafe_b64encode(kdf.derive(key_data))

        return Fernet(derived_key)

    def encrypt(self, value: Any, serialize: bool = True) -> str:
        """Encrypt a value.

        With ``serialize`` the value is JSON encoded first, so any JSON
        serializable value survives a round trip with its type intact.
        """
        try:
            if serialize:
                payload = json.dumps(value, separators=(',', ':'))
            elif isinstance(value, str):
                payload = value
            else:
                raise EncryptionException("Only strings can be encrypted without serialization.")

            encrypted_data = self._fernet.encrypt(payload.encode())
        except EncryptionException:
            raise
        except (TypeError, ValueError) as e:
            raise EncryptionException(f"Encryption failed: {e}") from e

        encrypted_payload: Dict[str, Any] = {
            'iv': base64.b64encode(os.urandom(16)).decode(),
            'value': base64.b64encode(encrypted_data).decode(),
            'mac': None,
        }
        encrypted_payload['mac'] = self._create_mac(
            json.dumps(encrypted_payload, separators=(',', ':'))
        )

        return base64.b64encode(
            json.dumps(encrypted_payload, separators=(',', ':')).encode()
        ).decode()

    def decrypt(self, payload: Any, unserialize: bool = True) -> Any:
        """Decrypt a payload produced by :meth:`encrypt`."""
        data = self._get_json_payload(payload)

        try:
            encrypted_data = base64.b64decode(data['value'].encode(), validate=True)
            decrypted_value = self._fernet.decrypt(encrypted_data).decode()
        except (InvalidToken, ValueError, UnicodeDecodeError) as e:
            raise DecryptException("The payload could not be decrypted.") from e

        if not unserialize:
            return decrypted_value

        try:
            return json.loads(decrypted_value)
        except json.JSONDecodeError as e:
            raise DecryptException("The decrypted payload is not serialized.") from e

    def encrypt_string(self, value: str) -> str:
        """Encrypt a string without serialization."""
        return self.encrypt(value, serialize=False)

    def decrypt_string(self, payload: str) -> str:
        """Decrypt a string without unserialization."""
        return str(self.decrypt(payload, unserialize=False))

    def _get_json_payload(self, payload: Any) -> Dict[str, Any]:
        """Decode the outer payload and verify its MAC."""
        if not isinstance(payload, (str, bytes)):
            raise DecryptException("The payload is invalid.")

        try:
            raw = payload.encode() if isinstance(payload, str) else payload
            data = json.loads(base64.b64decode(raw, validate=True).decode())
        except (ValueError, UnicodeDecodeError) as e:
            raise DecryptException("The payload is invalid.") from e

        if not self._valid_payload(data):
            raise DecryptException("The payload is invalid.")

        if not self._verify_mac(data):
            raise DecryptException("The MAC is invalid.")

        return data

    @staticmethod
    def _valid_payload(data: Any) -> bool:
        return (
            isinstance(data, dict)
            and all(isinstance(data.get(key), str) for key in ('iv', 'value', 'mac'))
        )

    def _create_mac(self, payload: str) -> str:
        """Create MAC for payload integrity."""
        mac_key = f"model_traits.{self.key}"
        return hmac.new(
            mac_key.encode(),
            payload.encode(),
            hashlib.sha256
        ).hexdigest()

    def _verify_mac(self, data: Dict[str, Any]) -> bool:
        """Verify MAC for payload integrity."""
        provided_mac = data['mac']

        # Recompute over the payload as it was before the MAC was attached
        payload_data = {k: v for k, v in data.items() if k != 'mac'}
        payload_data['mac'] = None
        payload_json = json.dumps(payload_data, separators=(',', ':'))

        return hmac.compare_digest(provided_mac, self._create_mac(payload_json))

    @staticmethod
    def generate_key() -> str:
        """Generate a new encryption key."""
        key = base64.b64encode(os.urandom(32)).decode()
        return f"base64:{key}"

    @classmethod
    def supported(cls, cipher: str) -> bool:
        """Check if cipher is supported."""
        return cipher.upper() in cls.SUPPORTED_CIPHERS


class EncryptionManager:
    """Manager resolving the default encrypter from configuration."""

    def __init__(self, key: Optional[str] = None, cipher: Optional[str] = None) -> None:
        self._key = key
        self._cipher = cipher
        self._encrypter: Optional[Encrypter] = None

    def _resolve_key(self) -> str:
        if self._key:
            return self._key

        from config.app import get_app_config
        key = get_app_config().get('key') or ''
        if not key:
            # Keys generated here only live as long as the process
            logger.warning("APP_KEY is not set, generating an ephemeral encryption key")
            key = Encrypter.generate_key()
        self._key = key
        return key

    def encrypter(self) -> Encrypter:
        """Get the lazily constructed default encrypter."""
        if self._encrypter is None:
            from config.app import get_app_config
            cipher = self._cipher or get_app_config().get('cipher', 'AES-256-CBC')
            self._encrypter = Encrypter(self._resolve_key(), cipher)
        return self._encrypter

    def set_encrypter(self, encrypter: Optional[Encrypter]) -> None:
        """Swap the default encrypter, or reset it with ``None``."""
        self._encrypter = encrypter

    def encrypt(self, value: Any, serialize: bool = True) -> str:
        return self.encrypter().encrypt(value, serialize)

    def decrypt(self, payload: Any, unserialize: bool = True) -> Any:
        return self.encrypter().decrypt(payload, unserialize)


# Global encryption manager
encryption_manager = EncryptionManager()


def get_encryption_manager() -> EncryptionManager:
    """Get the global encryption manager instance."""
    return encryption_manager


def encrypt(value: Any, serialize: bool = True) -> str:
    """Encrypt a value."""
    return encryption_manager.encrypt(value, serialize)


def decrypt(payload: Any, unserialize: bool = True) -> Any:
    """Decrypt a value."""
    return encryption_manager.decrypt(payload, unserialize)
