from __future__ import annotations

from typing import Dict, Any

from .env import env_get


def get_app_config() -> Dict[str, Any]:
    """
    Laravel-style application configuration.

    Only the values the model traits consume live here: the application
    name used in log lines and the encryption key and cipher used by the
    default encrypter.
    """

    return {
        'name': env_get('APP_NAME', 'model-traits'),

        'env': env_get('APP_ENV', 'production'),

        'debug': bool(env_get('APP_DEBUG', False)),

        # Encryption Key
        # Used by the default encrypter behind the Crypt facade. A value in
        # the form "base64:<32 random bytes>" can be made with
        # Encrypter.generate_key(). Without it an ephemeral key is generated.
        'key': str(env_get('APP_KEY', '') or ''),

        # Encryption Cipher
        'cipher': env_get('APP_CIPHER', 'AES-256-CBC'),
    }
