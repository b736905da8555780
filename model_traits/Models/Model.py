from __future__ import annotations

from typing import Any

from model_traits.Models.BaseModel import BaseModel
from model_traits.Support.MessageBag import MessageBag
from model_traits.Traits.EncryptsAttributes import EncryptsAttributes
from model_traits.Traits.HashesAttributes import HashesAttributes
from model_traits.Traits.JugglesAttributes import JugglesAttributes
from model_traits.Traits.PurgesAttributes import PurgesAttributes
from model_traits.Traits.RelatesModels import RelatesModels
from model_traits.Traits.ValidatesAttributes import ValidatesAttributes


class Model(
    ValidatesAttributes,
    EncryptsAttributes,
    HashesAttributes,
    JugglesAttributes,
    PurgesAttributes,
    RelatesModels,
    BaseModel,
):
    """
    Base model with every attribute trait applied.

    Validation comes first so an invalid model is rejected before anything
    is hashed or purged. Encryptable and jugglable attributes are handled
    transparently on attribute access.

    Usage:
        class User(Model):
            __tablename__ = 'users'
            __encryptable__ = ['phone']
            __hashable__ = ['password']
            __jugglable__ = {'is_admin': 'bool'}
            __rules__ = {'email': 'required|email', 'password': 'required|confirmed'}

            email: Mapped[str] = mapped_column(String(255))
            password: Mapped[str] = mapped_column(String(255))
            phone: Mapped[Optional[str]] = mapped_column(Text)
            is_admin: Mapped[bool] = mapped_column(default=False)
    """

    __abstract__ = True

    def __getattribute__(self, key: str) -> Any:
        getter = super().__getattribute__
        if key.startswith('_') or (key not in getter('__encryptable__') and key not in getter('__jugglable__')):
            return getter(key)

        # Encrypted payloads may hold None
        if getter('is_encryptable')(key) and getter('is_encrypted')(key):
            value = getter('get_encrypted_attribute')(key)
        else:
            value = getter(key)

        return getter('get_dynamic_juggle')(key, value)

    def __setattr__(self, key: str, value: Any) -> None:
        if key.startswith('_'):
            super().__setattr__(key, value)
            return

        if value and self.set_dynamic_encryptable(key, value):
            return

        super().__setattr__(key, value)
        self.set_dynamic_juggle(key, value)

    def get_message_bag(self) -> MessageBag:
        """Get the validation errors."""
        return self.get_errors()
