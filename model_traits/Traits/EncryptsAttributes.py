from __future__ import annotations

from typing import Any, ClassVar, List, Optional, Union
import logging

from model_traits.Encryption.Encrypter import DecryptException, Encrypter
from model_traits.Support.Facades.Crypt import Crypt

logger = logging.getLogger(__name__)


class EncryptsAttributes:
    """
    Encrypt attributes on write and decrypt them on read.

    Usage:
        class Account(Model):
            __encryptable__ = ['ssn', 'notes']

        account.ssn = '123-45-6789'   # Stored encrypted
        account.ssn                   # '123-45-6789'
    """

    __encryptable__: ClassVar[List[str]] = []

    _encrypting: ClassVar[bool] = True
    _encrypter: ClassVar[Optional[Encrypter]] = None

    def get_encryptable(self) -> List[str]:
        return list(self.__encryptable__)

    def set_encryptable(self, attributes: List[str]) -> None:
        self.__encryptable__ = list(attributes)

    def get_encrypting(self) -> bool:
        return self._encrypting

    def set_encrypting(self, value: Any) -> None:
        self._encrypting = bool(value)

    def get_encrypter(self) -> Union[Encrypter, Crypt]:
        """The injected encrypter, or the application default behind the Crypt facade."""
        return self._encrypter or Crypt()

    def set_encrypter(self, encrypter: Optional[Encrypter]) -> None:
        self._encrypter = encrypter

    def is_encryptable(self, attribute: str) -> bool:
        return self.get_encrypting() and attribute in self.get_encryptable()

    def is_encrypted(self, attribute: str) -> bool:
        """
        Whether the stored value of the attribute is a payload this model can decrypt.

        @param attribute: Attribute name
        @return: False when the attribute is absent or not decryptable
        """
        if not self.has_attribute(attribute):
            return False

        try:
            self.decrypt(self.get_raw_attribute(attribute))
        except DecryptException:
            return False

        return True

    def is_decrypted(self, attribute: str) -> bool:
        return not self.is_encrypted(attribute)

    def encrypt_attributes(self) -> None:
        """Encrypt every encryptable attribute still holding a plain value."""
        for attribute in self.get_encryptable():
            if not self.has_attribute(attribute) or self.get_raw_attribute(attribute) is None:
                continue
            if self.is_decrypted(attribute):
                self.set_encrypting_attribute(attribute, self.get_raw_attribute(attribute))

    def encrypt(self, value: Any) -> str:
        return self.get_encrypter().encrypt(value)

    def decrypt(self, value: Any) -> Any:
        return self.get_encrypter().decrypt(value)

    def get_encrypted_attribute(self, attribute: str) -> Any:
        return self.decrypt(self.get_raw_attribute(attribute))

    def set_encrypting_attribute(self, attribute: str, value: Any) -> None:
        self.set_raw_attribute(attribute, self.encrypt(value))
        logger.debug("Encrypted %s.%s", type(self).__name__, attribute)

    def get_dynamic_encrypted(self, attribute: str) -> Any:
        """The decrypted value when the attribute is encryptable and encrypted, else None."""
        if self.is_encryptable(attribute) and self.is_encrypted(attribute):
            return self.get_encrypted_attribute(attribute)
        return None

    def set_dynamic_encryptable(self, attribute: str, value: Any) -> bool:
        """Encrypt and store the value when the attribute is encryptable."""
        if self.is_encryptable(attribute):
            self.set_encrypting_attribute(attribute, value)
            return True
        return False
