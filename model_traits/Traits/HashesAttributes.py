from __future__ import annotations

from typing import Any, ClassVar, List, Optional, Union
import logging

from model_traits.Hash.HashManager import HashManager, Hasher
from model_traits.Support.Facades.Hash import Hash

logger = logging.getLogger(__name__)


class HashesAttributes:
    """
    Hash attributes such as passwords before the model is created or updated.

    Values already recognized as hashes are left alone, so saving a model
    twice never hashes a hash.
    """

    __hashable__: ClassVar[List[str]] = []

    _hashing: ClassVar[bool] = True
    _hasher: ClassVar[Optional[Union[Hasher, HashManager]]] = None

    @classmethod
    def boot_hashes_attributes(cls) -> None:
        from model_traits.Observers.HashingModelObserver import HashingModelObserver
        cls.observe(HashingModelObserver())

    def get_hashable(self) -> List[str]:
        return list(self.__hashable__)

    def set_hashable(self, attributes: List[str]) -> None:
        self.__hashable__ = list(attributes)

    def get_hashing(self) -> bool:
        return self._hashing

    def set_hashing(self, value: Any) -> None:
        self._hashing = bool(value)

    def get_hasher(self) -> Union[Hasher, HashManager, Hash]:
        return self._hasher or Hash()

    def set_hasher(self, hasher: Optional[Union[Hasher, HashManager]]) -> None:
        self._hasher = hasher

    def is_hashable(self, attribute: str) -> bool:
        return self.get_hashing() and attribute in self.get_hashable()

    def is_hashed(self, attribute: str) -> bool:
        if not self.has_attribute(attribute):
            return False
        return self.get_hasher().is_hashed(self.get_raw_attribute(attribute))

    def hash(self, value: str) -> str:
        return self.get_hasher().make(value)

    def check_hash(self, value: str, hashed: str) -> bool:
        return self.get_hasher().check(value, hashed)

    def set_hashing_attribute(self, attribute: str, value: Any) -> None:
        """Store the value, hashed when it is a changed plain value."""
        self.set_raw_attribute(attribute, value)

        if value in (None, '') or self.is_hashed(attribute):
            return
        if self.exists() and not self.is_dirty(attribute):
            return

        self.set_raw_attribute(attribute, self.hash(value))
        logger.debug("Hashed %s.%s", type(self).__name__, attribute)

    def hash_attributes(self) -> None:
        """Hash every hashable attribute that is present and not already hashed."""
        for attribute in self.get_hashable():
            if self.has_attribute(attribute):
                self.set_hashing_attribute(attribute, self.get_raw_attribute(attribute))
