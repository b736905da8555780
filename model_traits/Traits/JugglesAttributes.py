from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Mapping
from datetime import date, datetime
from decimal import Decimal
import json
import logging

from model_traits.Support.Str import Str

logger = logging.getLogger(__name__)


class InvalidJuggleTypeException(ValueError):
    """Raised when an attribute is configured with a type that cannot be juggled."""
    pass


class JugglesAttributes:
    """
    Coerce attribute values to a configured type on read and write.

    Usage:
        class Product(Model):
            __jugglable__ = {'price': 'decimal', 'published': 'bool', 'tags': 'array'}

    A model adds its own type by defining ``juggle_<type>(value)``.
    """

    __jugglable__: ClassVar[Dict[str, str]] = {}

    _juggling: ClassVar[bool] = True

    JUGGLE_TYPE_ALIASES: ClassVar[Dict[str, str]] = {
        'bool': 'boolean',
        'int': 'integer',
        'double': 'float',
        'real': 'float',
        'str': 'string',
        'list': 'array',
        'json': 'dict',
    }

    FALSE_STRINGS: ClassVar[List[str]] = ['', '0', 'false', 'off', 'no']

    def get_jugglable(self) -> Dict[str, str]:
        return dict(self.__jugglable__)

    def set_jugglable(self, attributes: Mapping[str, str]) -> None:
        for juggle_type in attributes.values():
            self.check_juggle_type(juggle_type)
        self.__jugglable__ = dict(attributes)

    def merge_jugglable(self, attributes: Mapping[str, str]) -> None:
        self.set_jugglable({**self.get_jugglable(), **attributes})

    def get_juggling(self) -> bool:
        return self._juggling

    def set_juggling(self, value: Any) -> None:
        self._juggling = bool(value)

    def is_jugglable(self, attribute: str) -> bool:
        return self.get_juggling() and attribute in self.get_jugglable()

    def normalize_juggle_type(self, juggle_type: str) -> str:
        normalized = juggle_type.strip().lower()
        return self.JUGGLE_TYPE_ALIASES.get(normalized, normalized)

    def build_juggle_method(self, juggle_type: str) -> str:
        return f"juggle_{Str.snake(self.normalize_juggle_type(juggle_type))}"

    def is_juggle_type(self, juggle_type: str) -> bool:
        method = self.build_juggle_method(juggle_type)
        # The trait's own helpers share the prefix
        if method in ('juggle_attribute', 'juggle_attributes'):
            return False
        return callable(getattr(self, method, None))

    def check_juggle_type(self, juggle_type: str) -> bool:
        if not self.is_juggle_type(juggle_type):
            raise InvalidJuggleTypeException(f"The type '{juggle_type}' is not a juggle type.")
        return True

    def get_juggle_type(self, attribute: str) -> str:
        return self.normalize_juggle_type(self.get_jugglable()[attribute])

    def juggle(self, value: Any, juggle_type: str) -> Any:
        """Cast a value to the given type; None is never cast."""
        if value is None:
            return None

        self.check_juggle_type(juggle_type)
        return getattr(self, self.build_juggle_method(juggle_type))(value)

    def juggle_attribute(self, attribute: str, value: Any) -> None:
        self.set_raw_attribute(attribute, self.juggle(value, self.get_juggle_type(attribute)))

    def juggle_attributes(self) -> None:
        """Juggle every jugglable attribute present on the model."""
        for attribute in self.get_jugglable():
            if self.has_attribute(attribute):
                self.juggle_attribute(attribute, self.get_raw_attribute(attribute))
        logger.debug("Juggled attributes of %s", type(self).__name__)

    def get_dynamic_juggle(self, attribute: str, value: Any) -> Any:
        if self.is_jugglable(attribute):
            return self.juggle(value, self.get_juggle_type(attribute))
        return value

    def set_dynamic_juggle(self, attribute: str, value: Any) -> None:
        if self.is_jugglable(attribute):
            self.juggle_attribute(attribute, value)

    # Types

    def juggle_boolean(self, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() not in self.FALSE_STRINGS
        return bool(value)

    def juggle_integer(self, value: Any) -> int:
        if isinstance(value, str):
            value = value.strip()
            try:
                return int(value)
            except ValueError:
                return int(float(value))
        return int(value)

    def juggle_float(self, value: Any) -> float:
        return float(value)

    def juggle_string(self, value: Any) -> str:
        if isinstance(value, bytes):
            return value.decode('utf-8')
        if isinstance(value, bool):
            return '1' if value else ''
        return str(value)

    def juggle_array(self, value: Any) -> List[Any]:
        if isinstance(value, list):
            return value
        if isinstance(value, (tuple, set, frozenset)):
            return list(value)
        if isinstance(value, dict):
            return list(value.values())
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except ValueError:
                return [value]
            return decoded if isinstance(decoded, list) else [decoded]
        return [value]

    def juggle_dict(self, value: Any) -> Dict[str, Any]:
        if isinstance(value, str):
            value = json.loads(value)
        if isinstance(value, Mapping):
            return dict(value)
        if isinstance(value, (list, tuple)):
            return {str(index): item for index, item in enumerate(value)}
        raise InvalidJuggleTypeException(f"Cannot juggle {type(value).__name__} to dict")

    def juggle_date(self, value: Any) -> date:
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        return self.as_date_time(value).date()

    def juggle_datetime(self, value: Any) -> datetime:
        return self.as_date_time(value)

    def juggle_timestamp(self, value: Any) -> int:
        return int(self.as_date_time(value).timestamp())

    def juggle_decimal(self, value: Any) -> Decimal:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
