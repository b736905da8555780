from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional


class MessageBag:
    """Laravel-style container of messages keyed by attribute."""

    def __init__(self, messages: Optional[Dict[str, List[str]]] = None) -> None:
        self._messages: Dict[str, List[str]] = {}
        for key, value in (messages or {}).items():
            for message in ([value] if isinstance(value, str) else value):
                self.add(key, message)

    def add(self, key: str, message: str) -> MessageBag:
        """Add a message to the bag, skipping exact duplicates."""
        bucket = self._messages.setdefault(key, [])
        if message not in bucket:
            bucket.append(message)
        return self

    def merge(self, messages: Any) -> MessageBag:
        """Merge another bag or a plain mapping into this one."""
        if isinstance(messages, MessageBag):
            messages = messages.messages()
        for key, values in messages.items():
            for message in values:
                self.add(key, message)
        return self

    def has(self, key: Optional[str] = None) -> bool:
        """Determine if messages exist for the given key, or at all."""
        if key is None:
            return self.any()
        return bool(self._messages.get(key))

    def first(self, key: Optional[str] = None, default: Optional[str] = None) -> Optional[str]:
        """Get the first message for a key, or the first message overall."""
        if key is None:
            for messages in self._messages.values():
                if messages:
                    return messages[0]
            return default

        messages = self._messages.get(key)
        return messages[0] if messages else default

    def get(self, key: str) -> List[str]:
        return list(self._messages.get(key, []))

    def all(self) -> List[str]:
        """Get every message in the bag, flattened in insertion order."""
        return [message for messages in self._messages.values() for message in messages]

    def keys(self) -> List[str]:
        return list(self._messages.keys())

    def messages(self) -> Dict[str, List[str]]:
        return {key: list(values) for key, values in self._messages.items()}

    to_dict = messages

    def count(self) -> int:
        return len(self.all())

    def any(self) -> bool:
        return self.count() > 0

    def is_empty(self) -> bool:
        return not self.any()

    def get_message_bag(self) -> MessageBag:
        return self

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[str]:
        return iter(self.all())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __repr__(self) -> str:
        return f"<MessageBag({self._messages!r})>"
