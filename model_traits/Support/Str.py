from __future__ import annotations

import re
from typing import Dict, List, Union


class Str:
    """Laravel-style string helper class."""

    # Cache of converted values, keyed by delimiter
    _snake_cache: Dict[str, Dict[str, str]] = {}
    _studly_cache: Dict[str, str] = {}

    @staticmethod
    def snake(value: str, delimiter: str = '_') -> str:
        """Convert a string to snake case."""
        cache = Str._snake_cache.setdefault(delimiter, {})
        if value in cache:
            return cache[value]

        key = value
        # Split acronyms from the following word (HTTPClient -> HTTP_Client)
        value = re.sub(r'([A-Z]+)([A-Z][a-z])', rf'\1{delimiter}\2', value)
        # Insert delimiter before uppercase letters
        value = re.sub(r'([a-z0-9])([A-Z])', rf'\1{delimiter}\2', value)
        # Replace non-alphanumeric with delimiter
        value = re.sub(r'[^a-zA-Z0-9]', delimiter, value)
        value = value.lower()
        # Replace multiple delimiters with single delimiter
        value = re.sub(f'{re.escape(delimiter)}+', delimiter, value)

        cache[key] = value.strip(delimiter)
        return cache[key]

    @staticmethod
    def studly(value: str) -> str:
        """Convert a value to studly caps case."""
        if value in Str._studly_cache:
            return Str._studly_cache[value]

        words = re.sub(r'[^a-zA-Z0-9]', ' ', value).split()
        Str._studly_cache[value] = ''.join(word[0].upper() + word[1:] for word in words)
        return Str._studly_cache[value]

    @staticmethod
    def starts_with(haystack: str, needles: Union[str, List[str]]) -> bool:
        """Determine if a given string starts with a given substring."""
        if isinstance(needles, str):
            needles = [needles]

        return any(needle and haystack.startswith(needle) for needle in needles)

    @staticmethod
    def ends_with(haystack: str, needles: Union[str, List[str]]) -> bool:
        """Determine if a given string ends with a given substring."""
        if isinstance(needles, str):
            needles = [needles]

        return any(needle and haystack.endswith(needle) for needle in needles)
