from __future__ import annotations

from .MessageBag import MessageBag
from .Str import Str

__all__ = ['MessageBag', 'Str']
