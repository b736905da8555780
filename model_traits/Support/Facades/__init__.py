from __future__ import annotations

from .Crypt import Crypt
from .Hash import Hash

__all__ = ['Crypt', 'Hash']
