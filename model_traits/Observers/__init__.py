from __future__ import annotations

from .HashingModelObserver import HashingModelObserver
from .PurgingModelObserver import PurgingModelObserver
from .ValidatingModelObserver import ValidatingModelObserver

__all__ = [
    'HashingModelObserver',
    'PurgingModelObserver',
    'ValidatingModelObserver',
]
