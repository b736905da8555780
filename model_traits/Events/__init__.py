from __future__ import annotations

from .ModelEvents import ModelEventType, ModelEventDispatcher, ModelEventCallback

__all__ = ['ModelEventType', 'ModelEventDispatcher', 'ModelEventCallback']
