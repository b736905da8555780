from __future__ import annotations

from typing import Any, Optional, Type, TYPE_CHECKING
from abc import ABC

from model_traits.Events.ModelEvents import ModelEventType

if TYPE_CHECKING:
    from model_traits.Models.BaseModel import BaseModel


class ModelObserver(ABC):
    """
    Laravel-style Model Observer base class.

    Override the methods for the events you care about. Returning ``False``
    from an "-ing" method cancels the operation in progress.
    """

    def creating(self, model: Any) -> Optional[bool]:
        """Handle the model "creating" event."""
        return None

    def created(self, model: Any) -> None:
        """Handle the model "created" event."""
        return None

    def updating(self, model: Any) -> Optional[bool]:
        """Handle the model "updating" event."""
        return None

    def updated(self, model: Any) -> None:
        """Handle the model "updated" event."""
        return None

    def saving(self, model: Any) -> Optional[bool]:
        """Handle the model "saving" event."""
        return None

    def saved(self, model: Any) -> None:
        """Handle the model "saved" event."""
        return None

    def deleting(self, model: Any) -> Optional[bool]:
        """Handle the model "deleting" event."""
        return None

    def deleted(self, model: Any) -> None:
        """Handle the model "deleted" event."""
        return None

    def restoring(self, model: Any) -> Optional[bool]:
        """Handle the model "restoring" event."""
        return None

    def restored(self, model: Any) -> None:
        """Handle the model "restored" event."""
        return None

    def force_deleting(self, model: Any) -> Optional[bool]:
        """Handle the model "force deleting" event."""
        return None

    def force_deleted(self, model: Any) -> None:
        """Handle the model "force deleted" event."""
        return None


def observe(model_class: Type[BaseModel], observer: ModelObserver) -> None:
    """Register each overridden observer method as a listener on the model class."""
    for event_type in ModelEventType:
        method = getattr(observer, event_type.value, None)
        if method is None or not callable(method):
            continue
        # Skip the no-op defaults so listener lists stay meaningful
        if getattr(type(observer), event_type.value, None) is getattr(ModelObserver, event_type.value, None):
            continue
        model_class.register_model_event(event_type, method)
