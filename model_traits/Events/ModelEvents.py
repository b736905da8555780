from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union, TYPE_CHECKING
from enum import StrEnum
import logging

if TYPE_CHECKING:
    from model_traits.Models.BaseModel import BaseModel

logger = logging.getLogger(__name__)

ModelEventCallback = Callable[['BaseModel'], Optional[bool]]


class ModelEventType(StrEnum):
    """Model lifecycle events the traits hook into."""
    CREATING = "creating"
    CREATED = "created"
    UPDATING = "updating"
    UPDATED = "updated"
    SAVING = "saving"
    SAVED = "saved"
    DELETING = "deleting"
    DELETED = "deleted"
    RESTORING = "restoring"
    RESTORED = "restored"
    FORCE_DELETING = "force_deleting"
    FORCE_DELETED = "force_deleted"
    VALIDATING = "validating"
    VALIDATED = "validated"


class ModelEventDispatcher:
    """
    Per-model-class registry of lifecycle listeners.

    Listeners run in registration order. When dispatching with ``halt``,
    a listener returning ``False`` stops propagation and the dispatch
    returns ``False``; that is how "-ing" events cancel an operation.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[ModelEventCallback]] = {}

    def listen(self, event: Union[str, ModelEventType], callback: ModelEventCallback) -> None:
        """Register a listener for an event."""
        self._listeners.setdefault(str(event), []).append(callback)

    def has_listeners(self, event: Union[str, ModelEventType]) -> bool:
        return bool(self._listeners.get(str(event)))

    def get_listeners(self, event: Union[str, ModelEventType]) -> List[ModelEventCallback]:
        return list(self._listeners.get(str(event), []))

    def forget(self, event: Optional[Union[str, ModelEventType]] = None) -> None:
        """Remove the listeners of one event, or of every event."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(str(event), None)

    def dispatch(self, event: Union[str, ModelEventType], model: BaseModel, halt: bool = True) -> bool:
        """Call the listeners of an event and report whether the operation may proceed."""
        for callback in self.get_listeners(event):
            result = callback(model)
            if halt and result is False:
                logger.debug(
                    "%s listener halted %s on %s", event, getattr(callback, '__qualname__', callback),
                    type(model).__name__
                )
                return False
        return True
