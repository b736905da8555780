from __future__ import annotations

from typing import Any, ClassVar, List, Union
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstanceState
from sqlalchemy.orm.attributes import set_committed_value
import logging

from model_traits.Support.Str import Str

logger = logging.getLogger(__name__)


class PurgesAttributes:
    """
    Drop transient attributes before the model is written.

    Attributes listed in ``__purgeable__`` and any ``*_confirmation``
    attribute are removed on creating and updating.
    """

    __purgeable__: ClassVar[List[str]] = []

    _purging: ClassVar[bool] = True

    @classmethod
    def boot_purges_attributes(cls) -> None:
        from model_traits.Observers.PurgingModelObserver import PurgingModelObserver
        cls.observe(PurgingModelObserver())

    def get_purgeable(self) -> List[str]:
        return list(self.__purgeable__)

    def set_purgeable(self, attributes: List[str]) -> None:
        self.__purgeable__ = list(attributes)

    def add_purgeable(self, attributes: Union[str, List[str]]) -> None:
        additions = [attributes] if isinstance(attributes, str) else attributes
        self.set_purgeable(self.get_purgeable() + [name for name in additions if name not in self.get_purgeable()])

    def remove_purgeable(self, attributes: Union[str, List[str]]) -> None:
        removals = [attributes] if isinstance(attributes, str) else attributes
        self.set_purgeable([name for name in self.get_purgeable() if name not in removals])

    def get_purging(self) -> bool:
        return self._purging

    def set_purging(self, value: Any) -> None:
        self._purging = bool(value)

    def is_purgeable(self, attribute: str) -> bool:
        return attribute in self.get_purgeable() or Str.ends_with(attribute, '_confirmation')

    def purge_attributes(self) -> None:
        """Remove purgeable attributes; purged columns lose their pending value."""
        state = sa_inspect(self)
        columns = state.mapper.column_attrs

        purged: List[str] = []
        for attribute in list(self.get_attributes()):
            if not self.is_purgeable(attribute):
                continue

            if attribute in columns and state.has_identity:
                self._discard_pending_value(state, attribute)
            else:
                delattr(self, attribute)
            purged.append(attribute)

        if purged:
            logger.debug("Purged %s from %s", ', '.join(purged), type(self).__name__)

    def _discard_pending_value(self, state: InstanceState[Any], attribute: str) -> None:
        """Put a stored column back to its committed value."""
        if state.session is not None:
            state.session.expire(self, [attribute])
            return

        # Detached rows only know the committed value when it was loaded;
        # otherwise the pending value is marked committed so no UPDATE writes it
        history = state.attrs[attribute].history
        if history.deleted:
            set_committed_value(self, attribute, history.deleted[0])
        elif history.added:
            set_committed_value(self, attribute, history.added[0])
