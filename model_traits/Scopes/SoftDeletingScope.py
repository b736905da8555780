from __future__ import annotations

from typing import Any, Type
from sqlalchemy.sql.elements import ColumnElement

from .Scope import Scope


class SoftDeletingScope(Scope):
    """
    Laravel-style soft deleting scope that automatically excludes deleted records.

    Registered on models that soft delete, unless bypassed with
    ``with_trashed()`` or ``only_trashed()``.
    """

    NAME = 'soft_deleting'

    def __init__(self) -> None:
        super().__init__(self.NAME)

    def criteria(self, model: Type[Any]) -> ColumnElement[bool]:
        """
        Exclude rows whose deleted-at column is set.

        @param model: The model class the query is for
        @return: ``<deleted_at> IS NULL``
        """
        return getattr(model, model.get_deleted_at_column()).is_(None)
