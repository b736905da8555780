from __future__ import annotations

from typing import List

from model_traits.Models.BaseModel import unique
from model_traits.Scopes.SoftDeletingScope import SoftDeletingScope
from model_traits.Traits.SoftDeletes import SoftDeletes


class SoftDeleting(SoftDeletes):
    """
    Soft deletes for models built on ``Model``.

    The scope is installed by this trait's own boot hook rather than the
    one inherited from ``SoftDeletes``, and the deleted-at column is
    reported as a date.

    Usage:
        class Post(SoftDeleting, Model):
            __tablename__ = 'posts'
    """

    @classmethod
    def boot_soft_deletes(cls) -> None:
        pass

    @classmethod
    def boot_soft_deleting(cls) -> None:
        cls.add_global_scope(SoftDeletingScope())

    def get_dates(self) -> List[str]:
        """Get the attributes that should be treated as dates, each once."""
        return unique([
            *self.__dates__,
            self.CREATED_AT,
            self.UPDATED_AT,
            self.get_deleted_at_column(),
        ])
