from __future__ import annotations

from typing import Any, ClassVar, Optional, Type
from datetime import datetime
from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, Session, declared_attr, mapped_column
from sqlalchemy.sql import Select
import logging

from model_traits.Events.ModelEvents import ModelEventCallback, ModelEventType
from model_traits.Scopes.SoftDeletingScope import SoftDeletingScope

logger = logging.getLogger(__name__)


class SoftDeletes:
    """
    Laravel-style SoftDeletes trait for logical deletion of records.

    Mix in before ``BaseModel``. Deleting stamps the ``deleted_at`` column
    instead of removing the row, and a global scope hides stamped rows from
    every SELECT on the model.

    Usage:
        class Post(SoftDeletes, BaseModel):
            __tablename__ = 'posts'

        post.delete(session)          # Soft delete
        post.restore(session)         # Restore
        post.force_delete(session)    # Permanent delete

        session.scalars(Post.with_trashed()).all()
        session.scalars(Post.only_trashed()).all()
    """

    DELETED_AT: ClassVar[str] = 'deleted_at'

    _force_deleting: ClassVar[bool] = False

    @declared_attr
    def deleted_at(cls) -> Mapped[Optional[datetime]]:
        """
        Timestamp column marking the row as deleted.

        @return: Nullable, indexed timestamp column
        """
        return mapped_column(DateTime(timezone=True), nullable=True, default=None, index=True)

    @classmethod
    def boot_soft_deletes(cls) -> None:
        cls.add_global_scope(SoftDeletingScope())

    def trashed(self) -> bool:
        """Determine if the model instance has been soft-deleted."""
        return getattr(self, self.get_deleted_at_column()) is not None

    def is_force_deleting(self) -> bool:
        return self._force_deleting

    def perform_delete_on_model(self, session: Session) -> None:
        if self._force_deleting:
            super().perform_delete_on_model(session)  # type: ignore[misc]
            return

        self.run_soft_delete(session)

    def run_soft_delete(self, session: Session) -> None:
        """Stamp the deletion column and the update timestamp, then flush."""
        now = self.fresh_timestamp()
        setattr(self, self.get_deleted_at_column(), now)
        if self.UPDATED_AT:
            setattr(self, self.UPDATED_AT, now)

        session.add(self)
        session.flush()
        logger.info("Soft deleted %s id=%s", type(self).__name__, self.id)

    def force_delete(self, session: Session) -> bool:
        """
        Permanently delete the model from the database.

        @param session: Session the row is deleted through
        @return: True if the row was deleted
        """
        if not self.fire_model_event(ModelEventType.FORCE_DELETING):
            return False

        model_id = self.id
        self._force_deleting = True
        try:
            deleted = self.delete(session)
        finally:
            self._force_deleting = False

        if deleted:
            self.fire_model_event(ModelEventType.FORCE_DELETED, halt=False)
            logger.info("Force deleted %s id=%s", type(self).__name__, model_id)
        return deleted

    def restore(self, session: Session) -> bool:
        """
        Restore a soft-deleted model instance.

        @param session: Session the change is saved through
        @return: True if the model was saved again
        """
        if not self.fire_model_event(ModelEventType.RESTORING):
            return False

        setattr(self, self.get_deleted_at_column(), None)

        result = self.save(session)
        if result:
            self.fire_model_event(ModelEventType.RESTORED, halt=False)
            logger.info("Restored %s id=%s", type(self).__name__, self.id)
        return result

    @classmethod
    def restoring(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.RESTORING, callback)

    @classmethod
    def restored(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.RESTORED, callback)

    @classmethod
    def force_deleting(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.FORCE_DELETING, callback)

    @classmethod
    def force_deleted(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.FORCE_DELETED, callback)

    @classmethod
    def with_trashed(cls) -> Select[Any]:
        """
        Select including soft-deleted records.

        @return: Statement that skips the soft deleting scope
        """
        return cls.without_global_scopes(SoftDeletingScope.NAME)

    @classmethod
    def only_trashed(cls) -> Select[Any]:
        """
        Select only soft-deleted records.

        @return: Statement limited to stamped rows
        """
        return cls.with_trashed().where(getattr(cls, cls.get_deleted_at_column()).is_not(None))

    @classmethod
    def without_trashed(cls) -> Select[Any]:
        """
        Select excluding soft-deleted records, regardless of the global scope.

        @return: Statement limited to unstamped rows
        """
        return cls.with_trashed().where(getattr(cls, cls.get_deleted_at_column()).is_(None))

    @classmethod
    def get_deleted_at_column(cls) -> str:
        return cls.DELETED_AT

    @classmethod
    def get_qualified_deleted_at_column(cls: Type[Any]) -> str:
        return f"{cls.__table__.name}.{cls.get_deleted_at_column()}"
