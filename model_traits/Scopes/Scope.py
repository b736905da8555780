from __future__ import annotations

from typing import Any, Callable, Optional, Type
from abc import ABC, abstractmethod
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement


class Scope(ABC):
    """
    Abstract base class for Laravel-style Global Scopes.

    A global scope contributes a WHERE criterion to every SELECT issued
    against the model it is registered on. The criterion is built by
    :meth:`criteria`; :meth:`apply` adds it to an explicit ``Select``.

    Usage:
        class ActiveScope(Scope):
            def criteria(self, model: Type[Any]) -> ColumnElement[bool]:
                return model.status == 'active'

        User.add_global_scope(ActiveScope())

        session.scalars(User.query()).all()  # Only active users
        session.scalars(User.without_global_scopes('ActiveScope')).all()  # Everyone
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.priority = 0  # Lower numbers = higher priority
        self.enabled = True

    @abstractmethod
    def criteria(self, model: Type[Any]) -> ColumnElement[bool]:
        """
        Build the criterion this scope adds for the given model class.

        @param model: The model class the scope is being applied to
        @return: A boolean SQL expression
        """
        pass

    def apply(self, builder: Select[Any], model: Type[Any]) -> Select[Any]:
        """
        Apply the scope to a given select statement.

        @param builder: The statement to modify
        @param model: The model class this scope applies to
        @return: The modified statement
        """
        return builder.where(self.criteria(model))

    def can_apply(self, model: Type[Any]) -> bool:
        """
        Determine if the scope can be applied to the given model.

        @param model: The model class to check
        @return: True if the scope can be applied
        """
        return self.enabled

    def get_name(self) -> str:
        return self.name

    def set_priority(self, priority: int) -> 'Scope':
        self.priority = priority
        return self

    def enable(self) -> 'Scope':
        self.enabled = True
        return self

    def disable(self) -> 'Scope':
        self.enabled = False
        return self

    def __repr__(self) -> str:
        return (f"<{self.__class__.__name__}(name='{self.name}', priority={self.priority}, "
                f"enabled={self.enabled})>")


class AnonymousScope(Scope):
    """
    Anonymous scope built from a callable.

    Usage:
        User.add_global_scope('active', lambda model: model.status == 'active')
    """

    def __init__(self, callback: Callable[[Type[Any]], ColumnElement[bool]], name: Optional[str] = None):
        super().__init__(name or 'anonymous')
        self.callback = callback

    def criteria(self, model: Type[Any]) -> ColumnElement[bool]:
        return self.callback(model)
