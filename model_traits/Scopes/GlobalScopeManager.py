from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Optional, Type, Union, final
import logging
from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from .Scope import AnonymousScope, Scope

logger = logging.getLogger(__name__)

# Execution option naming the scopes to skip for one statement, or True for all
WITHOUT_GLOBAL_SCOPES = 'without_global_scopes'


@final
class GlobalScopeManager:
    """
    Registry of the global scopes of one model class.

    Usage:
        manager = GlobalScopeManager(UserModel)
        manager.add_scope('active', ActiveScope())

        stmt = manager.apply_scopes(select(UserModel))
        stmt = manager.apply_scopes(select(UserModel), except_scopes=['active'])
    """

    def __init__(self, model: Type[Any]):
        self.model = model
        self.scopes: Dict[str, Scope] = {}

    def add_scope(self, name: str, scope: Union[Scope, Callable[[Type[Any]], ColumnElement[bool]]]) -> 'GlobalScopeManager':
        """
        Add a global scope to the model.

        @param name: Unique name for the scope
        @param scope: Scope instance, or a callable building the criterion
        @return: Self for method chaining
        """
        if not isinstance(scope, Scope):
            if not callable(scope):
                raise ValueError("Scope must be a Scope instance or a callable")
            scope = AnonymousScope(scope, name)

        self.scopes[name] = scope
        logger.debug("Added global scope '%s' to %s", name, self.model.__name__)
        return self

    def remove_scope(self, name: str) -> 'GlobalScopeManager':
        if self.scopes.pop(name, None) is not None:
            logger.debug("Removed global scope '%s' from %s", name, self.model.__name__)
        return self

    def has_scope(self, name: str) -> bool:
        return name in self.scopes

    def get_scope(self, name: str) -> Optional[Scope]:
        return self.scopes.get(name)

    def get_scopes(self) -> Dict[str, Scope]:
        """
        Get all registered scopes, ordered by priority then registration.

        @return: Dictionary of scope name -> scope instance
        """
        ordered = sorted(enumerate(self.scopes.items()), key=lambda item: (item[1][1].priority, item[0]))
        return {name: scope for _, (name, scope) in ordered}

    def active_scopes(self, except_scopes: Iterable[str] = ()) -> Dict[str, Scope]:
        """Get the enabled scopes minus the excluded names."""
        excluded = set(except_scopes)
        return {
            name: scope for name, scope in self.get_scopes().items()
            if name not in excluded and scope.can_apply(self.model)
        }

    def apply_scopes(self, query: Select[Any], except_scopes: Iterable[str] = ()) -> Select[Any]:
        """
        Apply all enabled global scopes to an explicit select statement.

        @param query: The statement to apply scopes to
        @param except_scopes: Scope names to skip
        @return: Statement with scopes applied
        """
        for scope in self.active_scopes(except_scopes).values():
            query = scope.apply(query, self.model)
        return query

    def clear_scopes(self) -> 'GlobalScopeManager':
        self.scopes.clear()
        return self


@event.listens_for(Session, 'do_orm_execute')
def _apply_global_scopes(execute_state: ORMExecuteState) -> None:
    """Add the global scope criteria of every queried model to ORM SELECTs."""
    # Refreshes and deferred column loads target rows already in hand
    if not execute_state.is_select or execute_state.is_column_load:
        return

    excluded = execute_state.execution_options.get(WITHOUT_GLOBAL_SCOPES, ())
    if excluded is True:
        return

    for mapper in execute_state.all_mappers:
        model = mapper.class_
        get_manager = getattr(model, 'get_global_scope_manager', None)
        if get_manager is None:
            continue

        for name, scope in get_manager().active_scopes(excluded).items():
            execute_state.statement = execute_state.statement.options(
                with_loader_criteria(model, scope.criteria(model), include_aliases=True)
            )
