from __future__ import annotations

from typing import Any, Dict, Optional, TYPE_CHECKING, Callable, List, Union, ClassVar, Type, TypeVar, Iterable
from datetime import date, datetime, timezone
from enum import Enum
import logging

from sqlalchemy import DateTime, select, inspect as sa_inspect
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, object_session, relationship, Session, RelationshipProperty

from model_traits.Events.ModelEvents import ModelEventDispatcher, ModelEventType, ModelEventCallback
from model_traits.Scopes.GlobalScopeManager import GlobalScopeManager, WITHOUT_GLOBAL_SCOPES
from model_traits.Scopes.Scope import Scope
from model_traits.Support.Str import Str

if TYPE_CHECKING:
    from model_traits.Models.Observer import ModelObserver

T = TypeVar('T', bound='BaseModel')

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def unique(values: Iterable[Any]) -> List[Any]:
    """Drop repeated values, keeping the first occurrence of each."""
    seen: List[Any] = []
    for value in values:
        if value is not None and value not in seen:
            seen.append(value)
    return seen


class RelationType(Enum):
    """Relationship type enum"""
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"
    BELONGS_TO_MANY = "belongs_to_many"


class RelationshipDefinition:
    """Laravel-style relationship definition"""

    def __init__(
        self,
        relation_type: RelationType,
        related_model: str,
        foreign_key: Optional[str] = None,
        local_key: Optional[str] = None,
        pivot_table: Optional[str] = None,
        related_key: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None
    ):
        self.relation_type = relation_type
        self.related_model = related_model
        self.foreign_key = foreign_key
        self.local_key = local_key or 'id'
        self.pivot_table = pivot_table
        self.related_key = related_key
        self.options = options or {}

    def build(self, owner: Type[Any]) -> RelationshipProperty[Any]:
        """Build the SQLAlchemy relationship this definition describes on ``owner``."""
        parent = owner.__name__
        related = self.related_model
        options = dict(self.options)

        if self.relation_type in (RelationType.HAS_ONE, RelationType.HAS_MANY):
            options.setdefault(
                'primaryjoin', f"{parent}.{self.local_key} == foreign({related}.{self.foreign_key})"
            )
            options.setdefault('uselist', self.relation_type is RelationType.HAS_MANY)
        elif self.relation_type is RelationType.BELONGS_TO:
            options.setdefault(
                'primaryjoin', f"foreign({parent}.{self.foreign_key}) == {related}.{self.local_key}"
            )
            options.setdefault('uselist', False)
        else:
            # Join conditions come from the pivot table's foreign keys
            options.setdefault('secondary', self.pivot_table)

        return relationship(related, **options)

    def __repr__(self) -> str:
        return (f"<RelationshipDefinition({self.relation_type.value}, {self.related_model!r}, "
                f"foreign_key={self.foreign_key!r})>")


class Base(DeclarativeBase):
    pass


class BaseModel(Base):
    """
    Laravel-style active record base class on top of SQLAlchemy declarative models.

    Concrete subclasses are booted once, right after SQLAlchemy maps them:
    every class in the MRO may contribute a ``boot_<snake_case_class_name>``
    classmethod, and the traits use those hooks to register model events
    and global scopes.
    """

    __abstract__ = True

    CREATED_AT: ClassVar[Optional[str]] = 'created_at'
    UPDATED_AT: ClassVar[Optional[str]] = 'updated_at'

    # Laravel-style hidden/fillable attributes
    __fillable__: ClassVar[List[str]] = []
    __guarded__: ClassVar[List[str]] = ['id', 'created_at', 'updated_at']
    __hidden__: ClassVar[List[str]] = []
    __dates__: ClassVar[List[str]] = []

    _saving_session: ClassVar[Optional[Session]] = None

    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        # SQLAlchemy maps the class here
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get('__abstract__', False):
            cls.boot()

    def __init__(self, **attributes: Any) -> None:
        super().__init__()
        self.fill(attributes)

    # Booting

    @classmethod
    def boot(cls) -> None:
        """Boot the model class once."""
        if cls.is_booted():
            return

        cls._booted = True
        cls.boot_traits()
        cls.booted()
        logger.debug("Booted model %s", cls.__name__)

    @classmethod
    def is_booted(cls) -> bool:
        return bool(cls.__dict__.get('_booted', False))

    @classmethod
    def boot_traits(cls) -> None:
        """Call each ``boot_<trait>`` hook found along the MRO, most derived first."""
        called: List[str] = []
        for klass in cls.__mro__:
            method = f"boot_{Str.snake(klass.__name__)}"
            if method in called:
                continue
            hook = getattr(cls, method, None)
            if callable(hook):
                called.append(method)
                hook()

    @classmethod
    def booted(cls) -> None:
        """Hook for subclasses, called after all traits booted."""
        pass

    # Model events

    @classmethod
    def get_event_dispatcher(cls) -> ModelEventDispatcher:
        if '_model_events' not in cls.__dict__:
            cls._model_events = ModelEventDispatcher()
        return cls.__dict__['_model_events']

    @classmethod
    def register_model_event(cls, event: Union[str, ModelEventType], callback: ModelEventCallback) -> None:
        cls.get_event_dispatcher().listen(event, callback)

    @classmethod
    def observe(cls, observer: ModelObserver) -> None:
        """Register an observer's event methods on this model class."""
        from model_traits.Models.Observer import observe
        observe(cls, observer)

    @classmethod
    def flush_event_listeners(cls) -> None:
        cls.get_event_dispatcher().forget()

    @classmethod
    def creating(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.CREATING, callback)

    @classmethod
    def created(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.CREATED, callback)

    @classmethod
    def updating(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.UPDATING, callback)

    @classmethod
    def updated(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.UPDATED, callback)

    @classmethod
    def saving(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.SAVING, callback)

    @classmethod
    def saved(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.SAVED, callback)

    @classmethod
    def deleting(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.DELETING, callback)

    @classmethod
    def deleted(cls, callback: ModelEventCallback) -> None:
        cls.register_model_event(ModelEventType.DELETED, callback)

    def fire_model_event(self, event: Union[str, ModelEventType], halt: bool = True) -> bool:
        """Fire a model event; with ``halt`` a listener returning False cancels."""
        return type(self).get_event_dispatcher().dispatch(event, self, halt)

    # Persistence

    def exists(self) -> bool:
        """Whether the instance has a row in the database."""
        return sa_inspect(self).has_identity

    def get_session(self) -> Optional[Session]:
        """The session the instance belongs to, or the one it is being saved through."""
        return object_session(self) or self._saving_session

    def save(self, session: Session) -> bool:
        """Save the model, firing saving/creating/updating events first."""
        self._saving_session = session
        try:
            return self.perform_save(session)
        finally:
            self._saving_session = None

    def perform_save(self, session: Session) -> bool:
        if not self.fire_model_event(ModelEventType.SAVING):
            return False

        exists = self.exists()
        if exists:
            # Updating listeners work on the row as attached to this session
            session.add(self)
        if not self.fire_model_event(ModelEventType.UPDATING if exists else ModelEventType.CREATING):
            return False

        session.add(self)
        session.flush()

        self.fire_model_event(ModelEventType.UPDATED if exists else ModelEventType.CREATED, halt=False)
        self.fire_model_event(ModelEventType.SAVED, halt=False)
        return True

    def delete(self, session: Session) -> bool:
        """Delete the model, firing deleting/deleted events around the removal."""
        if not self.exists():
            return False

        if not self.fire_model_event(ModelEventType.DELETING):
            return False

        self.perform_delete_on_model(session)

        self.fire_model_event(ModelEventType.DELETED, halt=False)
        return True

    def perform_delete_on_model(self, session: Session) -> None:
        session.delete(self)
        session.flush()

    def touch(self) -> None:
        """Laravel-style touch method to update timestamps."""
        if self.UPDATED_AT:
            setattr(self, self.UPDATED_AT, self.fresh_timestamp())

    def fresh_timestamp(self) -> datetime:
        return utcnow()

    # Attributes

    def get_attributes(self) -> Dict[str, Any]:
        """Loaded column values plus any extra public attributes set on the instance."""
        state = sa_inspect(self)
        mapper = state.mapper
        return {
            key: value for key, value in state.dict.items()
            if not key.startswith('_') and (key in mapper.column_attrs or key not in mapper.attrs)
        }

    def has_attribute(self, key: str) -> bool:
        """Whether the attribute is set on the instance or stored in its row."""
        if key in self.get_attributes():
            return True
        state = sa_inspect(self)
        return key in state.mapper.column_attrs and state.has_identity and key in state.unloaded

    def get_raw_attribute(self, key: str, default: Any = None) -> Any:
        """Read the stored value, bypassing any dynamic attribute behavior."""
        try:
            return object.__getattribute__(self, key)
        except AttributeError:
            return default

    def set_raw_attribute(self, key: str, value: Any) -> None:
        """Store a value, bypassing any dynamic attribute behavior."""
        object.__setattr__(self, key, value)

    def is_dirty(self, key: Optional[str] = None) -> bool:
        """Whether the attribute (or any attribute) has changes not yet persisted."""
        state = sa_inspect(self)
        if key is None:
            return any(self.is_dirty(name) for name in self.get_attributes())
        if key in state.mapper.column_attrs:
            return state.attrs[key].history.has_changes()
        return key in state.dict

    def fill(self, attributes: Dict[str, Any]) -> BaseModel:
        """Laravel-style mass assignment with fillable/guarded protection."""
        for key, value in attributes.items():
            if self._is_fillable(key):
                setattr(self, key, value)
        return self

    def _is_fillable(self, key: str) -> bool:
        """Check if attribute is mass assignable."""
        if key.startswith('_'):
            return False
        if self.__fillable__:
            return key in self.__fillable__
        return key not in self.__guarded__

    def get_dates(self) -> List[str]:
        """Get the attributes that should be treated as dates."""
        return unique([*self.__dates__, self.CREATED_AT, self.UPDATED_AT])

    def as_date_time(self, value: Any) -> datetime:
        """Convert a value to a timezone-aware datetime."""
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if isinstance(value, str):
            parsed = datetime.fromisoformat(value.strip())
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        raise ValueError(f"Cannot convert {type(value).__name__} to a date")

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary, respecting hidden attributes."""
        mapper = sa_inspect(type(self))
        result = {key: getattr(self, key) for key in mapper.column_attrs.keys()}

        for key in self.get_dates():
            if isinstance(result.get(key), (date, datetime)):
                result[key] = result[key].isoformat()

        for attr in self.__hidden__:
            result.pop(attr, None)

        return result

    # Global scopes

    @classmethod
    def get_global_scope_manager(cls) -> GlobalScopeManager:
        if '_global_scope_manager' not in cls.__dict__:
            cls._global_scope_manager = GlobalScopeManager(cls)
        return cls.__dict__['_global_scope_manager']

    @classmethod
    def add_global_scope(
        cls,
        scope: Union[str, Scope],
        implementation: Optional[Union[Scope, Callable[[Type[Any]], ColumnElement[bool]]]] = None
    ) -> None:
        """Register a global scope, by instance or by name and implementation."""
        if isinstance(scope, str):
            if implementation is None:
                raise ValueError("A named global scope needs an implementation")
            cls.get_global_scope_manager().add_scope(scope, implementation)
        else:
            cls.get_global_scope_manager().add_scope(scope.get_name(), scope)

    @classmethod
    def has_global_scope(cls, name: str) -> bool:
        return cls.get_global_scope_manager().has_scope(name)

    @classmethod
    def get_global_scope(cls, name: str) -> Optional[Scope]:
        return cls.get_global_scope_manager().get_scope(name)

    @classmethod
    def get_global_scopes(cls) -> Dict[str, Scope]:
        return cls.get_global_scope_manager().get_scopes()

    @classmethod
    def remove_global_scope(cls, name: str) -> None:
        cls.get_global_scope_manager().remove_scope(name)

    @classmethod
    def query(cls: Type[T]) -> Select[Any]:
        """A SELECT for this model; global scopes are added when it executes."""
        return select(cls)

    @classmethod
    def without_global_scopes(cls: Type[T], *names: str) -> Select[Any]:
        """A SELECT skipping the named global scopes, or all of them."""
        return select(cls).execution_options(**{WITHOUT_GLOBAL_SCOPES: tuple(names) if names else True})

    # Relationship definitions

    @classmethod
    def has_one(cls, related_model: str, foreign_key: Optional[str] = None, local_key: Optional[str] = None, **options: Any) -> RelationshipDefinition:
        """Define a has-one relationship"""
        return RelationshipDefinition(
            RelationType.HAS_ONE,
            related_model,
            foreign_key or f"{Str.snake(cls.__name__)}_id",
            local_key or 'id',
            options=options
        )

    @classmethod
    def has_many(cls, related_model: str, foreign_key: Optional[str] = None, local_key: Optional[str] = None, **options: Any) -> RelationshipDefinition:
        """Define a has-many relationship"""
        return RelationshipDefinition(
            RelationType.HAS_MANY,
            related_model,
            foreign_key or f"{Str.snake(cls.__name__)}_id",
            local_key or 'id',
            options=options
        )

    @classmethod
    def belongs_to(cls, related_model: str, foreign_key: Optional[str] = None, owner_key: Optional[str] = None, **options: Any) -> RelationshipDefinition:
        """Define a belongs-to relationship"""
        return RelationshipDefinition(
            RelationType.BELONGS_TO,
            related_model,
            foreign_key or f"{Str.snake(related_model)}_id",
            owner_key or 'id',
            options=options
        )

    @classmethod
    def belongs_to_many(cls, related_model: str, pivot_table: Optional[str] = None, foreign_key: Optional[str] = None, related_key: Optional[str] = None, **options: Any) -> RelationshipDefinition:
        """Define a many-to-many relationship"""
        if pivot_table is None:
            # Laravel joins the two singular model names alphabetically
            pivot_table = '_'.join(sorted([Str.snake(cls.__name__), Str.snake(related_model)]))

        return RelationshipDefinition(
            RelationType.BELONGS_TO_MANY,
            related_model,
            foreign_key or f"{Str.snake(cls.__name__)}_id",
            'id',
            pivot_table,
            related_key or f"{Str.snake(related_model)}_id",
            options=options
        )
