from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional, Tuple
from sqlalchemy import column, inspect as sa_inspect, select, table
from sqlalchemy.orm import RelationshipProperty, object_session
import logging

from model_traits.Models.BaseModel import RelationType, RelationshipDefinition

logger = logging.getLogger(__name__)


class InvalidRelationshipException(ValueError):
    """Raised when a relationship is not configured or has an unknown type."""
    pass


class RelatesModels:
    """
    Declare relationships through configuration instead of ``relationship()`` calls.

    Each entry is ``name: (type, related_model, *arguments)`` where the
    arguments are those of the matching definition method (``has_many``,
    ``belongs_to``, ...) and an optional trailing dict holds extra
    ``relationship()`` options.

    Usage:
        class Post(Model):
            __relationships__ = {
                'author': ('belongs_to', 'User', 'user_id'),
                'comments': ('has_many', 'Comment', 'post_id', 'id', {'order_by': 'Comment.id'}),
                'tags': ('belongs_to_many', 'Tag', 'post_tag'),
            }
            __relationship_pivots__ = {'tags': ['position']}
    """

    __relationships__: ClassVar[Dict[str, Tuple[Any, ...]]] = {}
    __relationship_pivots__: ClassVar[Dict[str, List[str]]] = {}

    @classmethod
    def boot_relates_models(cls) -> None:
        """Install a SQLAlchemy relationship for every configured entry."""
        for name in cls.__relationships__:
            # Inherited or hand written attributes win
            if any(name in klass.__dict__ for klass in cls.__mro__):
                continue
            setattr(cls, name, cls.get_relationship_definition(name).build(cls))
            logger.debug("Installed relationship %s.%s", cls.__name__, name)

    @classmethod
    def get_relationships(cls) -> Dict[str, Tuple[Any, ...]]:
        return dict(cls.__relationships__)

    @classmethod
    def is_relationship(cls, name: str) -> bool:
        return name in cls.__relationships__

    @classmethod
    def get_relationship_definition(cls, name: str) -> RelationshipDefinition:
        if not cls.is_relationship(name):
            raise InvalidRelationshipException(f"{cls.__name__} has no relationship named '{name}'.")

        relation_type, related, *arguments = cls.__relationships__[name]
        options: Dict[str, Any] = arguments.pop() if arguments and isinstance(arguments[-1], dict) else {}

        try:
            kind = RelationType(relation_type)
        except ValueError:
            raise InvalidRelationshipException(
                f"Relationship '{name}' on {cls.__name__} has unknown type '{relation_type}'."
            ) from None

        return getattr(cls, kind.value)(related, *arguments, **options)

    @classmethod
    def get_relationship(cls, name: str) -> Optional[RelationshipProperty[Any]]:
        """The mapped relationship property for a configured relationship."""
        if not cls.is_relationship(name):
            return None
        return sa_inspect(cls).relationships[name]

    def get_dynamic_relationship(self, name: str) -> Any:
        if self.is_relationship(name):
            return getattr(self, name)
        return None

    def get_pivot_attributes(self, name: str) -> List[str]:
        return list(self.__relationship_pivots__.get(name, []))

    def has_pivot_attributes(self, name: str) -> bool:
        return bool(self.get_pivot_attributes(name))

    def get_pivot(self, name: str, related: Any) -> Dict[str, Any]:
        """
        Read the pivot columns joining this model to one related model.

        @param name: A belongs_to_many relationship
        @param related: The related model instance
        @return: Mapping of pivot column to value, empty when not attached
        """
        definition = self.get_relationship_definition(name)
        if definition.relation_type is not RelationType.BELONGS_TO_MANY:
            raise InvalidRelationshipException(f"Relationship '{name}' has no pivot table.")

        session = object_session(self)
        attributes = self.get_pivot_attributes(name)
        if session is None or not attributes:
            return {}

        pivot = table(
            definition.pivot_table,
            *(column(key) for key in {*attributes, definition.foreign_key, definition.related_key})
        )
        query = select(*(pivot.c[key] for key in attributes)).where(
            pivot.c[definition.foreign_key] == self.id,
            pivot.c[definition.related_key] == related.id,
        )
        row = session.execute(query).first()
        return dict(row._mapping) if row is not None else {}
