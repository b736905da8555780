from __future__ import annotations

# BaseModel must load before Model, the traits import it
from .BaseModel import Base, BaseModel, RelationType, RelationshipDefinition
from .Observer import ModelObserver, observe
from .Model import Model

__all__ = [
    'Base',
    'BaseModel',
    'RelationType',
    'RelationshipDefinition',
    'ModelObserver',
    'observe',
    'Model',
]
