from __future__ import annotations

from .SoftDeletes import SoftDeletes
from .SoftDeleting import SoftDeleting
from .EncryptsAttributes import EncryptsAttributes
from .HashesAttributes import HashesAttributes
from .JugglesAttributes import JugglesAttributes, InvalidJuggleTypeException
from .PurgesAttributes import PurgesAttributes
from .RelatesModels import RelatesModels, InvalidRelationshipException
from .ValidatesAttributes import ValidatesAttributes

__all__ = [
    'SoftDeletes',
    'SoftDeleting',
    'EncryptsAttributes',
    'HashesAttributes',
    'JugglesAttributes',
    'InvalidJuggleTypeException',
    'PurgesAttributes',
    'RelatesModels',
    'InvalidRelationshipException',
    'ValidatesAttributes',
]
