from __future__ import annotations

from model_traits.Encryption import Encrypter, EncryptionException, DecryptException
from model_traits.Events import ModelEventType
from model_traits.Models import Base, BaseModel, Model, ModelObserver
from model_traits.Scopes import Scope, AnonymousScope, SoftDeletingScope
from model_traits.Support import MessageBag
from model_traits.Traits import (
    SoftDeletes,
    SoftDeleting,
    EncryptsAttributes,
    HashesAttributes,
    JugglesAttributes,
    InvalidJuggleTypeException,
    PurgesAttributes,
    RelatesModels,
    InvalidRelationshipException,
    ValidatesAttributes,
)
from model_traits.Validation import Validator, ValidationException

__version__ = '1.0.0'

__all__ = [
    'Encrypter',
    'EncryptionException',
    'DecryptException',
    'ModelEventType',
    'Base',
    'BaseModel',
    'Model',
    'ModelObserver',
    'Scope',
    'AnonymousScope',
    'SoftDeletingScope',
    'MessageBag',
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
    'Validator',
    'ValidationException',
]
