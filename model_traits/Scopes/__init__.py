from __future__ import annotations

from .Scope import Scope, AnonymousScope
from .GlobalScopeManager import GlobalScopeManager, WITHOUT_GLOBAL_SCOPES
from .SoftDeletingScope import SoftDeletingScope

__all__ = [
    'Scope',
    'AnonymousScope',
    'GlobalScopeManager',
    'WITHOUT_GLOBAL_SCOPES',
    'SoftDeletingScope',
]
