from __future__ import annotations

from typing import Any

from model_traits.Models.Observer import ModelObserver


class PurgingModelObserver(ModelObserver):
    """Purge transient attributes before a model is written."""

    def creating(self, model: Any) -> None:
        self.perform_purging(model)

    def updating(self, model: Any) -> None:
        self.perform_purging(model)

    def perform_purging(self, model: Any) -> None:
        if model.get_purging():
            model.purge_attributes()
