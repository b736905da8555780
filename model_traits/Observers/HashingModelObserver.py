from __future__ import annotations

from typing import Any

from model_traits.Models.Observer import ModelObserver


class HashingModelObserver(ModelObserver):
    """Hash the hashable attributes before a model is written."""

    def creating(self, model: Any) -> None:
        """Handle the model "creating" event."""
        self.perform_hashing(model)

    def updating(self, model: Any) -> None:
        """Handle the model "updating" event."""
        self.perform_hashing(model)

    def perform_hashing(self, model: Any) -> None:
        if model.get_hashing():
            model.hash_attributes()
