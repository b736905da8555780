from __future__ import annotations

from typing import Any, Optional

from model_traits.Models.Observer import ModelObserver
from model_traits.Validation.Validator import ValidationException


class ValidatingModelObserver(ModelObserver):
    """Validate a model before it is saved or restored."""

    def saving(self, model: Any) -> Optional[bool]:
        """Handle the model "saving" event."""
        return self.perform_validation(model)

    def restoring(self, model: Any) -> Optional[bool]:
        """Handle the model "restoring" event."""
        return self.perform_validation(model)

    def perform_validation(self, model: Any) -> Optional[bool]:
        """
        Cancel the operation when the model is invalid.

        @param model: The model being saved or restored
        @return: False to halt the operation, None to let it continue
        """
        if not model.get_validating() or model.is_valid():
            return None

        if model.get_throw_validation_exceptions():
            raise ValidationException(model.get_errors(), model=model)
        return False
