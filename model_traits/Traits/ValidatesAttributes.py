from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional, Union
from sqlalchemy.orm import Session
import logging

from model_traits.Events.ModelEvents import ModelEventType
from model_traits.Support.MessageBag import MessageBag
from model_traits.Validation.Validator import ValidationException, Validator, explode_rules, parse_rule

logger = logging.getLogger(__name__)

Rules = Dict[str, Union[str, List[str]]]


class ValidatesAttributes:
    """
    Validate the model against ``__rules__`` before it is saved or restored.

    Invalid models are not saved: ``save()`` returns False, or raises
    ``ValidationException`` when ``throw_validation_exceptions`` is on.

    Usage:
        class User(Model):
            __rules__ = {
                'email': 'required|email|unique:users',
                'password': 'required|min:8|confirmed',
            }

        if not user.save(session):
            user.get_errors().all()
    """

    __rules__: ClassVar[Rules] = {}
    __validation_messages__: ClassVar[Dict[str, str]] = {}
    __validation_attribute_names__: ClassVar[Dict[str, str]] = {}

    _validating: ClassVar[bool] = True
    _throw_validation_exceptions: ClassVar[bool] = False
    _inject_unique_identifier: ClassVar[bool] = True
    _validation_errors: ClassVar[Optional[MessageBag]] = None
    _validator: ClassVar[Optional[Validator]] = None

    @classmethod
    def boot_validates_attributes(cls) -> None:
        from model_traits.Observers.ValidatingModelObserver import ValidatingModelObserver
        cls.observe(ValidatingModelObserver())

    def get_validating(self) -> bool:
        return self._validating

    def set_validating(self, value: Any) -> None:
        self._validating = bool(value)

    def get_throw_validation_exceptions(self) -> bool:
        return self._throw_validation_exceptions

    def set_throw_validation_exceptions(self, value: Any) -> None:
        self._throw_validation_exceptions = bool(value)

    def get_inject_unique_identifier(self) -> bool:
        return self._inject_unique_identifier

    def set_inject_unique_identifier(self, value: Any) -> None:
        self._inject_unique_identifier = bool(value)

    def get_rules(self) -> Rules:
        return dict(self.__rules__)

    def set_rules(self, rules: Optional[Rules]) -> None:
        self.__rules__ = dict(rules or {})

    def get_default_rules(self) -> Rules:
        """The rules declared on the class, ignoring instance overrides."""
        return dict(type(self).__rules__)

    def get_errors(self) -> MessageBag:
        return self._validation_errors if self._validation_errors is not None else MessageBag()

    def set_errors(self, errors: Optional[MessageBag]) -> None:
        self._validation_errors = errors

    def get_message_bag(self) -> MessageBag:
        return self.get_errors()

    def get_validator(self) -> Optional[Validator]:
        return self._validator

    def set_validator(self, validator: Optional[Validator]) -> None:
        self._validator = validator

    def get_validation_data(self, rules: Rules) -> Dict[str, Any]:
        """Attribute values as the application sees them, for every attribute and rule."""
        keys = list(self.get_attributes())
        keys += [key for key in rules if key not in keys]
        return {key: getattr(self, key, None) for key in keys}

    def make_validator(self, rules: Optional[Rules] = None) -> Validator:
        rules = self.get_rules() if rules is None else rules
        if self.get_inject_unique_identifier():
            rules = self.inject_unique_identifier_rules(rules)

        return Validator(
            self.get_validation_data(rules),
            rules,
            self.__validation_messages__,
            self.__validation_attribute_names__,
            session=self.get_session()
        )

    def is_valid(self) -> bool:
        """Validate the model, keeping the errors for ``get_errors()``."""
        self.fire_model_event(ModelEventType.VALIDATING, halt=False)

        validator = self.make_validator()
        passes = validator.passes()
        self.set_validator(validator)
        self.set_errors(validator.errors())

        self.fire_model_event(ModelEventType.VALIDATED, halt=False)
        if not passes:
            logger.debug("%s failed validation on %s", type(self).__name__, ', '.join(validator.errors().keys()))
        return passes

    def is_invalid(self) -> bool:
        return not self.is_valid()

    def is_valid_or_fail(self) -> bool:
        if not self.is_valid():
            raise ValidationException(self.get_errors(), model=self)
        return True

    def save_or_fail(self, session: Session) -> bool:
        """Save, raising ``ValidationException`` instead of returning False when invalid."""
        throwing = self.get_throw_validation_exceptions()
        self.set_throw_validation_exceptions(True)
        try:
            return self.save(session)
        finally:
            self.set_throw_validation_exceptions(throwing)

    def force_save(self, session: Session) -> bool:
        """Save without validating."""
        validating = self.get_validating()
        self.set_validating(False)
        try:
            return self.save(session)
        finally:
            self.set_validating(validating)

    def inject_unique_identifier_rules(self, rules: Rules) -> Rules:
        """
        Complete ``unique`` rules so the model does not collide with its own row.

        ``unique`` becomes ``unique:<table>,<attribute>`` and, once the model
        exists, ``unique:<table>,<attribute>,<id>,id``.
        """
        injected: Rules = {}
        for attribute, attribute_rules in rules.items():
            injected[attribute] = [
                self._prepare_unique_rule(attribute, rule) if parse_rule(rule)[0] == 'unique' else rule
                for rule in explode_rules(attribute_rules)
            ]
        return injected

    def _prepare_unique_rule(self, attribute: str, rule: str) -> str:
        parameters = parse_rule(rule)[1]

        if not parameters or not parameters[0]:
            parameters = [self.__table__.name]
        if len(parameters) < 2:
            parameters.append(attribute)
        if self.exists() and len(parameters) < 3:
            parameters.extend([str(self.id), 'id'])

        return 'unique:' + ','.join(parameters)
