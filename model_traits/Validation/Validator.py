from __future__ import annotations

from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse
import logging
import re

from sqlalchemy import column, func, select, table
from sqlalchemy.orm import Session

from model_traits.Support.MessageBag import MessageBag

if TYPE_CHECKING:
    from model_traits.Models.BaseModel import BaseModel

logger = logging.getLogger(__name__)

RuleSet = Union[str, List[str]]


def parse_rule(rule: str) -> tuple[str, List[str]]:
    """Split ``name:param1,param2`` into its name and parameters."""
    if ':' in rule:
        name, params = rule.split(':', 1)
        # The regex pattern may itself contain commas
        if name.strip() == 'regex':
            return 'regex', [params]
        return name.strip(), [param.strip() for param in params.split(',')]
    return rule.strip(), []


def explode_rules(rules: RuleSet) -> List[str]:
    if isinstance(rules, str):
        return [rule for rule in (part.strip() for part in rules.split('|')) if rule]
    return list(rules)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def value_size(value: Any, numeric: bool = False) -> Optional[Union[int, float, Decimal]]:
    """
    Size of a value as Laravel measures it: numbers by value, the rest by length.

    With ``numeric`` (the field also carries ``integer`` or ``numeric``) a
    numeric string is measured by its value. Returns None for values that
    have no size, such as dates.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str) and numeric:
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return len(value)
        return number if number.is_finite() else len(value)
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value)
    return None


class ValidationRule(ABC):
    """Base validation rule."""

    @abstractmethod
    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        """Determine if the validation rule passes."""
        pass

    @abstractmethod
    def message(self) -> str:
        """Get the validation error message."""
        pass


class DataAwareRule(ValidationRule):
    """A rule that compares the attribute against the rest of the data."""

    data: Dict[str, Any] = {}

    def set_data(self, data: Dict[str, Any]) -> DataAwareRule:
        self.data = data
        return self


class RequiredRule(ValidationRule):
    """Required validation rule."""

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        return not is_empty(value)

    def message(self) -> str:
        return "The {attribute} field is required."


class StringRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        return isinstance(value, str)

    def message(self) -> str:
        return "The {attribute} must be a string."


class IntegerRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        return isinstance(value, str) and re.fullmatch(r'[+-]?\d+', value.strip()) is not None

    def message(self) -> str:
        return "The {attribute} must be an integer."


class NumericRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, float, Decimal)):
            return True
        if isinstance(value, str):
            try:
                Decimal(value.strip())
            except InvalidOperation:
                return False
            return True
        return False

    def message(self) -> str:
        return "The {attribute} must be a number."


class BooleanRule(ValidationRule):

    ACCEPTABLE = (True, False, 0, 1, '0', '1', 'true', 'false')

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        return isinstance(value, (bool, int, str)) and value in self.ACCEPTABLE

    def message(self) -> str:
        return "The {attribute} field must be true or false."


class EmailRule(ValidationRule):
    """Email validation rule."""

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if not isinstance(value, str):
            return False

        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(email_pattern, value) is not None

    def message(self) -> str:
        return "The {attribute} must be a valid email address."


class UrlRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if not isinstance(value, str):
            return False
        parsed = urlparse(value)
        return parsed.scheme in ('http', 'https', 'ftp') and bool(parsed.netloc)

    def message(self) -> str:
        return "The {attribute} format is invalid."


class AlphaRule(ValidationRule):

    PATTERN = r'[^\W\d_]+'

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        return isinstance(value, str) and re.fullmatch(self.PATTERN, value) is not None

    def message(self) -> str:
        return "The {attribute} may only contain letters."


class AlphaNumRule(AlphaRule):

    PATTERN = r'[^\W_]+'

    def message(self) -> str:
        return "The {attribute} may only contain letters and numbers."


class AlphaDashRule(AlphaRule):

    PATTERN = r'[\w-]+'

    def message(self) -> str:
        return "The {attribute} may only contain letters, numbers, dashes and underscores."


class MeasuredRule(ValidationRule):
    """
    A rule comparing the size of a value against its parameters.

    Values without a size fail the rule with their own message.
    """

    numeric: bool = False
    measurable: bool = True

    def set_numeric(self, numeric: bool) -> MeasuredRule:
        self.numeric = numeric
        return self

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        size = value_size(value, self.numeric)
        self.measurable = size is not None
        if size is None or not parameters:
            return False
        return self.compare(size, [Decimal(parameter) for parameter in parameters])

    @abstractmethod
    def compare(self, size: Union[int, float, Decimal], bounds: List[Decimal]) -> bool:
        pass

    def message(self) -> str:
        if not self.measurable:
            return "The {attribute} must be a number, string or list to be measured."
        return self.size_message()

    @abstractmethod
    def size_message(self) -> str:
        pass


class MinRule(MeasuredRule):
    """Minimum length/value validation rule."""

    def compare(self, size: Union[int, float, Decimal], bounds: List[Decimal]) -> bool:
        return size >= bounds[0]

    def size_message(self) -> str:
        return "The {attribute} must be at least {min}."


class MaxRule(MeasuredRule):
    """Maximum length/value validation rule."""

    def compare(self, size: Union[int, float, Decimal], bounds: List[Decimal]) -> bool:
        return size <= bounds[0]

    def size_message(self) -> str:
        return "The {attribute} may not be greater than {max}."


class BetweenRule(MeasuredRule):

    def compare(self, size: Union[int, float, Decimal], bounds: List[Decimal]) -> bool:
        return len(bounds) > 1 and bounds[0] <= size <= bounds[1]

    def size_message(self) -> str:
        return "The {attribute} must be between {min} and {max}."


class SizeRule(MeasuredRule):

    def compare(self, size: Union[int, float, Decimal], bounds: List[Decimal]) -> bool:
        return size == bounds[0]

    def size_message(self) -> str:
        return "The {attribute} must be {size}."


class InRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        return str(value) in (parameters or [])

    def message(self) -> str:
        return "The selected {attribute} is invalid."


class NotInRule(InRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        return not super().passes(attribute, value, parameters)


class RegexRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if not parameters or not isinstance(value, (str, int, float)):
            return False
        pattern = parameters[0]
        # Accept Laravel's delimited form, /pattern/
        if len(pattern) > 1 and pattern.startswith('/') and pattern.rfind('/') > 0:
            pattern = pattern[1:pattern.rfind('/')]
        return re.search(pattern, str(value)) is not None

    def message(self) -> str:
        return "The {attribute} format is invalid."


class DateRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if isinstance(value, (date, datetime)):
            return True
        if not isinstance(value, str):
            return False
        try:
            datetime.fromisoformat(value.strip())
        except ValueError:
            return False
        return True

    def message(self) -> str:
        return "The {attribute} is not a valid date."


class ConfirmedRule(DataAwareRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        confirmation = f"{attribute}_confirmation"
        return confirmation in self.data and self.data[confirmation] == value

    def message(self) -> str:
        return "The {attribute} confirmation does not match."


class SameRule(DataAwareRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if not parameters:
            return False
        return parameters[0] in self.data and self.data[parameters[0]] == value

    def message(self) -> str:
        return "The {attribute} and {other} must match."


class DifferentRule(DataAwareRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if not parameters:
            return False
        return self.data.get(parameters[0]) != value

    def message(self) -> str:
        return "The {attribute} and {other} must be different."


class UniqueRule(ValidationRule):
    """
    ``unique:table,column,except_id,id_column`` checked through a session.

    Without a session there is nothing to check against, so the rule passes.
    """

    def __init__(self, session: Optional[Session] = None) -> None:
        self.session = session

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        if self.session is None or not parameters or not parameters[0]:
            return True

        target = parameters[1] if len(parameters) > 1 and parameters[1] else attribute
        except_id = parameters[2] if len(parameters) > 2 and parameters[2] not in ('', 'NULL') else None
        id_column = parameters[3] if len(parameters) > 3 and parameters[3] else 'id'

        columns = {target, id_column}
        source = table(parameters[0], *(column(name) for name in columns))
        query = select(func.count()).select_from(source).where(source.c[target] == value)
        if except_id is not None:
            query = query.where(source.c[id_column] != except_id)

        # Autoflush would write the row being validated before checking it
        with self.session.no_autoflush:
            return self.session.execute(query).scalar_one() == 0

    def message(self) -> str:
        return "The {attribute} has already been taken."


class ValidationException(Exception):
    """Raised when a model or data set fails validation."""

    def __init__(
        self,
        errors: Union[MessageBag, Dict[str, List[str]]],
        message: str = "The given data was invalid.",
        model: Optional[BaseModel] = None
    ) -> None:
        self.errors = errors if isinstance(errors, MessageBag) else MessageBag(errors)
        self.message = message
        self.model = model
        super().__init__(message)

    def get_errors(self) -> Dict[str, List[str]]:
        """Get validation errors."""
        return self.errors.messages()

    def get_message_bag(self) -> MessageBag:
        return self.errors

    def get_model(self) -> Optional[BaseModel]:
        return self.model

    def get_first_error(self, field: Optional[str] = None) -> Optional[str]:
        """Get first error message."""
        return self.errors.first(field)


class Validator:
    """Laravel-style validator over string rules."""

    # Rules evaluated even when the value is empty
    IMPLICIT_RULES = ['required']

    # Rules that make min, max, between and size compare numeric strings by value
    NUMERIC_RULES = ['integer', 'numeric']

    def __init__(
        self,
        data: Dict[str, Any],
        rules: Dict[str, RuleSet],
        messages: Optional[Dict[str, str]] = None,
        attributes: Optional[Dict[str, str]] = None,
        session: Optional[Session] = None
    ) -> None:
        self.data = data
        self.rules = {field: explode_rules(field_rules) for field, field_rules in rules.items()}
        self.custom_messages = messages or {}
        self.custom_attributes = attributes or {}
        self.session = session
        self.bail_on_first_failure = False
        self._errors: Optional[MessageBag] = None

        # Built-in rules
        self.rule_classes: Dict[str, ValidationRule] = {
            'required': RequiredRule(),
            'string': StringRule(),
            'integer': IntegerRule(),
            'numeric': NumericRule(),
            'boolean': BooleanRule(),
            'email': EmailRule(),
            'url': UrlRule(),
            'alpha': AlphaRule(),
            'alpha_num': AlphaNumRule(),
            'alpha_dash': AlphaDashRule(),
            'min': MinRule(),
            'max': MaxRule(),
            'between': BetweenRule(),
            'size': SizeRule(),
            'in': InRule(),
            'not_in': NotInRule(),
            'regex': RegexRule(),
            'date': DateRule(),
            'confirmed': ConfirmedRule(),
            'same': SameRule(),
            'different': DifferentRule(),
            'unique': UniqueRule(session),
        }

    def validate(self) -> Dict[str, Any]:
        """Run the rules and return the validated data, raising on failure."""
        if self.fails():
            raise ValidationException(self.errors())
        return {field: self.data.get(field) for field in self.rules if field in self.data}

    def run(self) -> MessageBag:
        """Evaluate every rule and collect the failures."""
        errors = MessageBag()

        for field, rule_list in self.rules.items():
            value = self.data.get(field)
            names = [parse_rule(rule)[0] for rule in rule_list]

            if 'sometimes' in names and field not in self.data:
                continue
            if 'nullable' in names and value is None:
                continue

            for rule_str in rule_list:
                rule_name, parameters = parse_rule(rule_str)
                if rule_name in ('nullable', 'sometimes', 'bail'):
                    continue

                # Only implicit rules look at empty values
                if is_empty(value) and rule_name not in self.IMPLICIT_RULES:
                    continue

                rule = self.rule_classes.get(rule_name)
                if rule is None:
                    raise ValueError(f"Validation rule '{rule_name}' does not exist.")
                if isinstance(rule, DataAwareRule):
                    rule.set_data(self.data)
                if isinstance(rule, MeasuredRule):
                    rule.set_numeric(any(name in self.NUMERIC_RULES for name in names))

                if not rule.passes(field, value, parameters):
                    errors.add(field, self._get_error_message(field, rule_name, rule, parameters))
                    if self.bail_on_first_failure or 'bail' in names:
                        break

        logger.debug("Validated %d fields, %d failing", len(self.rules), len(errors.keys()))
        return errors

    def fails(self) -> bool:
        """Check if validation fails."""
        self._errors = self.run()
        return self._errors.any()

    def passes(self) -> bool:
        """Check if validation passes."""
        return not self.fails()

    def errors(self) -> MessageBag:
        if self._errors is None:
            self._errors = self.run()
        return self._errors

    def get_message_bag(self) -> MessageBag:
        """Get error message bag."""
        return self.errors()

    def bail(self, bail: bool = True) -> Validator:
        """Bail on first failure for each field."""
        self.bail_on_first_failure = bail
        return self

    def extend_rule(self, name: str, rule: ValidationRule) -> Validator:
        """Register a custom rule under a name."""
        self.rule_classes[name] = rule
        return self

    def get_attribute_name(self, field: str) -> str:
        """Get human-readable attribute name."""
        return self.custom_attributes.get(field, field.replace('_', ' '))

    def _get_error_message(self, field: str, rule_name: str, rule: ValidationRule, parameters: List[str]) -> str:
        """Get error message for a failed rule."""
        message = self.custom_messages.get(
            f"{field}.{rule_name}", self.custom_messages.get(rule_name, rule.message())
        )

        message = message.replace('{attribute}', self.get_attribute_name(field))

        if parameters:
            if rule_name == 'min':
                message = message.replace('{min}', parameters[0])
            elif rule_name == 'max':
                message = message.replace('{max}', parameters[0])
            elif rule_name == 'between':
                message = message.replace('{min}', parameters[0]).replace('{max}', parameters[1] if len(parameters) > 1 else '')
            elif rule_name == 'size':
                message = message.replace('{size}', parameters[0])
            elif rule_name in ('same', 'different'):
                message = message.replace('{other}', self.get_attribute_name(parameters[0]))
            elif rule_name in ('in', 'not_in'):
                message = message.replace('{values}', ', '.join(parameters))

        return message


def make_validator(
    data: Dict[str, Any],
    rules: Dict[str, RuleSet],
    messages: Optional[Dict[str, str]] = None,
    attributes: Optional[Dict[str, str]] = None,
    session: Optional[Session] = None
) -> Validator:
    """Create a validator instance."""
    return Validator(data, rules, messages, attributes, session)
