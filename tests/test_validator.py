"""Tests for the string-rule validator."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

import pytest
from sqlalchemy.orm import Session

from model_traits.Validation.Validator import (
    ValidationException,
    ValidationRule,
    Validator,
    make_validator,
    parse_rule,
)
from tests.models import User


class EvenRule(ValidationRule):

    def passes(self, attribute: str, value: Any, parameters: Optional[List[str]] = None) -> bool:
        return int(value) % 2 == 0

    def message(self) -> str:
        return "The {attribute} must be even."


class TestValidator:
    """Test suite for Validator."""

    def test_parse_rule(self) -> None:
        assert parse_rule('required') == ('required', [])
        assert parse_rule('between:1, 5') == ('between', ['1', '5'])
        assert parse_rule('regex:/^[a-z]{2,3}$/') == ('regex', ['/^[a-z]{2,3}$/'])

    @pytest.mark.parametrize('rules, value', [
        ('string', 'text'),
        ('integer', '-12'),
        ('numeric', '3.14'),
        ('boolean', 'true'),
        ('email', 'ada@example.com'),
        ('url', 'https://example.com/path'),
        ('alpha', 'abc'),
        ('alpha_num', 'abc123'),
        ('alpha_dash', 'abc-123_x'),
        ('min:3', 'abcd'),
        ('max:3', 'abc'),
        ('between:2,4', [1, 2, 3]),
        ('size:5', 5),
        ('in:red,green', 'green'),
        ('not_in:red,green', 'blue'),
        ('regex:/^[a-z]{2,3}$/', 'ab'),
        ('date', '2024-02-29'),
    ])
    def test_passing_rules(self, rules: str, value: Any) -> None:
        assert Validator({'field': value}, {'field': rules}).passes()

    @pytest.mark.parametrize('rules, value', [
        ('string', 12),
        ('integer', '1.5'),
        ('integer', True),
        ('numeric', 'twelve'),
        ('boolean', 'maybe'),
        ('email', 'not-an-email'),
        ('url', 'example.com'),
        ('alpha', 'abc1'),
        ('alpha_num', 'abc 1'),
        ('min:3', 'ab'),
        ('max:3', 4),
        ('between:2,4', 'a'),
        ('size:5', 'abc'),
        ('in:red,green', 'blue'),
        ('not_in:red,green', 'red'),
        ('regex:/^[a-z]{2,3}$/', 'abcd'),
        ('date', '2024-02-30'),
    ])
    def test_failing_rules(self, rules: str, value: Any) -> None:
        assert Validator({'field': value}, {'field': rules}).fails()

    @pytest.mark.parametrize('rules, value, passes', [
        ('integer|min:18', '20', True),
        ('integer|min:18', '17', False),
        ('numeric|max:9.5', '10.25', False),
        ('numeric|between:1,5', ' 3 ', True),
        ('integer|size:42', '42', True),
        ('min:18', '20', False),
        ('size:2', '42', True),
    ])
    def test_numeric_strings_are_measured_by_value_with_numeric_rules(
        self, rules: str, value: str, passes: bool
    ) -> None:
        assert Validator({'age': value}, {'age': rules}).passes() is passes

    def test_numeric_rule_with_non_numeric_string_measures_length(self) -> None:
        validator = Validator({'age': 'abc'}, {'age': 'numeric|min:3'})

        assert validator.errors().get('age') == ['The age must be a number.']

    @pytest.mark.parametrize('value', [datetime(2020, 1, 1), date(2020, 1, 1), object()])
    def test_values_without_size_fail_measured_rules(self, value: Any) -> None:
        validator = Validator({'when': value}, {'when': 'min:1'})

        assert validator.fails()
        assert validator.errors().first('when') == 'The when must be a number, string or list to be measured.'

    def test_date_with_size_rule_records_error(self) -> None:
        validator = Validator({'when': datetime(2020, 1, 1)}, {'when': 'date|between:1,5'})

        assert validator.errors().keys() == ['when']
        assert len(validator.errors().get('when')) == 1

    def test_messages_fill_placeholders(self) -> None:
        validator = Validator(
            {'first_name': 'a', 'age': 200, 'size': 'xl', 'code': 'abc'},
            {
                'first_name': 'min:2',
                'age': 'between:18,99',
                'size': 'in:s,m,l',
                'code': 'size:4',
            },
            messages={'in': 'Choose one of {values}.'},
        )
        errors = validator.errors()

        assert errors.first('first_name') == 'The first name must be at least 2.'
        assert errors.first('age') == 'The age must be between 18 and 99.'
        assert errors.first('size') == 'Choose one of s, m, l.'
        assert errors.first('code') == 'The code must be 4.'

    def test_data_aware_rules(self) -> None:
        data = {'password': 'secret', 'password_confirmation': 'other', 'login': 'secret', 'backup': 'secret'}
        validator = Validator(
            data,
            {'password': 'confirmed', 'login': 'same:password', 'backup': 'different:login'},
            attributes={'login': 'user name'},
        )
        errors = validator.errors()

        assert errors.first('password') == 'The password confirmation does not match.'
        assert not errors.has('login')
        assert errors.first('backup') == 'The backup and user name must be different.'

    def test_empty_values_only_checked_by_required(self) -> None:
        validator = Validator({'nickname': '', 'email': None}, {'nickname': 'min:3', 'email': 'required|email'})
        errors = validator.errors()

        assert not errors.has('nickname')
        assert errors.get('email') == ['The email field is required.']

    def test_nullable_and_sometimes(self) -> None:
        rules = {'bio': 'nullable|string', 'nickname': 'sometimes|required|min:2'}

        assert Validator({'bio': None}, rules).passes()
        assert Validator({'bio': 'hi', 'nickname': 'x'}, rules).fails()

    def test_bail_stops_at_first_failure(self) -> None:
        rules = {'code': 'integer|min:10'}

        assert len(Validator({'code': 'ab'}, rules).errors().get('code')) == 2
        assert len(Validator({'code': 'ab'}, {'code': 'bail|integer|min:10'}).errors().get('code')) == 1
        assert len(Validator({'code': 'ab'}, rules).bail().errors().get('code')) == 1

    def test_unknown_rule_raises(self) -> None:
        with pytest.raises(ValueError):
            Validator({'field': 'x'}, {'field': 'shiny'}).passes()

    def test_extend_rule(self) -> None:
        validator = make_validator({'count': 3}, {'count': ['even']}).extend_rule('even', EvenRule())

        assert validator.errors().first('count') == 'The count must be even.'

    def test_validate_returns_data_or_raises(self) -> None:
        data = {'title': 'Hello', 'extra': True}

        assert Validator(data, {'title': 'required'}).validate() == {'title': 'Hello'}
        with pytest.raises(ValidationException) as raised:
            Validator({}, {'title': 'required'}).validate()
        assert raised.value.get_errors() == {'title': ['The title field is required.']}
        assert raised.value.get_model() is None

    def test_unique_without_session_passes(self) -> None:
        assert Validator({'email': 'ada@example.com'}, {'email': 'unique:users'}).passes()

    def test_unique_with_session(self, session: Session) -> None:
        user = User(email='ada@example.com', password='secret123')
        user.save(session)

        taken = Validator({'email': 'ada@example.com'}, {'email': 'unique:users'}, session=session)
        ignored = Validator(
            {'email': 'ada@example.com'}, {'email': f'unique:users,email,{user.id},id'}, session=session
        )
        free = Validator({'email': 'grace@example.com'}, {'email': 'unique:users,email'}, session=session)

        assert taken.errors().first('email') == 'The email has already been taken.'
        assert ignored.passes()
        assert free.passes()
