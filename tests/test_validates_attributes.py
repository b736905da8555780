"""Tests for model validation."""

from __future__ import annotations

from typing import Callable, List, Type

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from model_traits.Models.BaseModel import BaseModel
from model_traits.Support.MessageBag import MessageBag
from model_traits.Validation.Validator import ValidationException
from tests.models import User


def user_count(session: Session) -> int:
    return session.scalar(select(func.count()).select_from(User))


class TestValidatesAttributes:
    """Test suite for ValidatesAttributes."""

    def test_invalid_model_is_not_saved(self, session: Session) -> None:
        user = User(email='not-an-email', password='secret123')

        assert user.save(session) is False
        assert user_count(session) == 0
        assert user.get_errors().has('email')
        assert user.get_message_bag() is user.get_errors()

    def test_valid_model_is_saved_with_empty_errors(self, session: Session) -> None:
        user = User(email='barbara@example.com', password='secret123')

        assert user.save(session) is True
        assert user.get_errors().is_empty()
        assert user_count(session) == 1

    def test_throwing_validation_exceptions(self, session: Session) -> None:
        user = User(email='', password='secret123')
        user.set_throw_validation_exceptions(True)

        with pytest.raises(ValidationException) as raised:
            user.save(session)

        assert raised.value.get_model() is user
        assert 'email' in raised.value.get_errors()
        assert raised.value.get_first_error('email') == 'The email field is required.'

    def test_save_or_fail_raises_and_restores_flag(self, session: Session) -> None:
        user = User(email='nope', password='short')

        with pytest.raises(ValidationException):
            user.save_or_fail(session)
        assert user.get_throw_validation_exceptions() is False

    def test_force_save_skips_validation(self, session: Session) -> None:
        user = User(email='nope', password='secret123')

        assert user.force_save(session) is True
        assert user.get_validating() is True
        assert user_count(session) == 1

    def test_validation_can_be_turned_off(self, session: Session) -> None:
        user = User(email='nope', password='secret123')
        user.set_validating(False)

        assert user.save(session) is True

    def test_is_valid_and_is_valid_or_fail(self) -> None:
        user = User(email='barbara@example.com', password='abc')

        assert user.is_invalid()
        assert not user.is_valid()
        assert user.get_errors().first('password') == 'The password must be at least 6.'
        with pytest.raises(ValidationException):
            user.is_valid_or_fail()

        user.password = 'abcdef'
        assert user.is_valid_or_fail() is True
        assert user.get_validator() is not None

    def test_unique_rule_sees_other_rows_but_not_own(self, session: Session) -> None:
        first = User(email='barbara@example.com', password='secret123')
        assert first.save(session)

        second = User(email='barbara@example.com', password='secret123')
        assert second.save(session) is False
        assert second.get_errors().first('email') == 'The email has already been taken.'

        first.nickname = 'babs'
        assert first.save(session) is True

    def test_unique_identifier_injection(self, session: Session) -> None:
        user = User(email='barbara@example.com', password='secret123')
        rules = user.inject_unique_identifier_rules(user.get_rules())
        assert rules['email'] == ['required', 'email', 'unique:users,email']

        user.save(session)
        rules = user.inject_unique_identifier_rules({'email': 'unique:users,email'})
        assert rules['email'] == [f'unique:users,email,{user.id},id']

    def test_without_injection_own_row_collides(self, session: Session) -> None:
        user = User(email='barbara@example.com', password='secret123')
        user.save(session)

        user.set_inject_unique_identifier(False)
        assert not user.is_valid()

    def test_rules_can_be_overridden_per_instance(self) -> None:
        user = User(email='barbara@example.com', password='secret123')
        user.set_rules({'password': 'required|confirmed'})

        assert not user.is_valid()
        assert user.get_errors().first('password') == 'The password confirmation does not match.'

        user.password_confirmation = 'secret123'
        assert user.is_valid()
        assert 'confirmed' not in str(user.get_default_rules())

    def test_custom_messages_and_attribute_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(User, '__validation_messages__', {'email.required': 'We need an :email.'})
        monkeypatch.setattr(User, '__validation_attribute_names__', {'password': 'secret phrase'})

        user = User(email='', password='abc')
        assert not user.is_valid()
        assert user.get_errors().first('email') == 'We need an :email.'
        assert user.get_errors().first('password') == 'The secret phrase must be at least 6.'

    def test_validating_events_fire(self, listeners: Callable[[Type[BaseModel]], None]) -> None:
        listeners(User)
        fired: List[str] = []
        User.register_model_event('validating', lambda model: fired.append('validating'))
        User.register_model_event('validated', lambda model: fired.append('validated'))

        User(email='barbara@example.com', password='secret123').is_valid()
        assert fired == ['validating', 'validated']

    def test_errors_default_to_empty_bag(self) -> None:
        errors = User().get_errors()

        assert isinstance(errors, MessageBag)
        assert errors.is_empty()
