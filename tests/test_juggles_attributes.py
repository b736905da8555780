"""Tests for attribute type juggling."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

import pytest
from sqlalchemy import String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from model_traits.Models.Model import Model
from model_traits.Traits.JugglesAttributes import InvalidJuggleTypeException
from tests.models import Post


class Badge(Model):
    __tablename__ = 'badges'

    __jugglable__ = {'code': 'upper'}

    code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    def juggle_upper(self, value: Any) -> str:
        return str(value).upper()


class TestJugglesAttributes:
    """Test suite for JugglesAttributes."""

    def test_values_are_juggled_on_write(self) -> None:
        post = Post(title='Juggled')
        post.views = '42'
        post.published = 'no'
        post.tags = 'solo'

        assert post.get_raw_attribute('views') == 42
        assert post.get_raw_attribute('published') is False
        assert post.get_raw_attribute('tags') == ['solo']

    def test_values_are_juggled_on_read(self) -> None:
        post = Post(title='Read')
        post.set_raw_attribute('views', '7')

        assert post.views == 7

    def test_none_is_never_juggled(self) -> None:
        post = Post(title='Nothing')
        post.views = None

        assert post.views is None

    @pytest.mark.parametrize('value, juggle_type, expected', [
        ('1', 'bool', True),
        ('off', 'boolean', False),
        (0, 'bool', False),
        ('12', 'int', 12),
        ('12.7', 'integer', 12),
        ('3.5', 'float', 3.5),
        ('3.5', 'double', 3.5),
        (2, 'real', 2.0),
        (15, 'string', '15'),
        (b'bytes', 'str', 'bytes'),
        ('["a", "b"]', 'array', ['a', 'b']),
        (('a', 'b'), 'list', ['a', 'b']),
        ({'k': 'v'}, 'array', ['v']),
        ('{"a": 1}', 'json', {'a': 1}),
        (['x', 'y'], 'dict', {'0': 'x', '1': 'y'}),
        ('2024-05-06', 'date', date(2024, 5, 6)),
        ('2024-05-06T10:00:00+00:00', 'datetime', datetime(2024, 5, 6, 10, tzinfo=timezone.utc)),
        ('2024-01-01T00:00:00+00:00', 'timestamp', 1704067200),
        (1.1, 'decimal', Decimal('1.1')),
        ('9.99', 'decimal', Decimal('9.99')),
    ])
    def test_builtin_types(self, value: Any, juggle_type: str, expected: Any) -> None:
        assert Post(title='Types').juggle(value, juggle_type) == expected

    def test_unknown_type_is_rejected(self) -> None:
        post = Post(title='Unknown')

        assert not post.is_juggle_type('nope')
        assert not post.is_juggle_type('attribute')
        with pytest.raises(InvalidJuggleTypeException):
            post.juggle('x', 'nope')
        with pytest.raises(InvalidJuggleTypeException):
            post.set_jugglable({'views': 'bogus'})

    def test_aliases_normalize(self) -> None:
        post = Post(title='Aliases')

        assert post.get_juggle_type('published') == 'boolean'
        assert post.build_juggle_method('real') == 'juggle_float'
        assert all(post.is_juggle_type(name) for name in ['bool', 'int', 'double', 'str', 'list', 'json'])

    def test_custom_type_method(self) -> None:
        badge = Badge()
        badge.code = 'gold'

        assert badge.is_juggle_type('upper')
        assert badge.code == 'GOLD'

    def test_juggling_can_be_turned_off(self) -> None:
        post = Post(title='Off')
        post.set_juggling(False)
        post.views = '5'

        assert not post.is_jugglable('views')
        assert post.views == '5'

    def test_juggle_attributes_rejuggles_stored_values(self) -> None:
        post = Post(title='Again')
        post.set_juggling(False)
        post.views = '7'
        post.set_juggling(True)

        post.juggle_attributes()
        assert post.get_raw_attribute('views') == 7

    def test_merge_and_set_jugglable(self) -> None:
        post = Post(title='Merge')
        post.merge_jugglable({'title': 'string'})

        assert post.get_jugglable() == {
            'views': 'integer', 'published': 'bool', 'tags': 'array', 'title': 'string'
        }
        assert 'title' not in Post.__jugglable__

        post.set_jugglable({'views': 'float'})
        assert post.get_jugglable() == {'views': 'float'}
        assert not post.is_jugglable('published')

    def test_juggled_values_persist(self, session: Session) -> None:
        post = Post(title='Stored', published='1', views='3')
        assert post.save(session)
        session.commit()
        session.expire_all()

        loaded = session.scalars(select(Post).where(Post.id == post.id)).one()
        assert loaded.published is True
        assert loaded.views == 3
