"""Tests for relationships declared through configuration."""

from __future__ import annotations

import pytest
from sqlalchemy.orm import RelationshipProperty, Session

from model_traits.Models.BaseModel import RelationType
from model_traits.Traits.RelatesModels import InvalidRelationshipException
from tests.models import Post, Role, User, role_user


@pytest.fixture
def user(session: Session) -> User:
    user = User(email='linus@example.com', password='secret123')
    user.save(session)
    return user


class TestRelatesModels:
    """Test suite for RelatesModels."""

    def test_relationships_are_installed_at_boot(self) -> None:
        posts = User.get_relationship('posts')
        author = Post.get_relationship('author')

        assert isinstance(posts, RelationshipProperty)
        assert posts.uselist is True
        assert author is not None and author.uselist is False
        assert User.get_relationship('email') is None

    def test_configuration_queries(self) -> None:
        assert User.is_relationship('posts')
        assert not User.is_relationship('email')
        assert set(User.get_relationships()) == {'posts', 'roles'}

    def test_definitions_follow_configuration(self) -> None:
        roles = User.get_relationship_definition('roles')
        posts = User.get_relationship_definition('posts')

        assert roles.relation_type is RelationType.BELONGS_TO_MANY
        assert roles.pivot_table == 'role_user'
        assert (roles.foreign_key, roles.related_key) == ('user_id', 'role_id')
        assert posts.foreign_key == 'user_id'
        assert posts.options == {'back_populates': 'author'}

    def test_has_many_and_belongs_to_load(self, session: Session, user: User) -> None:
        post = Post(title='First', user_id=user.id)
        post.save(session)

        assert user.posts == [post]
        assert post.author is user
        assert user.get_dynamic_relationship('posts') == [post]
        assert user.get_dynamic_relationship('email') is None

    def test_belongs_to_many_with_pivot_attributes(self, session: Session, user: User) -> None:
        role = Role(name='admin')
        role.save(session)
        session.execute(role_user.insert().values(user_id=user.id, role_id=role.id, granted_by='root'))

        assert user.roles == [role]
        assert user.get_pivot_attributes('roles') == ['granted_by']
        assert user.has_pivot_attributes('roles')
        assert not user.has_pivot_attributes('posts')
        assert user.get_pivot('roles', role) == {'granted_by': 'root'}

    def test_pivot_of_detached_pair_is_empty(self, session: Session, user: User) -> None:
        role = Role(name='guest')
        role.save(session)

        assert user.get_pivot('roles', role) == {}

    def test_pivot_requires_many_to_many(self, user: User) -> None:
        with pytest.raises(InvalidRelationshipException):
            user.get_pivot('posts', Post(title='x'))

    def test_unknown_relationship_name(self) -> None:
        with pytest.raises(InvalidRelationshipException):
            User.get_relationship_definition('friends')

    def test_unknown_relationship_type(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(User, '__relationships__', {**User.__relationships__, 'bogus': ('has_some', 'Post')})

        with pytest.raises(InvalidRelationshipException):
            User.get_relationship_definition('bogus')
