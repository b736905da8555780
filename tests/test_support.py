"""Tests for the support services the traits lean on."""

from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from config.database import get_database, get_engine_config, make_session_factory
from model_traits.Encryption.Encrypter import DecryptException, EncryptionException, Encrypter
from model_traits.Hash.HashManager import BcryptHasher, HashManager, PBKDF2Hasher
from model_traits.Log.LogManager import JsonFormatter, LaravelFormatter, LogManager, ROOT_LOGGER, configure_logging
from model_traits.Support.Facades import Crypt, Hash
from model_traits.Support.MessageBag import MessageBag
from model_traits.Support.Str import Str


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def make_record(message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord('model_traits.tests', logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestMessageBag:
    """Test suite for MessageBag."""

    def test_add_and_query(self) -> None:
        bag = MessageBag({'email': 'Required.'})
        bag.add('email', 'Invalid.').add('email', 'Invalid.').add('name', 'Too short.')

        assert bag.get('email') == ['Required.', 'Invalid.']
        assert bag.first() == 'Required.'
        assert bag.first('missing', 'none') == 'none'
        assert bag.keys() == ['email', 'name']
        assert bag.count() == 3 and len(bag) == 3
        assert 'name' in bag and 'age' not in bag
        assert list(bag) == ['Required.', 'Invalid.', 'Too short.']

    def test_merge_and_emptiness(self) -> None:
        bag = MessageBag()
        assert bag.is_empty() and not bag.has()

        bag.merge(MessageBag({'a': ['one']})).merge({'a': ['two'], 'b': ['three']})
        assert bag.messages() == {'a': ['one', 'two'], 'b': ['three']}
        assert bag.any()
        assert bag.get_message_bag() is bag


class TestStr:
    """Test suite for Str."""

    @pytest.mark.parametrize('value, expected', [
        ('SoftDeletes', 'soft_deletes'),
        ('EncryptsAttributes', 'encrypts_attributes'),
        ('HTTPClient', 'http_client'),
        ('already_snake', 'already_snake'),
    ])
    def test_snake(self, value: str, expected: str) -> None:
        assert Str.snake(value) == expected

    def test_snake_with_delimiter_and_studly(self) -> None:
        assert Str.snake('UserRole', '-') == 'user-role'
        assert Str.studly('juggle_date_time') == 'JuggleDateTime'

    def test_starts_and_ends_with(self) -> None:
        assert Str.starts_with('boot_soft_deletes', ['init_', 'boot_'])
        assert not Str.starts_with('booted', '')
        assert Str.ends_with('password_confirmation', '_confirmation')


class TestEncrypter:
    """Test suite for Encrypter."""

    def test_round_trip_keeps_json_types(self) -> None:
        encrypter = Encrypter(Encrypter.generate_key())

        for value in ['text', 42, 1.5, True, None, ['a', 1], {'k': 'v'}]:
            payload = encrypter.encrypt(value)
            assert payload != value
            assert encrypter.decrypt(payload) == value

    def test_strings_without_serialization(self) -> None:
        encrypter = Encrypter('plain-key')

        assert encrypter.decrypt_string(encrypter.encrypt_string('hello')) == 'hello'
        with pytest.raises(EncryptionException):
            encrypter.encrypt(123, serialize=False)

    def test_each_payload_is_unique(self) -> None:
        encrypter = Encrypter('plain-key')

        assert encrypter.encrypt('same') != encrypter.encrypt('same')

    @pytest.mark.parametrize('payload', ['garbage', '', 12, None])
    def test_garbage_cannot_be_decrypted(self, payload: object) -> None:
        with pytest.raises(DecryptException):
            Encrypter('plain-key').decrypt(payload)

    def test_other_key_cannot_decrypt(self) -> None:
        payload = Encrypter('first-key').encrypt('secret')

        with pytest.raises(DecryptException):
            Encrypter('second-key').decrypt(payload)

    def test_invalid_configuration(self) -> None:
        with pytest.raises(EncryptionException):
            Encrypter('')
        with pytest.raises(EncryptionException):
            Encrypter('key', 'AES-512-XYZ')

    def test_crypt_facade_uses_swapped_encrypter(self) -> None:
        payload = Crypt.encrypt({'n': 1})

        assert Crypt.get_facade_root().decrypt(payload) == {'n': 1}
        assert Crypt.decrypt(payload) == {'n': 1}
        assert Crypt.generate_key().startswith('base64:')


class TestHashing:
    """Test suite for the hash manager and its drivers."""

    def test_bcrypt(self) -> None:
        hasher = BcryptHasher(rounds=4)
        hashed = hasher.make('secret')

        assert hasher.is_hashed(hashed)
        assert hasher.check('secret', hashed)
        assert not hasher.check('wrong', hashed)
        assert hasher.info(hashed)['options'] == {'cost': 4}
        assert hasher.needs_rehash(hashed, {'rounds': 5})
        assert not hasher.is_hashed('secret')

    def test_pbkdf2(self) -> None:
        hasher = PBKDF2Hasher(iterations=1000)
        hashed = hasher.make('secret')

        assert hashed.startswith('pbkdf2_sha256$1000$')
        assert hasher.check('secret', hashed)
        assert not hasher.check('wrong', hashed)
        assert hasher.needs_rehash(hashed, {'iterations': 2000})
        assert not hasher.is_hashed('$2b$04$notreally')

    def test_manager_drivers(self) -> None:
        manager = HashManager('pbkdf2', {'pbkdf2': {'iterations': 1000}})

        assert isinstance(manager.driver(), PBKDF2Hasher)
        assert manager.driver() is manager.driver()
        assert manager.check('secret', manager.make('secret'))
        with pytest.raises(ValueError):
            manager.driver('md5')

        manager.extend('cheap', lambda: BcryptHasher(rounds=4))
        manager.set_default_driver('cheap')
        assert manager.get_default_driver() == 'cheap'
        assert isinstance(manager.driver(), BcryptHasher)

    def test_hash_facade_uses_swapped_manager(self) -> None:
        hashed = Hash.make('secret')

        assert Hash.is_hashed(hashed)
        assert Hash.check('secret', hashed)
        assert Hash.info(hashed)['algo'] == 'bcrypt'
        assert not Hash.needs_rehash(hashed)


class TestLogging:
    """Test suite for the log manager."""

    def test_configure_attaches_channel_handler(self, package_logger: logging.Logger) -> None:
        manager = LogManager({'default': 'null', 'channels': {'null': {'driver': 'null'}}})

        assert manager.configure() is package_logger
        assert isinstance(manager.handler(), logging.NullHandler)
        assert manager.handler() in package_logger.handlers
        assert package_logger.level == logging.DEBUG

        manager.configure()
        assert package_logger.handlers.count(manager.handler()) == 1

    def test_unknown_channel_and_driver(self) -> None:
        manager = LogManager({'default': 'stderr', 'channels': {'odd': {'driver': 'syslog'}}})

        with pytest.raises(ValueError):
            manager.handler('missing')
        with pytest.raises(ValueError):
            manager.handler('odd')

    def test_channel_level_and_formatter(self) -> None:
        manager = LogManager({'channels': {'json': {'driver': 'stderr', 'level': 'warning', 'formatter': 'json'}}})
        handler = manager.handler('json')

        assert handler.level == logging.WARNING
        assert isinstance(handler.formatter, JsonFormatter)

    def test_formatters(self) -> None:
        record = make_record('Saved %s', context={'id': 3})
        record.args = ('post',)

        line = LaravelFormatter().format(record)
        assert line.endswith('model_traits.tests.INFO: Saved post {"id": 3}')

        entry = json.loads(JsonFormatter().format(record))
        assert entry['message'] == 'Saved post'
        assert entry['context'] == {'id': 3}
        assert entry['level'] == 'INFO'

    def test_configure_logging_uses_configured_channels(self, package_logger: logging.Logger) -> None:
        logger = configure_logging('null')

        assert logger is package_logger
        assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


class TestDatabaseConfig:
    """Test suite for the database configuration helpers."""

    def test_engine_config_per_backend(self) -> None:
        sqlite = get_engine_config('sqlite://')
        postgres = get_engine_config('postgresql://localhost/app')

        assert sqlite['connect_args'] == {'check_same_thread': False}
        assert 'pool_size' not in sqlite
        assert postgres['pool_pre_ping'] is True
        assert 'connect_args' not in postgres

    def test_get_database_closes_session(self, engine: Engine) -> None:
        sessions = get_database(make_session_factory(engine))
        session = next(sessions)

        assert session.execute(text('select 1')).scalar_one() == 1
        sessions.close()
        assert not session.in_transaction()
