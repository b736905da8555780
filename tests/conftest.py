from __future__ import annotations

from typing import Any, Callable, Dict, Generator, List, Type

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from config.database import make_engine
from model_traits.Encryption.Encrypter import Encrypter
from model_traits.Events.ModelEvents import ModelEventType
from model_traits.Hash.HashManager import HashManager
from model_traits.Models.BaseModel import Base, BaseModel
from model_traits.Support.Facades.Crypt import Crypt
from model_traits.Support.Facades.Hash import Hash

from tests import models  # noqa: F401  registers the test tables

TEST_KEY = 'testing-key-testing-key-testing!'


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite database with every test table created."""
    engine = make_engine('sqlite://')
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session, None, None]:
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture(autouse=True)
def fast_hashing() -> Generator[HashManager, None, None]:
    """Swap in bcrypt with the minimum cost so tests stay fast."""
    manager = HashManager('bcrypt', {'bcrypt': {'rounds': 4}})
    Hash.swap(manager)
    yield manager
    Hash.swap(None)


@pytest.fixture(autouse=True)
def encrypter() -> Encrypter:
    """Fixed-key encrypter behind the Crypt facade."""
    encrypter = Encrypter(TEST_KEY)
    Crypt.swap(encrypter)
    return encrypter


@pytest.fixture
def listeners() -> Generator[Callable[[Type[BaseModel]], None], None, None]:
    """Snapshot a model's event listeners and put them back after the test."""
    snapshots: Dict[Type[BaseModel], Dict[ModelEventType, List[Any]]] = {}

    def track(model: Type[BaseModel]) -> None:
        dispatcher = model.get_event_dispatcher()
        snapshots[model] = {event: dispatcher.get_listeners(event) for event in ModelEventType}

    yield track

    for model, events in snapshots.items():
        dispatcher = model.get_event_dispatcher()
        dispatcher.forget()
        for event, callbacks in events.items():
            for callback in callbacks:
                dispatcher.listen(event, callback)
