from __future__ import annotations

from typing import Generator, Dict, Any
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .env import env_get

__all__ = ["DATABASE_URL", "get_engine_config", "make_engine", "make_session_factory", "get_database"]


DATABASE_URL: str = env_get("DATABASE_URL", "sqlite:///./storage/database.db")


def get_engine_config(url: str = DATABASE_URL) -> Dict[str, Any]:
    """Get engine configuration based on database type."""
    config: Dict[str, Any] = {}

    if url.startswith("sqlite"):
        config["connect_args"] = {"check_same_thread": False}
    else:
        config.update({
            "pool_size": int(env_get('DB_POOL_SIZE', 5)),
            "max_overflow": int(env_get('DB_MAX_OVERFLOW', 10)),
            "pool_pre_ping": True,
        })

    config["echo"] = bool(env_get('DB_ECHO', False))

    return config


def make_engine(url: str = DATABASE_URL) -> Engine:
    return create_engine(url, **get_engine_config(url))


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_database(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    db = factory()
    try:
        yield db
    finally:
        db.close()
