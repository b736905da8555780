from .app import get_app_config
from .database import make_engine, make_session_factory, get_database

__all__ = ["get_app_config", "make_engine", "make_session_factory", "get_database"]
