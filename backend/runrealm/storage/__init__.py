"""
Persistence: key-value stores and typed state access.

Usage:
    from runrealm.storage import SqlKeyValueStore, StateRepository
"""
from .models import Base, KeyValueEntry
from .session import create_session_factory, create_state_engine, init_db
from .kv_store import InMemoryKeyValueStore, SqlKeyValueStore
from .state import StateRepository

__all__ = [
    "Base",
    "KeyValueEntry",
    "create_session_factory",
    "create_state_engine",
    "init_db",
    "InMemoryKeyValueStore",
    "SqlKeyValueStore",
    "StateRepository",
]
