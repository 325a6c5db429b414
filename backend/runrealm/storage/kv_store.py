"""
Key-value store implementations.

Both satisfy the KeyValueStore protocol:
- InMemoryKeyValueStore: process-local dict (tests, ephemeral runs)
- SqlKeyValueStore: SQLAlchemy-backed, one row per key
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from .models import KeyValueEntry

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore:
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqlKeyValueStore:
    """
    Store backed by the kv_entries table.

    Usage:
        engine = create_state_engine(settings.database_url)
        init_db(engine)
        store = SqlKeyValueStore(create_session_factory(engine))
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as db:
            result = db.execute(
                select(KeyValueEntry.value).where(KeyValueEntry.key == key)
            )
            return result.scalar_one_or_none()

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as db:
            entry = db.get(KeyValueEntry, key)
            if entry:
                entry.value = value
            else:
                db.add(KeyValueEntry(key=key, value=value))
            db.commit()
        logger.debug(f"Stored {key} ({len(value)} chars)")
