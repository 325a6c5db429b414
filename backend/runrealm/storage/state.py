"""
Typed access to persisted application state.

Three single-slot keys:
- last completed run
- claimed territories (full list)
- territory intents (id -> intent map)

Corrupt or missing data degrades to the empty default; storage errors
are logged and never reach tracking/claim callers.
"""

import logging
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from runrealm.features.territory.schemas import Territory, TerritoryIntent
from runrealm.features.tracking.schemas import RunSession
from runrealm.integrations.interfaces import KeyValueStore
from runrealm.shared.constants import (
    CLAIMED_TERRITORIES_KEY,
    LAST_RUN_KEY,
    TERRITORY_INTENTS_KEY,
)

logger = logging.getLogger(__name__)

_territories_adapter = TypeAdapter(List[Territory])
_intents_adapter = TypeAdapter(Dict[str, TerritoryIntent])


class StateRepository:
    """
    Serializes tracker/registry state into a KeyValueStore.

    Usage:
        state = StateRepository(InMemoryKeyValueStore())
        state.save_last_run(session)
        run = state.load_last_run()
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    # -------------------------------------------------------------------------
    # Last run
    # -------------------------------------------------------------------------

    def save_last_run(self, session: RunSession) -> bool:
        return self._write(LAST_RUN_KEY, session.model_dump_json())

    def load_last_run(self) -> Optional[RunSession]:
        raw = self._read(LAST_RUN_KEY)
        if raw is None:
            return None
        try:
            return RunSession.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding corrupt last run: {e.error_count()} errors")
            return None

    # -------------------------------------------------------------------------
    # Territories
    # -------------------------------------------------------------------------

    def save_territories(self, territories: List[Territory]) -> bool:
        return self._write(
            CLAIMED_TERRITORIES_KEY,
            _territories_adapter.dump_json(territories).decode("utf-8"),
        )

    def load_territories(self) -> List[Territory]:
        raw = self._read(CLAIMED_TERRITORIES_KEY)
        if raw is None:
            return []
        try:
            return _territories_adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Failed to load claimed territories: {e.error_count()} errors")
            return []

    # -------------------------------------------------------------------------
    # Intents
    # -------------------------------------------------------------------------

    def save_intents(self, intents: Dict[str, TerritoryIntent]) -> bool:
        return self._write(
            TERRITORY_INTENTS_KEY,
            _intents_adapter.dump_json(intents).decode("utf-8"),
        )

    def load_intents(self) -> Dict[str, TerritoryIntent]:
        raw = self._read(TERRITORY_INTENTS_KEY)
        if raw is None:
            return {}
        try:
            return _intents_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Failed to load territory intents: {e.error_count()} errors")
            return {}

    # -------------------------------------------------------------------------
    # Store access
    # -------------------------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except Exception as e:
            logger.error(f"Failed to read {key}: {e}")
            return None

    def _write(self, key: str, value: str) -> bool:
        try:
            self.store.set(key, value)
            return True
        except Exception as e:
            logger.error(f"Failed to save {key}: {e}")
            return False
