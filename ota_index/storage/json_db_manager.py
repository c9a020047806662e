import json
import logging
import threading
from pathlib import Path
from typing import Any, List, Optional

from ota_index.domain.models import SourceEntry, StoredState
from ota_index.domain.source_order import (
    IdGenerator,
    migrate_legacy_payload,
    random_id,
    sanitize_entries,
    sanitize_order,
)
from ota_index.storage.db_manager import SourceStore

logger = logging.getLogger(__name__)

SOURCES_FILE_NAME = "sources.json"


class JsonSourceStore(SourceStore):
    def __init__(self, data_dir: Path, id_generator: IdGenerator = random_id):
        self._data_dir = data_dir
        self._id_generator = id_generator
        self._lock = threading.Lock()

        # Ensure data directory exists
        if not self._data_dir.exists():
            self._data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._data_dir / SOURCES_FILE_NAME

    def get_stored_state(self) -> StoredState:
        with self._lock:
            return self._read()

    def save_stored_state(self, entries: List[Any], order: Optional[List[Any]] = None) -> StoredState:
        sanitized_entries = sanitize_entries(list(entries), self._id_generator)

        with self._lock:
            if order is None:
                order = self._read().order
            state = StoredState(entries=sanitized_entries, order=sanitize_order(list(order)))

            self._data_dir.mkdir(parents=True, exist_ok=True)
            self.path.write_text(state.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

        logger.info(f"Saved {len(state.entries)} source(s) to {self.path}")
        return state

    def _read(self) -> StoredState:
        path = self.path
        if not path.exists():
            return StoredState()

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except Exception as e:
            # Unreadable file reads as empty; the next save overwrites it.
            logger.warning(f"Failed to read {path}: {e}")
            return StoredState()

        state = migrate_legacy_payload(raw, self._id_generator)

        # Persist migrated/sanitized content so generated IDs stay stable.
        if state.model_dump(mode="json", by_alias=True) != raw:
            path.write_text(state.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
            logger.info(f"Rewrote {path} after migration")
        return state
