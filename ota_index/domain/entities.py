from typing import Any, List, Optional
import logging

from ota_index.storage.db_manager import SourceStore
from ota_index.domain.models import SourceEntry, SourcesState, StoredState
from ota_index.domain.source_order import (
    ENV_ID_PREFIX,
    IdGenerator,
    move_entry,
    new_raw_entry,
    new_url_entry,
    order_entries,
    random_id,
    resolve_combined_order,
)

logger = logging.getLogger(__name__)


class SourceRegistry:
    """
    Server URLs plus the user-managed sources held by a SourceStore.

    Server URLs are read-only; every edit goes through the store and is
    re-read afterwards.
    """

    def __init__(self, store: SourceStore, server_urls: List[str], id_generator: IdGenerator = random_id):
        self.store = store
        self.server_urls = list(server_urls)
        self.id_generator = id_generator

    def get_state(self) -> SourcesState:
        stored = self.store.get_stored_state()
        return SourcesState(
            env_urls=list(self.server_urls),
            stored_entries=order_entries(stored.entries, stored.order),
            combined_entries=resolve_combined_order(self.server_urls, stored.entries, stored.order),
            order=stored.order,
        )

    def get_combined_entries(self) -> List[SourceEntry]:
        return self.get_state().combined_entries

    def save(self, entries: List[Any], order: Optional[List[Any]] = None) -> StoredState:
        """
        Replace the stored entries. With order=None the stored order is kept.
        """
        return self.store.save_stored_state(entries, order)

    def add_url(self, url: str) -> StoredState:
        """
        Append a URL source at the highest priority. A URL already present in
        the combined list (server or stored) is not added twice.
        """
        entry = new_url_entry(url)
        state = self.get_state()
        if any(e.kind == "url" and e.value == entry.value for e in state.combined_entries):
            logger.info(f"URL already configured, not adding: {entry.value}")
            return self.store.get_stored_state()
        return self._append(state, entry)

    def add_raw(self, value: List[Any]) -> StoredState:
        """Append an inline JSON array source at the highest priority."""
        return self._append(self.get_state(), new_raw_entry(value, self.id_generator))

    def remove(self, entry_id: str) -> StoredState:
        """
        Remove a stored source. Server sources cannot be removed.
        """
        state = self.get_state()
        if entry_id.startswith(ENV_ID_PREFIX):
            raise ValueError("Server sources cannot be removed")
        if not any(e.id == entry_id for e in state.stored_entries):
            raise KeyError(entry_id)

        stored = [e for e in state.stored_entries if e.id != entry_id]
        order = [e.id for e in state.combined_entries if e.id != entry_id]
        return self.store.save_stored_state(stored, order)

    def move(self, entry_id: str, direction: str) -> StoredState:
        """Swap a source with its neighbour in the combined list."""
        state = self.get_state()
        order = move_entry([e.id for e in state.combined_entries], entry_id, direction)
        return self.store.save_stored_state(state.stored_entries, order)

    def _append(self, state: SourcesState, entry: SourceEntry) -> StoredState:
        stored = state.stored_entries + [entry]
        order = [e.id for e in state.combined_entries] + [entry.id]
        return self.store.save_stored_state(stored, order)
