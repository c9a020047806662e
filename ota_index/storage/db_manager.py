from abc import ABC, abstractmethod
from typing import List, Optional

from ota_index.domain.models import SourceEntry, StoredState


class SourceStore(ABC):
    """
    Abstract base class for persisting user-managed sources.
    """

    @abstractmethod
    def get_stored_state(self) -> StoredState:
        """Return the stored entries and precedence order."""
        pass

    @abstractmethod
    def save_stored_state(self, entries: List[SourceEntry], order: Optional[List[str]] = None) -> StoredState:
        """
        Persist entries and order.
        If order is None, the previously stored order is kept.
        Returns what was actually persisted.
        """
        pass
