"""
Source identity and precedence bookkeeping.

Server URLs (from configuration) and user-stored entries live in separate ID
namespaces and are combined at request time into one ordered pool:

* `env:url:<url>`     server entries, derived, never persisted
* `stored:url:<url>`  stored URL entries, derived from the trimmed URL
* `stored:raw:<uuid>` stored inline arrays, random
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ota_index.domain.models import SourceEntry, StoredState

logger = logging.getLogger(__name__)

ENV_ID_PREFIX = "env:"
ENV_URL_ID_PREFIX = "env:url:"
STORED_URL_ID_PREFIX = "stored:url:"
STORED_RAW_ID_PREFIX = "stored:raw:"

IdGenerator = Callable[[], str]


def random_id() -> str:
    return str(uuid.uuid4())


def env_url_id(url: str) -> str:
    return f"{ENV_URL_ID_PREFIX}{url}"


def stored_url_id(url: str) -> str:
    return f"{STORED_URL_ID_PREFIX}{url}"


def stored_raw_id(id_generator: IdGenerator = random_id) -> str:
    return f"{STORED_RAW_ID_PREFIX}{id_generator()}"


def new_url_entry(url: str) -> SourceEntry:
    """
    Create a stored URL entry. The ID is derived from the trimmed URL, so the
    same URL submitted twice maps to the same identity.
    """
    trimmed = url.strip()
    if not trimmed:
        raise ValueError("URL must not be empty")
    return SourceEntry(id=stored_url_id(trimmed), kind="url", value=trimmed)


def new_raw_entry(value: List[Any], id_generator: IdGenerator = random_id) -> SourceEntry:
    """
    Create a stored inline-array entry with a fresh random ID. Content is
    never used as identity.
    """
    if not isinstance(value, list):
        raise ValueError("Raw JSON must be an array")
    return SourceEntry(id=stored_raw_id(id_generator), kind="raw", value=value)


def _explicit_id(raw_id: Any) -> Optional[str]:
    # Stored entries may not claim the server namespace.
    if not isinstance(raw_id, str):
        return None
    candidate = raw_id.strip()
    if not candidate or candidate.startswith(ENV_ID_PREFIX):
        return None
    return candidate


def sanitize_entries(entries: Any, id_generator: IdGenerator = random_id) -> List[SourceEntry]:
    """
    Clean a batch of user-supplied entries before it is stored.

    * Non-objects, unknown kinds, URL entries without a string value and raw
      entries without an array value are dropped.
    * URL values are trimmed; empty URLs are dropped.
    * Missing IDs are derived; duplicate IDs get a random suffix.
    """
    if not isinstance(entries, list):
        return []

    seen: set = set()
    sanitized: List[SourceEntry] = []

    for entry in entries:
        if isinstance(entry, SourceEntry):
            entry = entry.model_dump(by_alias=True)
        if not isinstance(entry, dict):
            continue

        kind = entry.get("type", entry.get("kind"))
        value = entry.get("value")
        entry_id = _explicit_id(entry.get("id"))

        if kind == "url":
            if not isinstance(value, str):
                continue
            value = value.strip()
            if not value:
                continue
            entry_id = entry_id or stored_url_id(value)
        elif kind == "raw":
            if not isinstance(value, list):
                continue
            entry_id = entry_id or stored_raw_id(id_generator)
        else:
            continue

        while entry_id in seen:
            entry_id = f"{entry_id}:{id_generator()}"
        seen.add(entry_id)
        sanitized.append(SourceEntry(id=entry_id, kind=kind, value=value))

    return sanitized


def sanitize_order(order: Any) -> List[str]:
    """
    Keep string IDs only, trimmed, non-empty, first occurrence wins.
    """
    if not isinstance(order, list):
        return []

    seen: set = set()
    result: List[str] = []
    for value in order:
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def migrate_legacy_payload(payload: Any, id_generator: IdGenerator = random_id) -> StoredState:
    """
    Turn whatever was read from storage (or posted) into a StoredState.

    Modern payloads look like `{"entries": [...], "order": [...]}`. The
    historical shape `{"urls": ["https://...", ...]}` becomes stored URL
    entries whose order is the list order.
    """
    if not isinstance(payload, dict):
        return StoredState()

    if "entries" in payload:
        return StoredState(
            entries=sanitize_entries(payload.get("entries"), id_generator),
            order=sanitize_order(payload.get("order")),
        )

    if "urls" in payload:
        raw_urls = payload.get("urls")
        urls = [value for value in raw_urls if isinstance(value, str)] if isinstance(raw_urls, list) else []
        entries = sanitize_entries([{"type": "url", "value": url} for url in urls], id_generator)
        logger.info(f"Migrated legacy url list ({len(entries)} entries)")
        return StoredState(entries=entries, order=[entry.id for entry in entries])

    return StoredState()


def order_entries(entries: Sequence[SourceEntry], order: Iterable[str]) -> List[SourceEntry]:
    """
    Place entries named in `order` first, in that order, then everything else
    in its natural order. Unknown IDs in `order` are ignored.
    """
    by_id: Dict[str, SourceEntry] = {}
    for entry in entries:
        by_id.setdefault(entry.id, entry)

    ordered: List[SourceEntry] = []
    seen: set = set()

    for entry_id in order:
        entry = by_id.get(entry_id)
        if entry is None or entry_id in seen:
            continue
        seen.add(entry_id)
        ordered.append(entry)

    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        ordered.append(entry)

    return ordered


def server_entries(server_urls: Iterable[str]) -> List[SourceEntry]:
    return [SourceEntry(id=env_url_id(url), kind="url", value=url) for url in server_urls]


def resolve_combined_order(
    server_urls: Sequence[str],
    stored_entries: Sequence[SourceEntry],
    order: Sequence[str],
) -> List[SourceEntry]:
    """
    Build the combined list: server entries then stored entries, rearranged
    by the precedence order.
    """
    pool = server_entries(server_urls) + list(stored_entries)
    return order_entries(pool, order)


def move_entry(combined_ids: Sequence[str], entry_id: str, direction: str) -> List[str]:
    """
    Swap `entry_id` with its neighbour and return the new order list.

    Unknown IDs and moves past either end leave the order unchanged.
    """
    updated = list(combined_ids)
    if direction not in ("up", "down"):
        raise ValueError(f"Unknown direction: {direction}")
    if entry_id not in updated:
        return updated

    index = updated.index(entry_id)
    target = index - 1 if direction == "up" else index + 1
    if target < 0 or target >= len(updated):
        return updated

    updated[index], updated[target] = updated[target], updated[index]
    return updated
