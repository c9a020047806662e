"""
Merge firmware index arrays from several sources into one list.

Sources are given lowest priority first. Entries that share a
`(manufacturerCode, imageType)` identity are collapsed, with the entry from
the later source winning. Entries without a full identity are passed through
untouched.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

IndexEntry = Dict[str, Any]

# Canonical identity field -> accepted spellings, in lookup order.
IDENTITY_FIELD_ALIASES: Dict[str, tuple] = {
    "manufacturerCode": ("manufacturerCode", "manufactureCode"),
    "imageType": ("imageType", "image_type"),
}


class OverridePosition(str, Enum):
    """
    Where the winning entry lands when a later source overrides a key.
    """

    # Winner takes the slot where the key was first seen.
    KEEP_FIRST_SEEN = "keep_first_seen"
    # Winner is re-appended at the position of the overriding insertion.
    MOVE_TO_END = "move_to_end"


def to_index_entry(value: Any) -> Optional[IndexEntry]:
    """
    Return the value if it can act as an index entry (a JSON object), else None.
    """
    if not isinstance(value, dict):
        return None
    return value


def read_identity_field(entry: IndexEntry, field: str) -> Any:
    """
    Read an identity field, honouring its historical spellings.

    The first spelling holding a non-null value wins, even if that value
    later turns out to be unusable.
    """
    for name in IDENTITY_FIELD_ALIASES[field]:
        value = entry.get(name)
        if value is not None:
            return value
    return None


def _canonical_str(value: Any) -> str:
    # bool is an int subclass but never a valid code
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return ""


def get_entry_key(entry: IndexEntry) -> Optional[str]:
    """
    Build the merge key for an entry, or None if it has no identity.

    Numbers and numeric strings compare equal (`1`, `1.0` and `"1"`).
    """
    manufacturer_code = _canonical_str(read_identity_field(entry, "manufacturerCode"))
    image_type = _canonical_str(read_identity_field(entry, "imageType"))
    if manufacturer_code and image_type:
        return f"mc:{manufacturer_code}::it:{image_type}"
    return None


def merge_index_sources(
    sources: Sequence[Optional[Iterable[Any]]],
    override_position: OverridePosition = OverridePosition.KEEP_FIRST_SEEN,
) -> List[IndexEntry]:
    """
    Fold source arrays (lowest priority first) into one deduplicated list.

    * `None` sources are treated as empty.
    * Non-object elements are skipped.
    * Keyed entries upsert; the later source wins.
    * Keyless entries are appended where they arrive and never deduplicated.

    Output order follows insertion order; `override_position` decides whether
    an override keeps the original slot or moves to the end.
    """
    # Each slot holds an entry; vacated slots (MOVE_TO_END) become None.
    slots: List[Optional[IndexEntry]] = []
    slot_by_key: Dict[str, int] = {}
    skipped = 0

    for source_index, source in enumerate(sources):
        if source is None:
            logger.debug(f"Source #{source_index} unresolved, treating as empty")
            continue

        for item in source:
            entry = to_index_entry(item)
            if entry is None:
                skipped += 1
                logger.debug(f"Skipping non-object element in source #{source_index}")
                continue

            entry_key = get_entry_key(entry)
            if entry_key is None:
                slots.append(entry)
                continue

            existing = slot_by_key.get(entry_key)
            if existing is None:
                slot_by_key[entry_key] = len(slots)
                slots.append(entry)
            elif override_position is OverridePosition.KEEP_FIRST_SEEN:
                slots[existing] = entry
            else:
                slots[existing] = None
                slot_by_key[entry_key] = len(slots)
                slots.append(entry)

    if skipped:
        logger.debug(f"Skipped {skipped} non-object element(s) while merging")

    return [entry for entry in slots if entry is not None]
