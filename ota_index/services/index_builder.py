"""
Build the merged firmware index from the configured sources.
"""
from __future__ import annotations

import logging
from typing import List

from ota_index.domain.entities import SourceRegistry
from ota_index.domain.index_merge import IndexEntry, OverridePosition, merge_index_sources
from ota_index.services.source_resolver import SourceResolver

logger = logging.getLogger(__name__)


async def build_merged_index(
    registry: SourceRegistry,
    resolver: SourceResolver,
    override_position: OverridePosition = OverridePosition.KEEP_FIRST_SEEN,
) -> List[IndexEntry]:
    """
    Resolve every combined source (concurrently) and fold them in order.

    Unresolved sources merge as empty. SourcePayloadError from the resolver
    propagates to the caller.
    """
    entries = registry.get_combined_entries()
    logger.info(f"Source entries: {[entry.kind for entry in entries]}")

    sources = await resolver.resolve_all(entries)
    for entry, content in zip(entries, sources):
        if content is None:
            logger.warning(f"Skipped source {entry.id}")

    merged = merge_index_sources(sources, override_position)
    logger.info(f"Merged {len(merged)} item(s) from {len(entries)} source(s)")
    return merged
