from __future__ import annotations


class IndexMergeError(Exception):
    """Base class for failures while building the merged index."""


class SourcePayloadError(IndexMergeError):
    """
    A source answered successfully but its body is not valid JSON.

    Unlike unreachable or non-array sources, this is surfaced to the caller.
    """

    def __init__(self, source: str, message: str):
        super().__init__(f"Invalid JSON from source {source}: {message}")
        self.source = source
