from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


SourceKind = Literal["url", "raw"]


class SourceEntry(BaseModel):
    """
    One configured input to the merge pipeline.

    `kind` is `url` (value is an endpoint returning a JSON array) or `raw`
    (value is the inline array). On the wire the kind is called `type`.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: SourceKind = Field(alias="type")
    value: Union[str, List[Any]]

    @model_validator(mode="after")
    def _value_matches_kind(self) -> "SourceEntry":
        if self.kind == "url" and not isinstance(self.value, str):
            raise ValueError("url entries need a string value")
        if self.kind == "raw" and not isinstance(self.value, list):
            raise ValueError("raw entries need an array value")
        return self


class StoredState(BaseModel):
    """
    User-managed sources as persisted by the store.
    Persisted at: <DATA_DIR>/sources.json
    """

    entries: List[SourceEntry] = Field(default_factory=list)
    order: List[str] = Field(default_factory=list)


class SourcesState(BaseModel):
    """
    Everything the source manager needs: server URLs, stored entries (in
    precedence order), the full combined list and the raw order list.
    """

    model_config = ConfigDict(populate_by_name=True)

    env_urls: List[str] = Field(default_factory=list, alias="envUrls")
    stored_entries: List[SourceEntry] = Field(default_factory=list, alias="storedEntries")
    combined_entries: List[SourceEntry] = Field(default_factory=list, alias="combinedEntries")
    order: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class SourcesUpdateRequest(BaseModel):
    """
    Body of `POST /api/sources`.

    Entries are kept loose here; sanitization happens in the ordering engine.
    The legacy shape `{"urls": [...]}` is accepted when `entries` is absent.
    """

    entries: Optional[List[Any]] = None
    urls: Optional[List[Any]] = None
    order: Optional[List[Any]] = None


class AddUrlRequest(BaseModel):
    url: str


class AddRawRequest(BaseModel):
    value: List[Any]


class RemoveEntryRequest(BaseModel):
    id: str


class MoveEntryRequest(BaseModel):
    id: str
    direction: Literal["up", "down"]
