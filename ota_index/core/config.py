from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from ota_index.domain.index_merge import OverridePosition


INDEX_SOURCE_URLS_ENV_VAR = "INDEX_SOURCE_URLS"
DATA_ROOT_ENV_VAR = "OTA_INDEX_DATA_DIR"
FETCH_TIMEOUT_ENV_VAR = "OTA_INDEX_FETCH_TIMEOUT"
MAX_CONCURRENT_FETCHES_ENV_VAR = "OTA_INDEX_MAX_CONCURRENT_FETCHES"
OVERRIDE_POSITION_ENV_VAR = "OTA_INDEX_OVERRIDE_POSITION"

# Resolve repository root (project root, not the Python package root)
_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"


class ServerConfig(BaseModel):
    """
    Process-wide configuration, read from the environment at startup.

    The server URL list is read-only for the lifetime of the process; user
    edits only ever touch the stored sources.
    """

    index_source_urls: List[str] = Field(
        default_factory=list,
        description="Server-provided index URLs, lowest priority first.",
    )
    data_dir: Path = Field(
        default=_DEFAULT_DATA_DIR,
        description="Directory holding sources.json.",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to each remote source fetch.",
    )
    max_concurrent_fetches: int = Field(
        default=8,
        ge=1,
        description="Upper bound on remote sources fetched at the same time.",
    )
    override_position: OverridePosition = Field(
        default=OverridePosition.KEEP_FIRST_SEEN,
        description="Where an overriding entry lands in the merged output.",
    )


def parse_url_list(value: Optional[str]) -> List[str]:
    """
    Split a `;`-separated URL list, trimming items and dropping empties.
    """
    return [item.strip() for item in (value or "").split(";") if item.strip()]


def load_server_config(environ: Optional[dict] = None) -> ServerConfig:
    """
    Build a ServerConfig from environment variables.

    Unset variables keep the model defaults.
    """
    env = os.environ if environ is None else environ
    values: dict = {"index_source_urls": parse_url_list(env.get(INDEX_SOURCE_URLS_ENV_VAR))}

    data_dir = env.get(DATA_ROOT_ENV_VAR)
    if data_dir:
        values["data_dir"] = Path(data_dir).expanduser()

    timeout = env.get(FETCH_TIMEOUT_ENV_VAR)
    if timeout:
        values["fetch_timeout_seconds"] = float(timeout)

    max_fetches = env.get(MAX_CONCURRENT_FETCHES_ENV_VAR)
    if max_fetches:
        values["max_concurrent_fetches"] = int(max_fetches)

    override_position = env.get(OVERRIDE_POSITION_ENV_VAR)
    if override_position:
        values["override_position"] = OverridePosition(override_position.strip().lower())

    return ServerConfig(**values)
