from pathlib import Path
from typing import Optional

from ota_index.core.config import ServerConfig, load_server_config
from ota_index.storage.db_manager import SourceStore
from ota_index.storage.json_db_manager import JsonSourceStore
from ota_index.domain.entities import SourceRegistry
from ota_index.services.source_resolver import SourceResolver

_server_config: Optional[ServerConfig] = None
_source_store: Optional[SourceStore] = None
_registry: Optional[SourceRegistry] = None

def get_server_config() -> ServerConfig:
    global _server_config
    if _server_config is None:
        _server_config = load_server_config()
    return _server_config

def get_data_dir() -> Path:
    d = get_server_config().data_dir
    d.mkdir(parents=True, exist_ok=True)
    return d

def get_source_store() -> SourceStore:
    global _source_store
    if _source_store is None:
        _source_store = JsonSourceStore(get_data_dir())
    return _source_store

def get_registry() -> SourceRegistry:
    global _registry
    if _registry is None:
        _registry = SourceRegistry(get_source_store(), get_server_config().index_source_urls)
    return _registry

def get_resolver() -> SourceResolver:
    config = get_server_config()
    return SourceResolver(
        timeout=config.fetch_timeout_seconds,
        max_concurrent_fetches=config.max_concurrent_fetches,
    )
