from __future__ import annotations

from propcast.connectors.base import ArchiveYear, HistoricalArchive, InMemoryArchive
from propcast.connectors.ca_sos import CaSosArchive
from propcast.connectors.http_client import SimpleHttpClient
from propcast.connectors.json_archive import JsonArchive
from propcast.core.config import ArchiveConfig


def build_archive(config: ArchiveConfig) -> HistoricalArchive:
    if config.kind == "ca_sos":
        client = SimpleHttpClient(
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            cache_ttl_seconds=config.cache_ttl_seconds,
        )
        return CaSosArchive(base_url=config.base_url, http=client)
    if config.kind == "memory":
        return InMemoryArchive()
    if config.kind == "json":
        return JsonArchive(config.path)
    raise ValueError(f"unknown archive kind: {config.kind!r}")


__all__ = [
    "ArchiveYear",
    "CaSosArchive",
    "HistoricalArchive",
    "InMemoryArchive",
    "JsonArchive",
    "SimpleHttpClient",
    "build_archive",
]
