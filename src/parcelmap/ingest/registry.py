"""Registry of named spatial sources."""

from __future__ import annotations

from parcelmap.ingest.base import SpatialSource


class SourceRegistry:
    """Registry for spatial sources. Provides register/get/list."""

    def __init__(self) -> None:
        self._sources: dict[str, SpatialSource] = {}

    def register(self, source: SpatialSource) -> None:
        """Register a source, replacing any earlier source with the same name."""
        self._sources[source.name] = source

    def get(self, name: str) -> SpatialSource | None:
        return self._sources.get(name)

    @property
    def source_names(self) -> list[str]:
        return list(self._sources.keys())
