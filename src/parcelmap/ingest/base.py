"""Protocol shared by everything that produces a SpatialModel."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from parcelmap.spatial.models import SpatialModel


@runtime_checkable
class SpatialSource(Protocol):
    """A source that builds a fresh SpatialModel on every call.

    Implementations never mutate a model they returned earlier, so callers
    may hand the result straight to an editor session.
    """

    @property
    def name(self) -> str: ...

    def build(self) -> SpatialModel: ...
