"""Contract for lot combination search consumers.

The search algorithm itself lives outside this package. Lots handed to a
consumer expose a stable ``id``, their ``coordinates`` and ``info.area``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from parcelmap.spatial.models import Lot, SpatialModel


class AreaTarget(BaseModel):
    """Desired total area, accepted within +/- ``tolerance``."""

    area: float = Field(gt=0)
    tolerance: float = Field(default=0.0, ge=0)

    def accepts(self, total_area: float) -> bool:
        return abs(total_area - self.area) <= self.tolerance


@runtime_checkable
class CombinationSearch(Protocol):
    """Returns ordered result sets, each a non-empty subsequence of *lots*."""

    def search(self, lots: Sequence[Lot], target: AreaTarget) -> list[list[Lot]]: ...


def searchable_lots(model: SpatialModel) -> list[Lot]:
    """Lots with a known positive area, in model order."""
    return [lot for lot in model.iter_lots() if lot.area is not None and lot.area > 0]
