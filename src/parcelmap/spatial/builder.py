"""Incremental assembly of a SpatialModel for ingestion sources."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from parcelmap.spatial.geometry import ORIGIN, mean_center
from parcelmap.spatial.models import Block, Lot, MapBounds, SpatialModel

logger = logging.getLogger(__name__)


class SpatialModelBuilder:
    """Collects blocks and lots, then freezes them into a SpatialModel.

    Blocks keep first-seen order and lots keep insertion order. Adding a lot
    whose id is already present is an explicit last-write-wins overwrite:
    the new lot takes the old one's place (or moves to its own block when
    the block differs) and a warning is logged.
    """

    def __init__(self, bounds: MapBounds | None = None) -> None:
        self._bounds = bounds or MapBounds()
        self._names: dict[str, str] = {}
        self._lots: dict[str, list[Lot]] = {}
        self._lot_blocks: dict[str, str] = {}

    def add_block(self, block_id: str, name: str) -> None:
        """Register a block. Re-registering an existing id keeps the first name."""
        if block_id not in self._names:
            self._names[block_id] = name
            self._lots[block_id] = []

    def add_lot(self, lot: Lot) -> None:
        if lot.block not in self._names:
            raise KeyError(f"Block {lot.block!r} has not been added")

        previous_block = self._lot_blocks.get(lot.id)
        if previous_block is not None:
            logger.warning("Lot %s emitted twice; keeping the last one", lot.id)
            lots = self._lots[previous_block]
            idx = next(i for i, existing in enumerate(lots) if existing.id == lot.id)
            if previous_block == lot.block:
                lots[idx] = lot
                return
            del lots[idx]

        self._lots[lot.block].append(lot)
        self._lot_blocks[lot.id] = lot.block

    @property
    def lot_count(self) -> int:
        return len(self._lot_blocks)

    def build(
        self,
        with_block_centers: bool = False,
        sort_key: Callable[[str], Any] | None = None,
    ) -> SpatialModel:
        """Freeze collected entities into a new SpatialModel.

        Args:
            with_block_centers: Give each block the unweighted mean of its
                lot centers (origin for an empty block).
            sort_key: Optional key applied to block ids to reorder blocks.
        """
        block_ids = list(self._names)
        if sort_key is not None:
            block_ids.sort(key=sort_key)

        blocks = []
        for block_id in block_ids:
            lots = list(self._lots[block_id])
            center = None
            if with_block_centers:
                center = mean_center([lot.center for lot in lots]) if lots else ORIGIN
            blocks.append(Block(id=block_id, name=self._names[block_id], lots=lots, center=center))

        return SpatialModel(blocks=blocks, bounds=self._bounds)
