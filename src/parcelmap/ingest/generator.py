"""Parametric block/lot generator driven by declarative block configurations.

Each configured block becomes a group of rectangular lots laid out in two
columns. Blocks with a rotation are turned as one rigid body about their
origin point. A fixed administration landmark is always appended last.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, Field

from parcelmap.core.config import GeneratorConfig
from parcelmap.core.types import BlockType, Point
from parcelmap.spatial.builder import SpatialModelBuilder
from parcelmap.spatial.geometry import rectangle, rotated_rectangle
from parcelmap.spatial.models import Block, Lot, LotInfo, MapBounds, SpatialModel, lot_key, utcnow

logger = logging.getLogger(__name__)

_DEFAULT_LAYOUT_PATH = Path(__file__).resolve().parents[3] / "config" / "block_layout.yml"

ADMIN_BLOCK_ID = "admin"
ADMIN_BLOCK_NAME = "Administração"
ADMIN_LOT_NUMBER = "main"
ADMIN_ANCHOR: Point = (600, 600)
ADMIN_WIDTH = 50
ADMIN_DEPTH = 30


class BlockConfiguration(BaseModel):
    """Declarative description of one generated block.

    ``type`` is kept as a plain string so that unknown layout types load
    fine and simply produce an empty block.
    """

    model_config = {"populate_by_name": True}

    id: int
    x: float
    y: float
    rotation: float = 0
    type: str
    rows: int = Field(default=10, ge=0)
    cols: int = Field(default=2, ge=0)
    lot_start: int = Field(default=1, alias="lotStart")
    lot_count: int | None = Field(default=None, ge=0, alias="lotCount")
    lot_width: float | None = Field(default=None, alias="lotWidth")
    lot_depth: float | None = Field(default=None, alias="lotDepth")


class ManualLayout(BaseModel):
    """Only the configured blocks are generated."""

    kind: Literal["manual"] = "manual"


class GridFill(BaseModel):
    """Configured blocks plus an automatic grid of ``rect`` blocks.

    Grid cells are visited column by column. Every visited cell consumes a
    block id, even when the cell is skipped because its id is already
    configured or it falls inside the reserved corner area.
    """

    kind: Literal["grid_fill"] = "grid_fill"
    start_x: float = 18000
    start_y: float = 2000
    columns: int = 8
    rows: int = 10
    first_id: int = 41
    last_id: int = 117
    block_rows: int = 12
    lots_per_column_pitch: int = 10
    reserved_from_column: int = 6
    reserved_from_row: int = 8

    def is_reserved(self, col: int, row: int) -> bool:
        return col >= self.reserved_from_column and row >= self.reserved_from_row


GenerationStrategy = Annotated[ManualLayout | GridFill, Field(discriminator="kind")]


class LayoutFile(BaseModel):
    """Schema of a YAML block layout file."""

    blocks: list[BlockConfiguration] = Field(default_factory=list)
    strategy: GenerationStrategy = Field(default_factory=ManualLayout)


def load_layout_file(path: str | Path | None = None) -> LayoutFile:
    """Load block configurations (and an optional strategy) from YAML."""
    layout_path = Path(path) if path else _DEFAULT_LAYOUT_PATH
    with open(layout_path) as fh:
        data = yaml.safe_load(fh) or {}
    return LayoutFile.model_validate(data)


def index_configurations(
    configs: Iterable[BlockConfiguration | dict[str, Any]],
) -> dict[int, BlockConfiguration]:
    """Key configurations by block id. A repeated id replaces the earlier entry."""
    indexed: dict[int, BlockConfiguration] = {}
    for raw in configs:
        cfg = raw if isinstance(raw, BlockConfiguration) else BlockConfiguration.model_validate(raw)
        if cfg.id in indexed:
            logger.warning("Block %d configured more than once; using the last entry", cfg.id)
        indexed[cfg.id] = cfg
    return indexed


class LayoutGenerator:
    """Builds a SpatialModel from block configurations."""

    def __init__(
        self,
        configs: Iterable[BlockConfiguration | dict[str, Any]] = (),
        config: GeneratorConfig | None = None,
        bounds: MapBounds | None = None,
        strategy: ManualLayout | GridFill | None = None,
        name: str = "generator",
    ) -> None:
        self._config = config or GeneratorConfig()
        self._bounds = bounds or MapBounds()
        self._configurations = index_configurations(configs)
        self._strategy = strategy or ManualLayout()
        self._name = name

    @classmethod
    def from_layout_file(
        cls,
        path: str | Path | None = None,
        config: GeneratorConfig | None = None,
        bounds: MapBounds | None = None,
    ) -> LayoutGenerator:
        config = config or GeneratorConfig()
        layout = load_layout_file(path or config.layout_path)
        return cls(layout.blocks, config=config, bounds=bounds, strategy=layout.strategy)

    @property
    def name(self) -> str:
        return self._name

    @property
    def configurations(self) -> dict[int, BlockConfiguration]:
        return dict(self._configurations)

    def build(self, strategy: ManualLayout | GridFill | None = None) -> SpatialModel:
        """Generate a fresh model. *strategy* overrides the generator's default."""
        strategy = strategy or self._strategy
        now = utcnow()
        builder = SpatialModelBuilder(bounds=self._bounds)

        for cfg in self._configurations.values():
            _add_block(builder, self.generate_block(cfg, now))

        if isinstance(strategy, GridFill):
            for cfg in self._grid_fill_configurations(strategy):
                _add_block(builder, self.generate_block(cfg, now))

        _add_block(builder, admin_block(now))
        logger.info(
            "Generated %d lots in %d configured blocks (%s)",
            builder.lot_count, len(self._configurations), strategy.kind,
        )
        return builder.build()

    def generate_block(self, cfg: BlockConfiguration, now: datetime | None = None) -> Block:
        """Lay out the lots of one configured block."""
        now = now or utcnow()
        block_id = str(cfg.id)
        width = cfg.lot_width or self._config.scaled_lot_width
        depth = cfg.lot_depth or self._config.scaled_lot_depth
        gap = self._config.scaled_gap
        origin = (cfg.x, cfg.y)

        cells: list[tuple[int, float, float]] = []
        if cfg.type == BlockType.RECT:
            number = cfg.lot_start
            for col in range(2):
                lx = cfg.x + col * (width + gap)
                for row in range(cfg.rows):
                    cells.append((number, lx, cfg.y + row * (depth + gap)))
                    number += 1
        elif cfg.type == BlockType.ANGLED:
            for i in range(cfg.lot_count or 10):
                col, row = i % 2, i // 2
                cells.append((i + 1, cfg.x + col * (width + gap), cfg.y + row * (depth + gap)))
        else:
            logger.debug("Block %s has layout type %r; generating no lots", block_id, cfg.type)

        lots = [
            _make_lot(
                block_id,
                str(number),
                rotated_rectangle(lx, ly, width, depth, origin, cfg.rotation),
                now,
            )
            for number, lx, ly in cells
        ]
        return Block(id=block_id, name=f"Quadra {cfg.id}", lots=lots)

    def _grid_fill_configurations(self, grid: GridFill) -> list[BlockConfiguration]:
        col_pitch = 2 * self._config.scaled_lot_width + self._config.scaled_street_width
        row_pitch = (
            grid.lots_per_column_pitch * self._config.scaled_lot_depth
            + self._config.scaled_street_width
        )
        configs = []
        block_id = grid.first_id
        for col in range(grid.columns):
            for row in range(grid.rows):
                if block_id > grid.last_id:
                    return configs
                if block_id not in self._configurations and not grid.is_reserved(col, row):
                    configs.append(BlockConfiguration(
                        id=block_id,
                        x=grid.start_x + col * col_pitch,
                        y=grid.start_y + row * row_pitch,
                        type=BlockType.RECT,
                        rows=grid.block_rows,
                    ))
                block_id += 1
        return configs


def admin_block(now: datetime | None = None) -> Block:
    """The administration landmark: one 50x30 lot anchored at (600, 600)."""
    now = now or utcnow()
    x, y = ADMIN_ANCHOR
    coordinates = rectangle(x, y, ADMIN_WIDTH, ADMIN_DEPTH)
    lot = _make_lot(
        ADMIN_BLOCK_ID,
        ADMIN_LOT_NUMBER,
        coordinates,
        now,
        label="Sede",
        notes="Administração e Ambulatório",
    )
    return Block(id=ADMIN_BLOCK_ID, name=ADMIN_BLOCK_NAME, lots=[lot])


def _make_lot(
    block_id: str,
    lot_number: str,
    coordinates: list[Point],
    now: datetime,
    **info: Any,
) -> Lot:
    lot_id = lot_key(block_id, lot_number)
    return Lot(
        id=lot_id,
        block=block_id,
        lot_number=lot_number,
        coordinates=coordinates,
        info=LotInfo(
            id=lot_id, block=block_id, lot=lot_number,
            created_at=now, updated_at=now, **info,
        ),
    )


def _add_block(builder: SpatialModelBuilder, block: Block) -> None:
    builder.add_block(block.id, block.name)
    for lot in block.lots:
        builder.add_lot(lot)
