"""Spatial entity models: lots, blocks and the map-wide aggregate."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from parcelmap.core.config import BoundsConfig
from parcelmap.core.types import CompletionStatus, LotStatus, Point

logger = logging.getLogger(__name__)

# Validation context key listing LotInfo fields that must parse as their
# declared type. Fields not listed keep unparsable values as given.
STRICT_FIELDS = "strict_fields"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def lot_key(block_id: str, lot_number: str) -> str:
    """Deterministic lot identifier ``<blockId>-<lotNumber>``."""
    return f"{block_id}-{lot_number}"


def as_number(value: Any) -> float | None:
    """*value* when it is a real number, otherwise None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _unparsed(value: Any, info: ValidationInfo, expected: str) -> Any:
    strict = (info.context or {}).get(STRICT_FIELDS, ())
    if info.field_name in strict:
        raise ValueError(f"{info.field_name} must be {expected}, got {value!r}")
    logger.debug("Keeping unparsed lot attribute %s=%r", info.field_name, value)
    return value


class LotInfo(BaseModel):
    """Mutable descriptive record attached to a lot.

    Well-known attributes are typed; anything else an ingestion source
    provides is kept verbatim as an extra attribute. Typed attributes are
    parsed leniently: a value that cannot be read as the declared type is
    kept exactly as the source gave it. Validating with the field names in
    the ``STRICT_FIELDS`` context entry rejects such values instead, which
    is how user edits are checked.
    """

    model_config = {"extra": "allow", "frozen": True}

    id: str
    block: str
    lot: str
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    label: str | None = None
    owner: str | None = None
    owner_contact: str | None = None
    owner_cpf: str | None = None
    documentation: str | None = None
    website: str | None = None
    zone: str | None = None
    sector: str | None = None
    geo_lot: str | None = None
    ref_code: str | None = None
    display_id: str | None = None

    price: float | Any = None
    area: float | Any = None
    frontage: float | Any = None

    status: LotStatus | Any = None
    is_available: bool | Any = None

    aliases: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)
    documents: list[dict[str, Any]] | Any = Field(default_factory=list)

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "label", "owner", "owner_contact", "owner_cpf", "documentation",
        "website", "zone", "sector", "geo_lot", "ref_code", "display_id",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value)

    @field_validator("price", "area", "frontage", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return None
        if as_number(value) is not None:
            return value
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        return _unparsed(value, info, "a number")

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or value == "":
            return None
        try:
            return LotStatus(value)
        except ValueError:
            return _unparsed(value, info, f"one of {[s.value for s in LotStatus]}")

    @field_validator("is_available", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("true", "1", "yes", "sim"):
            return True
        if text in ("false", "0", "no", "nao", "não"):
            return False
        return _unparsed(value, info, "a boolean")

    @field_validator("aliases", "photos", mode="before")
    @classmethod
    def _coerce_text_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return [str(value)]

    @field_validator("documents", mode="before")
    @classmethod
    def _coerce_documents(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)) and all(isinstance(doc, dict) for doc in value):
            return list(value)
        return _unparsed(value, info, "a list of objects")

    @property
    def completion_status(self) -> CompletionStatus:
        """Classify how filled-in this record is from its key descriptive fields."""
        area = as_number(self.area)
        price = as_number(self.price)
        filled = sum([
            bool(self.notes and self.notes.strip()),
            bool(self.owner and self.owner.strip()),
            area is not None and area > 0,
            price is not None and price > 0,
            bool(self.documentation and self.documentation.strip()),
        ])
        if filled == 0:
            return CompletionStatus.EMPTY
        if filled >= 3:
            return CompletionStatus.COMPLETE
        return CompletionStatus.PARTIAL



class Lot(BaseModel):
    """One polygon-bearing parcel.

    ``coordinates`` keeps the ring exactly as the producer emitted it (no
    winding normalization, no closing point added). ``center`` is derived
    and not authoritative.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    id: str
    block: str
    lot_number: str = Field(alias="lot")
    coordinates: list[Point] = Field(min_length=3)
    center: Point | None = None
    info: LotInfo

    @property
    def area(self) -> float | None:
        """Numeric area, or None when unknown or not parsable."""
        return as_number(self.info.area)


class Block(BaseModel):
    """A named group of lots ("quadra"). Lot order is production order."""

    model_config = {"frozen": True}

    id: str
    name: str
    lots: list[Lot] = Field(default_factory=list)
    center: Point | None = None


class MapBounds(BaseModel):
    """Extent of the map surface. Fixed to the background image, never computed."""

    model_config = {"frozen": True}

    min_x: float = 0
    min_y: float = 0
    max_x: float = 1024
    max_y: float = 747

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @classmethod
    def from_config(cls, config: BoundsConfig | None = None) -> MapBounds:
        config = config or BoundsConfig()
        return cls(max_x=config.width, max_y=config.height)


class MapStatistics(BaseModel):
    """Headline counts for a spatial model."""

    total_blocks: int
    total_lots: int
    completion: dict[CompletionStatus, int] = Field(default_factory=dict)


class SpatialModel(BaseModel):
    """Ordered collection of blocks produced by one ingestion.

    Lot ids are unique across the whole model. Instances are never patched
    in place; editing helpers return a new model.
    """

    model_config = {"frozen": True}

    blocks: list[Block] = Field(default_factory=list)
    bounds: MapBounds = Field(default_factory=MapBounds)

    @model_validator(mode="after")
    def _check_unique_lot_ids(self) -> SpatialModel:
        seen: set[str] = set()
        for lot in self.iter_lots():
            if lot.id in seen:
                raise ValueError(f"Duplicate lot id {lot.id!r} in spatial model")
            seen.add(lot.id)
        return self

    def iter_lots(self) -> Iterator[Lot]:
        for block in self.blocks:
            yield from block.lots

    @property
    def lot_count(self) -> int:
        return sum(len(block.lots) for block in self.blocks)

    def get_block(self, block_id: str) -> Block | None:
        for block in self.blocks:
            if block.id == block_id:
                return block
        return None

    def get_lot(self, lot_id: str) -> Lot | None:
        for lot in self.iter_lots():
            if lot.id == lot_id:
                return lot
        return None

    def replace_lot(self, lot: Lot) -> SpatialModel:
        """Return a new model with the lot of the same id swapped for *lot*.

        Raises KeyError if no lot with that id exists.
        """
        for b_idx, block in enumerate(self.blocks):
            for l_idx, existing in enumerate(block.lots):
                if existing.id != lot.id:
                    continue
                lots = list(block.lots)
                lots[l_idx] = lot
                blocks = list(self.blocks)
                blocks[b_idx] = block.model_copy(update={"lots": lots})
                return self.model_copy(update={"blocks": blocks})
        raise KeyError(lot.id)

    def statistics(self) -> MapStatistics:
        completion = {status: 0 for status in CompletionStatus}
        for lot in self.iter_lots():
            completion[lot.info.completion_status] += 1
        return MapStatistics(
            total_blocks=len(self.blocks),
            total_lots=self.lot_count,
            completion=completion,
        )

    def to_external(self) -> dict[str, Any]:
        """Serialize to the ``{blocks: [...]}`` shape consumed by map views."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
