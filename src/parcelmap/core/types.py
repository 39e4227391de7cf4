"""Core type definitions shared across all parcelmap modules."""

from __future__ import annotations

from enum import StrEnum

Point = tuple[float, float]


class BlockType(StrEnum):
    """Layout types understood by the geometry generator."""

    RECT = "rect"
    ANGLED = "angled"
    IRREGULAR = "irregular"


class LotStatus(StrEnum):
    """Commercial/occupancy status of a lot."""

    NEUTRAL = "neutro"
    FREE = "livre"
    OCCUPIED = "ocupado"
    AVAILABLE = "disponivel"
    SOLD = "vendido"
    RESERVED = "reservado"


class CompletionStatus(StrEnum):
    """How much descriptive information a lot carries."""

    EMPTY = "empty"
    PARTIAL = "partial"
    COMPLETE = "complete"


class Equality(StrEnum):
    """Equality discipline used by the edit history to detect no-op edits."""

    STRUCTURAL = "structural"
    IDENTITY = "identity"
