"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from parcelmap.core.types import Equality


class GeneratorConfig(BaseSettings):
    """Geometry generator configuration.

    Sizes are in map units; one unit is one pixel of the background image.
    """

    model_config = {"env_prefix": "PARCELMAP_GENERATOR_"}

    lot_width: float = 8
    lot_depth: float = 20
    gap: float = 2
    street_width: float = 15
    scale: float = 1
    layout_path: str | None = None

    @property
    def scaled_lot_width(self) -> float:
        return self.lot_width * self.scale

    @property
    def scaled_lot_depth(self) -> float:
        return self.lot_depth * self.scale

    @property
    def scaled_gap(self) -> float:
        return self.gap * self.scale

    @property
    def scaled_street_width(self) -> float:
        return self.street_width * self.scale


class AdapterConfig(BaseSettings):
    """Feature collection adapter configuration."""

    model_config = {"env_prefix": "PARCELMAP_ADAPTER_"}

    point_half_size: float = 5


class BoundsConfig(BaseSettings):
    """Map bounds, fixed to the background reference image."""

    model_config = {"env_prefix": "PARCELMAP_BOUNDS_"}

    width: float = 1024
    height: float = 747


class HistoryConfig(BaseSettings):
    """Edit history configuration."""

    model_config = {"env_prefix": "PARCELMAP_HISTORY_"}

    equality: Equality = Equality.STRUCTURAL


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "PARCELMAP_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    adapter: AdapterConfig = Field(default_factory=AdapterConfig)
    bounds: BoundsConfig = Field(default_factory=BoundsConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
