from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, validator

# ---------------- Enumerated options ----------------


class NoiseStyle(str, Enum):
    BLOBBY = "blobby"
    BALANCED = "balanced"
    DETAILED = "detailed"
    RANDOM = "random"


class PaletteMode(str, Enum):
    MONOCHROME = "monochrome"
    ANALOGOUS = "analogous"
    COMPLEMENTARY = "complementary"
    SPLIT_COMPLEMENTARY = "split_complementary"
    TRIADIC = "triadic"
    TWO_TONE_RANDOM = "two_tone_random"
    SOFT_STRIPES = "soft_stripes"
    RANDOM = "random"


class ColorStyle(str, Enum):
    HARMONIOUS = "harmonious"
    RANDOM_ACCENT = "random_accent"
    RANDOM_DARKEN = "random_darken"
    RANDOM_OUTLINE = "random_outline"


# ---------------- Models ----------------


class MonsterConfig(BaseModel):
    """Immutable input for one generation run."""

    dimension: int = Field(64, ge=16, le=256)
    margin: int = Field(3, ge=0, le=64)
    noise_style: NoiseStyle = NoiseStyle.DETAILED
    palette_mode: PaletteMode = PaletteMode.MONOCHROME
    color_style: ColorStyle = ColorStyle.HARMONIOUS
    number_of_colors: int = Field(6, ge=1, le=32)
    draw_patterns: bool = False
    draw_outline: bool = True
    frame_count: int = Field(1, ge=1, le=120)
    animation_intensity: float = Field(1.0, ge=0.0, le=4.0)
    frame_delay_ms: int = Field(120, ge=10, le=5000)
    seed: Optional[int] = Field(None, ge=0)

    class Config:
        extra = "forbid"
        frozen = True

    @validator("margin")
    def validate_margin(cls, v, values):
        dimension = values.get("dimension")
        if dimension is not None and v * 4 > dimension:
            raise ValueError("margin must be at most a quarter of dimension")
        return v

    def with_overrides(self, **overrides: Any) -> "MonsterConfig":
        data = self.dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**data)


class OutputConfig(BaseModel):
    directory: str = "output"
    prefix: str = "monster"
    write_layers: bool = False
    gif: bool = True

    class Config:
        extra = "allow"


class Bundle(BaseModel):
    monster: MonsterConfig = MonsterConfig()
    output: OutputConfig = OutputConfig()
    log_level: str = "INFO"

    class Config:
        extra = "allow"


def bundle_from_dict(raw: Optional[Dict[str, Any]]) -> Bundle:
    return Bundle(**(raw or {}))
