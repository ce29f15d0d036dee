"""
utils.py - Shared utilities for the template generator.

Holds what sits between a user's page description and the pixel-only
renderer: exit codes, units of measure, and template configuration loading.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from template_generator.renderer import Color, GridStyle, InvalidParameter, RenderRequest

logger = logging.getLogger(__name__)

# ============================================================================
# Exit codes
# ============================================================================
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_INVALID_PARAMETER = 2  # Rejected input - retrying the same request is pointless


# ============================================================================
# Units
# ============================================================================


class Unit(Enum):
    PX = "px"
    IN = "in"
    MM = "mm"


DEFAULT_PIXELS_PER_UNIT = {
    Unit.PX: 1.0,
    Unit.IN: 100.0,
    Unit.MM: 5.0,
}


def parse_unit(value: Union[Unit, str]) -> Unit:
    if isinstance(value, Unit):
        return value
    try:
        return Unit(str(value).strip().lower())
    except ValueError as e:
        choices = ", ".join(u.value for u in Unit)
        raise InvalidParameter(f"Unknown unit {value!r} (expected one of: {choices})") from e


# ============================================================================
# Template configuration
# ============================================================================


@dataclass(frozen=True)
class TemplateConfig:
    """
    A page template in user units.

    ``width``, ``height``, ``distance`` and ``margin`` are measured in ``unit``
    and scaled by ``pixels_per_unit``. ``size`` is always in pixels.
    """
    unit: Union[Unit, str] = Unit.IN
    pixels_per_unit: Optional[float] = None
    width: float = 8.5
    height: float = 11.0
    style: Union[GridStyle, str] = GridStyle.DOT
    distance: float = 0.25
    size: float = 2.0
    color: Color = "#000000"
    background_color: Color = "#ffffff"
    margin: float = 0.5

    def resolved_pixels_per_unit(self) -> float:
        """
        Pixels per unit, falling back to the unit's default.

        Pixels are always one pixel per unit, whatever was configured.
        """
        unit = parse_unit(self.unit)
        if unit is Unit.PX or self.pixels_per_unit is None:
            return DEFAULT_PIXELS_PER_UNIT[unit]
        ppu = _number("pixels_per_unit", self.pixels_per_unit)
        if ppu <= 0:
            raise InvalidParameter(f"pixels_per_unit must be positive, got {self.pixels_per_unit!r}")
        return ppu

    def with_overrides(self, **overrides: Any) -> "TemplateConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise InvalidParameter(f"Unknown template settings: {', '.join(sorted(unknown))}")
        if "unit" in changes and "pixels_per_unit" not in changes:
            # A new unit brings its own default scale.
            changes["pixels_per_unit"] = None
        return dataclasses.replace(self, **changes)

    def to_request(self) -> RenderRequest:
        """Convert to a pixel-unit render request."""
        ppu = self.resolved_pixels_per_unit()
        request = RenderRequest(
            width=int(_number("width", self.width) * ppu),
            height=int(_number("height", self.height) * ppu),
            style=GridStyle.parse(self.style),
            distance=_number("distance", self.distance) * ppu,
            size=_number("size", self.size),
            color=self.color,
            background_color=self.background_color,
            margin=_number("margin", self.margin) * ppu,
        )
        logger.debug(f"Template {self.width}x{self.height}{parse_unit(self.unit).value} "
                     f"at {ppu:g} px/unit -> {request.width}x{request.height}px")
        return request


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from e


def load_template_config(config_path: Path) -> TemplateConfig:
    """
    Load a template configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        TemplateConfig with file values layered over the defaults
    """
    with open(config_path, "r") as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidParameter(f"Could not parse template config {config_path}: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise InvalidParameter(f"Template config must be a mapping: {config_path}")

    return TemplateConfig().with_overrides(**_normalize_keys(config))


def _normalize_keys(config: Dict[str, Any]) -> Dict[str, Any]:
    # Accept "background-color" as well as "background_color".
    return {str(key).replace("-", "_"): value for key, value in config.items()}
