"""Domain models shared across layout and render modules."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping

COMPACT_MAX_WIDTH = 700
CAPITAL_DISTRICT = "District of Columbia"


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected numeric value for '{field_name}'")
    return float(value)


class Region(str, enum.Enum):
    """Which offshore column an entity is stacked in."""

    RIGHT = "right"
    TOP = "top"

    @classmethod
    def parse(cls, value: Any, field_name: str) -> Region:
        raw = _require_str(value, field_name).casefold()
        for region in cls:
            if region.value == raw:
                return region
        raise ValueError(f"Invalid {field_name}: '{value}' (expected 'right' or 'top')")


@dataclass(frozen=True, slots=True)
class Offset:
    dx: float = 0.0
    dy: float = 0.0


@dataclass(frozen=True, slots=True)
class LabelAdjustment:
    """Per-subdivision nudge applied to the projected centroid."""

    name: str
    desktop: Offset
    mobile: Offset
    outside_shape: bool = False

    def for_viewport(self, viewport: Viewport) -> Offset:
        return self.mobile if viewport.is_compact else self.desktop

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, outside_default: bool = False) -> LabelAdjustment:
        name = _require_str(data.get("state"), "state")

        def _adj(key: str) -> float:
            raw = data.get(key, 0)
            return _number(raw, f"{name}.{key}")

        outside_raw = data.get("outside_shape")
        if outside_raw is None:
            outside_shape = outside_default
        elif isinstance(outside_raw, bool):
            outside_shape = outside_raw
        else:
            raise ValueError(f"Expected bool for '{name}.outside_shape'")
        return cls(
            name=name,
            desktop=Offset(_adj("label_adj_x"), _adj("label_adj_y")),
            mobile=Offset(_adj("mobile_label_adj_x"), _adj("mobile_label_adj_y")),
            outside_shape=outside_shape,
        )


@dataclass(frozen=True, slots=True)
class OffshoreEntity:
    """A subdivision drawn as a small annotation box beside the map."""

    name: str
    region: Region

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OffshoreEntity:
        name = _require_str(data.get("state"), "offshore.state")
        return cls(name=name, region=Region.parse(data.get("region"), f"{name}.region"))


@dataclass(frozen=True, slots=True)
class Viewport:
    width: float
    is_compact: bool

    @classmethod
    def from_width(cls, width: float) -> Viewport:
        return cls(width=float(width), is_compact=width <= COMPACT_MAX_WIDTH)


@dataclass(frozen=True, slots=True)
class Margins:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def for_viewport(cls, viewport: Viewport) -> Margins:
        return cls(right=34.0 if viewport.is_compact else 0.0)
