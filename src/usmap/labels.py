"""Label adjustment and offshore-box table loading."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import CAPITAL_DISTRICT, LabelAdjustment, OffshoreEntity

_LOGGER = logging.getLogger("usmap.labels")

# Labels for these sit beside, not on top of, their shape.
_OUTSIDE_SHAPE_DEFAULTS = frozenset({"Hawaii"})


@dataclass(frozen=True, slots=True)
class MapLabels:
    adjustments: Mapping[str, LabelAdjustment] = field(default_factory=dict)
    offshore: tuple[OffshoreEntity, ...] = ()

    @property
    def offshore_names(self) -> frozenset[str]:
        return frozenset(entity.name for entity in self.offshore)

    def adjustment_for(self, name: str) -> LabelAdjustment | None:
        return self.adjustments.get(name)

    def offshore_entities(self, *, exclude_dc: bool) -> tuple[OffshoreEntity, ...]:
        if not exclude_dc:
            return self.offshore
        return tuple(entity for entity in self.offshore if entity.name != CAPITAL_DISTRICT)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MapLabels:
        adjustments_raw = raw.get("adjustments", [])
        offshore_raw = raw.get("offshore", [])
        if not isinstance(adjustments_raw, list):
            raise ValueError("Expected list for 'adjustments'")
        if not isinstance(offshore_raw, list):
            raise ValueError("Expected list for 'offshore'")

        adjustments: dict[str, LabelAdjustment] = {}
        for idx, item in enumerate(adjustments_raw):
            if not isinstance(item, Mapping):
                raise ValueError(f"Expected mapping at adjustments[{idx}]")
            name = item.get("state")
            adjustment = LabelAdjustment.from_mapping(
                item,
                outside_default=name in _OUTSIDE_SHAPE_DEFAULTS,
            )
            if adjustment.name in adjustments:
                raise ValueError(f"Duplicate label adjustment for '{adjustment.name}'")
            adjustments[adjustment.name] = adjustment

        offshore: list[OffshoreEntity] = []
        for idx, item in enumerate(offshore_raw):
            if not isinstance(item, Mapping):
                raise ValueError(f"Expected mapping at offshore[{idx}]")
            offshore.append(OffshoreEntity.from_mapping(item))
        return cls(adjustments=adjustments, offshore=tuple(offshore))


def load_map_labels(path: Path) -> MapLabels:
    """Load the label table from YAML or JSON (JSON is valid YAML)."""
    if not path.exists():
        raise FileNotFoundError(f"Label table not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Expected mapping in {path}")
    labels = MapLabels.from_mapping(raw)
    _LOGGER.info(
        "Loaded %d label adjustments and %d offshore entries from %s",
        len(labels.adjustments),
        len(labels.offshore),
        path,
    )
    return labels
