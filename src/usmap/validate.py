"""Cross-checks between the geometry store and the label tables."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from .abbreviations import to_postal
from .geometry import GeometryStore
from .labels import MapLabels


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


def validate_datasets(store: GeometryStore, labels: MapLabels) -> ValidationReport:
    report = ValidationReport()
    report.add_info(f"Geometry store holds {len(store)} subdivisions")
    report.add_info(
        f"Label table holds {len(labels.adjustments)} adjustments and "
        f"{len(labels.offshore)} offshore entries"
    )

    offshore_names = labels.offshore_names
    missing_adjustment = [
        name
        for name in store.names
        if name not in offshore_names and labels.adjustment_for(name) is None
    ]
    if missing_adjustment:
        report.add_error("Missing label adjustments: " + _format_name_list(missing_adjustment))

    unknown_adjustments = sorted(name for name in labels.adjustments if name not in store)
    if unknown_adjustments:
        report.add_error(
            "Label adjustments for names not in geometry: " + _format_name_list(unknown_adjustments)
        )

    unknown_offshore = sorted(name for name in offshore_names if name not in store)
    if unknown_offshore:
        report.add_error(
            "Offshore entries for names not in geometry: " + _format_name_list(unknown_offshore)
        )

    no_postal = [name for name in store.names if to_postal(name) is None]
    if no_postal:
        report.add_error("Names without a postal abbreviation: " + _format_name_list(no_postal))

    counts = Counter(entity.name for entity in labels.offshore)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        report.add_warning("Offshore entries listed more than once: " + _format_name_list(duplicates))

    unused = sorted(name for name in labels.adjustments if name in offshore_names)
    if unused:
        report.add_warning(
            "Adjustments ignored because the name is drawn offshore: " + _format_name_list(unused)
        )
    return report


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Datasets are consistent.")
    return lines


def _format_name_list(values: Sequence[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"
