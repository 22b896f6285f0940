"""Subdivision geometry loading.

The store is read once at startup and never mutated. Geometry stays in
longitude/latitude; projection to pixels happens per layout pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .models import _require_str

_LOGGER = logging.getLogger("usmap.geometry")

_POLYGONAL_TYPES = ("Polygon", "MultiPolygon")


def _first_existing_column(columns: Iterable[str], candidates: Sequence[str]) -> str | None:
    existing = {col.lower(): col for col in columns}
    for candidate in candidates:
        match = existing.get(candidate.lower())
        if match:
            return match
    return None


@dataclass(frozen=True, slots=True)
class Subdivision:
    """One named state-level polygon (possibly multi-part)."""

    name: str
    geometry: Any

    @property
    def rings(self) -> list[list[tuple[float, float]]]:
        return [list(ring) for ring in iter_linear_rings(self.geometry)]


class GeometryStore:
    """Immutable, name-unique collection of subdivisions in input order."""

    NAME_COLUMNS = ("name", "NAME", "state", "STATE_NAME")

    def __init__(self, subdivisions: Iterable[Subdivision]) -> None:
        items = tuple(subdivisions)
        by_name: dict[str, Subdivision] = {}
        for item in items:
            if item.name in by_name:
                raise ValueError(f"Duplicate subdivision name '{item.name}'")
            geom_type = getattr(item.geometry, "geom_type", "")
            if geom_type not in _POLYGONAL_TYPES:
                raise ValueError(
                    f"Subdivision '{item.name}' has unsupported geometry type '{geom_type}'"
                )
            by_name[item.name] = item
        self._items = items
        self._by_name = by_name

    def __iter__(self) -> Iterator[Subdivision]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Subdivision:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"Unknown subdivision '{name}'") from None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self._items)

    @classmethod
    def from_geojson(cls, payload: Mapping[str, Any], *, name_key: str = "name") -> GeometryStore:
        """Build a store from a GeoJSON FeatureCollection mapping."""
        shape = _require_shapely_shape()
        if payload.get("type") != "FeatureCollection":
            raise ValueError("Expected a GeoJSON FeatureCollection")
        features = payload.get("features")
        if not isinstance(features, list):
            raise ValueError("Expected 'features' list in FeatureCollection")

        subdivisions: list[Subdivision] = []
        for idx, feature in enumerate(features):
            if not isinstance(feature, Mapping):
                raise ValueError(f"Expected feature mapping at index {idx}")
            properties = feature.get("properties") or {}
            name = _require_str(properties.get(name_key), f"features[{idx}].properties.{name_key}")
            geometry = feature.get("geometry")
            if not isinstance(geometry, Mapping):
                raise ValueError(f"Feature '{name}' has no geometry")
            subdivisions.append(Subdivision(name=name, geometry=shape(geometry)))
        return cls(subdivisions)

    @classmethod
    def from_file(cls, path: Path, *, layer: str | None = None) -> GeometryStore:
        """Load any GDAL-readable source (GeoJSON, TopoJSON layer, shapefile)."""
        if not path.exists():
            raise FileNotFoundError(f"Geometry file not found: {path}")
        gpd = _require_geopandas()
        frame = gpd.read_file(path, layer=layer) if layer else gpd.read_file(path)
        if frame.crs is not None and not frame.crs.is_geographic:
            frame = frame.to_crs(epsg=4326)
        name_col = _first_existing_column(frame.columns, cls.NAME_COLUMNS)
        if name_col is None:
            cols = ", ".join(str(c) for c in frame.columns)
            raise ValueError(f"Could not detect a name column in {path}. Available columns: {cols}")

        subdivisions = [
            Subdivision(name=_require_str(row[name_col], name_col), geometry=row["geometry"])
            for _, row in frame.iterrows()
            if row["geometry"] is not None and not row["geometry"].is_empty
        ]
        store = cls(subdivisions)
        _LOGGER.info("Loaded %d subdivisions from %s", len(store), path)
        return store


def iter_linear_rings(geometry: Any) -> Iterator[list[tuple[float, float]]]:
    geom_type = getattr(geometry, "geom_type", "")
    if geom_type == "Polygon":
        yield [(float(x), float(y)) for x, y, *_ in geometry.exterior.coords]
        for interior in geometry.interiors:
            yield [(float(x), float(y)) for x, y, *_ in interior.coords]
    elif geom_type in ("MultiPolygon", "GeometryCollection"):
        for part in geometry.geoms:
            yield from iter_linear_rings(part)


def explode_polygons(geometry: Any) -> list[Any]:
    if geometry is None or geometry.is_empty:
        return []
    geom_type = getattr(geometry, "geom_type", "")
    if geom_type == "Polygon":
        return [geometry]
    if geom_type in ("MultiPolygon", "GeometryCollection"):
        out: list[Any] = []
        for part in geometry.geoms:
            out.extend(explode_polygons(part))
        return out
    return []


def _require_shapely_shape() -> Any:
    try:
        from shapely.geometry import shape
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for geometry loading") from exc
    return shape


def _require_geopandas() -> Any:
    try:
        import geopandas as gpd
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("geopandas is required for reading geometry files") from exc
    return gpd
