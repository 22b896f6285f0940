"""Composite Albers equal-area projection fitted to a pixel box."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable

from .geometry import explode_polygons, iter_linear_rings


@dataclass(frozen=True, slots=True)
class _ConicPart:
    name: str
    proj4: str
    scale: float
    offset: tuple[float, float]


# Unit-sphere conics; offsets are in projected radius units, y pointing down.
_LOWER48 = _ConicPart(
    name="lower48",
    proj4="+proj=aea +lat_1=29.5 +lat_2=45.5 +lat_0=38.7 +lon_0=-96.6 +R=1 +no_defs",
    scale=1.0,
    offset=(0.0, 0.0),
)
_ALASKA = _ConicPart(
    name="alaska",
    proj4="+proj=aea +lat_1=55 +lat_2=65 +lat_0=58.5 +lon_0=-156 +R=1 +no_defs",
    scale=0.35,
    offset=(-0.307, 0.201),
)
_HAWAII = _ConicPart(
    name="hawaii",
    proj4="+proj=aea +lat_1=8 +lat_2=18 +lat_0=19.9 +lon_0=-160 +R=1 +no_defs",
    scale=1.0,
    offset=(-0.205, 0.212),
)

_PathBounds = tuple[float, float, float, float]


class AlbersUsaProjection:
    """Lower 48 in place, Alaska and Hawaii moved into the lower-left corner.

    Every polygon part is routed on its own, so the Aleutians and the
    Hawaiian islands each land in the right inset even in one multipolygon.
    """

    @staticmethod
    def part_for(lon: float, lat: float) -> _ConicPart:
        if lat >= 50.0:
            return _ALASKA
        if lon <= -150.0 and lat < 30.0:
            return _HAWAII
        return _LOWER48

    def project(self, geometry: Any) -> Any:
        """Project a lon/lat polygonal geometry into unit space (y down)."""
        shapely_transform, affine_transform = _require_shapely_ops()
        projected: list[Any] = []
        for polygon in explode_polygons(geometry):
            anchor = polygon.representative_point()
            part = self.part_for(float(anchor.x), float(anchor.y))
            planar = shapely_transform(_require_transformer(part.proj4).transform, polygon)
            s = part.scale
            projected.append(
                affine_transform(planar, [s, 0.0, 0.0, -s, part.offset[0], part.offset[1]])
            )
        return _collect_polygons(projected)


@dataclass(frozen=True, slots=True)
class FittedProjection:
    """Unit-space projection followed by a uniform scale and translate."""

    base: AlbersUsaProjection
    k: float
    tx: float
    ty: float

    def to_pixels(self, unit_geometry: Any) -> Any:
        _, affine_transform = _require_shapely_ops()
        return affine_transform(unit_geometry, [self.k, 0.0, 0.0, self.k, self.tx, self.ty])

    def project(self, geometry: Any) -> Any:
        return self.to_pixels(self.base.project(geometry))


def fit_size(
    base: AlbersUsaProjection,
    unit_geometries: Iterable[Any],
    width: float,
    height: float,
) -> FittedProjection:
    """Scale and centre so the combined bounds fill the width x height box."""
    bounds = _union_bounds(unit_geometries)
    if bounds is None:
        return FittedProjection(base=base, k=1.0, tx=0.0, ty=0.0)
    x0, y0, x1, y1 = bounds
    dx = x1 - x0
    dy = y1 - y0
    candidates = [extent / span for extent, span in ((width, dx), (height, dy)) if span > 0]
    k = min(candidates) if candidates else 1.0
    tx = (width - k * (x1 + x0)) / 2.0
    ty = (height - k * (y1 + y0)) / 2.0
    return FittedProjection(base=base, k=k, tx=tx, ty=ty)


def svg_path_data(geometry: Any) -> str:
    commands: list[str] = []
    for ring in iter_linear_rings(geometry):
        if len(ring) > 1 and ring[0] == ring[-1]:
            ring = ring[:-1]
        if not ring:
            continue
        head, *tail = ring
        commands.append(f"M{_fmt(head[0])},{_fmt(head[1])}")
        commands.extend(f"L{_fmt(x)},{_fmt(y)}" for x, y in tail)
        commands.append("Z")
    return "".join(commands)


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def _union_bounds(geometries: Iterable[Any]) -> _PathBounds | None:
    out: _PathBounds | None = None
    for geometry in geometries:
        if geometry is None or geometry.is_empty:
            continue
        min_x, min_y, max_x, max_y = (float(item) for item in geometry.bounds)
        if out is None:
            out = (min_x, min_y, max_x, max_y)
        else:
            out = (min(out[0], min_x), min(out[1], min_y), max(out[2], max_x), max(out[3], max_y))
    return out


def _collect_polygons(polygons: list[Any]) -> Any:
    Polygon, MultiPolygon = _require_polygon_factories()
    if not polygons:
        return Polygon()
    if len(polygons) == 1:
        return polygons[0]
    return MultiPolygon(polygons)


def _require_shapely_ops() -> tuple[Any, Any]:
    try:
        from shapely.affinity import affine_transform
        from shapely.ops import transform
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for geometry projection") from exc
    return (transform, affine_transform)


def _require_polygon_factories() -> tuple[Any, Any]:
    try:
        from shapely.geometry import MultiPolygon, Polygon
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for geometry projection") from exc
    return (Polygon, MultiPolygon)


@lru_cache(maxsize=None)
def _require_transformer(proj4: str) -> Any:
    try:
        from pyproj import CRS, Transformer
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pyproj is required for the Albers projection") from exc
    source = CRS.from_proj4("+proj=longlat +R=1 +no_defs")
    return Transformer.from_crs(source, CRS.from_proj4(proj4), always_xy=True)
