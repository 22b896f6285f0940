"""Pixel layout for one viewport: projected shapes, label anchors, offshore boxes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .abbreviations import to_postal
from .geometry import GeometryStore
from .labels import MapLabels
from .models import Margins, OffshoreEntity, Region, Viewport
from .projection import AlbersUsaProjection, FittedProjection, fit_size, svg_path_data
from .style import NOOP, Comparator, comparator_key

_LOGGER = logging.getLogger("usmap.layout")

ASPECT_RATIO = 0.58
OFFSHORE_GUTTER = 5.0


class LayoutConfigurationError(ValueError):
    """Raised when label or offshore tables do not match the geometry store."""


@dataclass(frozen=True, slots=True)
class _OffshorePolicy:
    box_size_compact: float
    box_size_wide: float
    right_inset_wide: float
    right_top_compact: float
    right_top_wide_ratio: float
    top_left_ratio: float
    top_top_ratio: float
    label_dx: float
    label_dy: float
    background_dx: float


_OFFSHORE_POLICY = _OffshorePolicy(
    box_size_compact=12.0,
    box_size_wide=15.0,
    right_inset_wide=60.0,
    right_top_compact=15.0,
    right_top_wide_ratio=0.35,
    top_left_ratio=0.85,
    top_top_ratio=0.07,
    label_dx=4.0,
    label_dy=-2.0,
    background_dx=2.0,
)


@dataclass(frozen=True, slots=True)
class ShapeLayout:
    name: str
    geometry: Any
    path_data: str
    centroid: tuple[float, float]


@dataclass(frozen=True, slots=True)
class LabelPlacement:
    name: str
    text: str
    x: float
    y: float
    outside_shape: bool = False


@dataclass(frozen=True, slots=True)
class OffshorePlacement:
    name: str
    region: Region
    text: str
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class LayoutResult:
    viewport: Viewport
    margins: Margins
    width: float
    height: float
    box_size: float
    projection: FittedProjection | None
    shapes: tuple[ShapeLayout, ...] = ()
    labels: tuple[LabelPlacement, ...] = ()
    offshore_right: tuple[OffshorePlacement, ...] = ()
    offshore_top: tuple[OffshorePlacement, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.projection is None

    @property
    def svg_width(self) -> float:
        return max(self.width + self.margins.left + self.margins.right, 0.0)

    @property
    def svg_height(self) -> float:
        return max(self.height + self.margins.top + self.margins.bottom, 0.0)

    def shape(self, name: str) -> ShapeLayout:
        for item in self.shapes:
            if item.name == name:
                return item
        raise KeyError(f"No shape laid out for '{name}'")

    def label(self, name: str) -> LabelPlacement | None:
        for item in self.labels:
            if item.name == name:
                return item
        return None

    def offshore_label_position(self) -> tuple[float, float]:
        """Abbreviation anchor relative to its box origin."""
        return (
            self.box_size + _OFFSHORE_POLICY.label_dx,
            self.box_size + _OFFSHORE_POLICY.label_dy,
        )

    def offshore_background_rect(
        self, *, width: float, height: float, dy: float
    ) -> tuple[float, float, float, float]:
        _, label_y = self.offshore_label_position()
        return (
            self.box_size + _OFFSHORE_POLICY.background_dx,
            label_y - height / 2.0 + dy,
            width,
            height,
        )


def label_background_rect(
    label: LabelPlacement, *, width: float, height: float, dy: float
) -> tuple[float, float, float, float]:
    """Rectangle centred on the label anchor, nudged vertically by ``dy``."""
    return (label.x - width / 2.0, label.y - height / 2.0 + dy, width, height)


def offshore_box_size(viewport: Viewport) -> float:
    if viewport.is_compact:
        return _OFFSHORE_POLICY.box_size_compact
    return _OFFSHORE_POLICY.box_size_wide


def partition_offshore(
    entities: tuple[OffshoreEntity, ...], viewport: Viewport
) -> tuple[tuple[OffshoreEntity, ...], tuple[OffshoreEntity, ...]]:
    """Split into (right, top); compact viewports stack everything on the right."""
    if viewport.is_compact:
        return (entities, ())
    right = tuple(entity for entity in entities if entity.region is Region.RIGHT)
    top = tuple(entity for entity in entities if entity.region is Region.TOP)
    return (right, top)


def compute_layout(
    viewport: Viewport,
    store: GeometryStore,
    labels: MapLabels,
    *,
    exclude_dc: bool = False,
    sort: Comparator = NOOP,
    text_filter: Callable[[str], Any] | None = None,
) -> LayoutResult:
    """Lay out every shape, label and offshore box for one viewport.

    All outputs are pure functions of the arguments. Configuration problems
    raise :class:`LayoutConfigurationError` before anything is projected,
    even for a degenerate viewport.
    """
    _check_tables(store, labels)
    margins = Margins.for_viewport(viewport)
    width = viewport.width - margins.left - margins.right
    height = width * ASPECT_RATIO
    box_size = offshore_box_size(viewport)
    offshore = labels.offshore_entities(exclude_dc=exclude_dc)

    if width <= 0 or len(store) == 0:
        return LayoutResult(
            viewport=viewport,
            margins=margins,
            width=width,
            height=height,
            box_size=box_size,
            projection=None,
        )

    base = AlbersUsaProjection()
    unit_geometries = [(item.name, base.project(item.geometry)) for item in store]
    fitted = fit_size(base, (geometry for _, geometry in unit_geometries), width, height)

    key = comparator_key(sort)
    ordered = sorted(unit_geometries, key=lambda item: key(item[0]))
    shapes: list[ShapeLayout] = []
    for name, unit_geometry in ordered:
        pixel_geometry = fitted.to_pixels(unit_geometry)
        centroid = pixel_geometry.centroid
        shapes.append(
            ShapeLayout(
                name=name,
                geometry=pixel_geometry,
                path_data=svg_path_data(pixel_geometry),
                centroid=(float(centroid.x), float(centroid.y)),
            )
        )

    labeled_offshore = labels.offshore_names
    placements: list[LabelPlacement] = []
    for shape in shapes:
        if shape.name in labeled_offshore:
            continue
        if text_filter is not None and not text_filter(shape.name):
            continue
        adjustment = labels.adjustments[shape.name]
        offset = adjustment.for_viewport(viewport)
        placements.append(
            LabelPlacement(
                name=shape.name,
                text=_postal(shape.name),
                x=shape.centroid[0] + offset.dx,
                y=shape.centroid[1] + offset.dy,
                outside_shape=adjustment.outside_shape,
            )
        )

    right, top = partition_offshore(offshore, viewport)
    step = box_size + OFFSHORE_GUTTER
    if viewport.is_compact:
        right_x = width
        right_y0 = _OFFSHORE_POLICY.right_top_compact
    else:
        right_x = width - _OFFSHORE_POLICY.right_inset_wide
        right_y0 = height * _OFFSHORE_POLICY.right_top_wide_ratio
    offshore_right = tuple(
        OffshorePlacement(
            name=entity.name,
            region=Region.RIGHT,
            text=_postal(entity.name),
            x=right_x,
            y=right_y0 + idx * step,
        )
        for idx, entity in enumerate(right)
    )
    # Stacked downward like the right column, not laid out as a row.
    offshore_top = tuple(
        OffshorePlacement(
            name=entity.name,
            region=Region.TOP,
            text=_postal(entity.name),
            x=width * _OFFSHORE_POLICY.top_left_ratio,
            y=height * _OFFSHORE_POLICY.top_top_ratio + idx * step,
        )
        for idx, entity in enumerate(top)
    )

    _LOGGER.debug(
        "Layout width=%.1f compact=%s shapes=%d labels=%d offshore=%d/%d",
        viewport.width,
        viewport.is_compact,
        len(shapes),
        len(placements),
        len(offshore_right),
        len(offshore_top),
    )
    return LayoutResult(
        viewport=viewport,
        margins=margins,
        width=width,
        height=height,
        box_size=box_size,
        projection=fitted,
        shapes=tuple(shapes),
        labels=tuple(placements),
        offshore_right=offshore_right,
        offshore_top=offshore_top,
    )


def _check_tables(store: GeometryStore, labels: MapLabels) -> None:
    unknown_offshore = sorted(
        {entity.name for entity in labels.offshore if entity.name not in store}
    )
    if unknown_offshore:
        raise LayoutConfigurationError(
            "Offshore entries not present in geometry: " + ", ".join(unknown_offshore)
        )
    unknown_adjustments = sorted(name for name in labels.adjustments if name not in store)
    if unknown_adjustments:
        raise LayoutConfigurationError(
            "Label adjustments not present in geometry: " + ", ".join(unknown_adjustments)
        )
    offshore_names = labels.offshore_names
    missing = [
        name
        for name in store.names
        if name not in offshore_names and labels.adjustment_for(name) is None
    ]
    if missing:
        raise LayoutConfigurationError(
            "Missing label adjustment for: " + ", ".join(missing)
        )


def _postal(name: str) -> str:
    code = to_postal(name)
    if code is None:
        raise LayoutConfigurationError(f"No postal abbreviation for '{name}'")
    return code
