"""Render orchestration: layout, style resolution and draw passes."""

from __future__ import annotations

import logging
import time
from typing import Any

from .geometry import GeometryStore
from .interaction import HoverController, PointerEvent
from .labels import MapLabels
from .layout import LayoutResult, OffshorePlacement, compute_layout, label_background_rect
from .models import Viewport
from .scene import Document, SceneNode
from .style import StyleConfig, as_number

_LOGGER = logging.getLogger("usmap.render")

TOOLTIP_KEY = "map-tooltip"


class USMap:
    """Responsive state map bound to a mount point in a host document.

    Any change to the width, the style record or the capital-district flag
    rebuilds the whole svg subtree from scratch and swaps it into the mount.
    The tooltip element is shared by every map in the document.
    """

    def __init__(
        self,
        store: GeometryStore,
        labels: MapLabels,
        style: StyleConfig | None = None,
        *,
        width: float = 600,
        exclude_dc: bool = False,
        document: Document | None = None,
        mount: SceneNode | None = None,
    ) -> None:
        self.store = store
        self.labels = labels
        self.style = style or StyleConfig()
        self.width = width
        self.exclude_dc = exclude_dc
        self.document = document or Document()
        self.mount = mount if mount is not None else self.document.create_mount()
        self.layout: LayoutResult | None = None
        self.svg: SceneNode | None = None
        self.tooltip: SceneNode | None = None
        self.hover: HoverController | None = None
        self.render_count = 0
        self._inputs: tuple[Any, ...] | None = None
        self.render()

    @property
    def viewport(self) -> Viewport:
        return Viewport.from_width(self.width)

    def update(
        self,
        *,
        width: float | None = None,
        style: StyleConfig | None = None,
        exclude_dc: bool | None = None,
    ) -> bool:
        """Apply new inputs; re-render only when something layout-relevant changed.

        A render that raises leaves the previous inputs and scene in place.
        """
        previous = (self.width, self.style, self.exclude_dc)
        if width is not None:
            self.width = width
        if style is not None:
            self.style = style
        if exclude_dc is not None:
            self.exclude_dc = exclude_dc
        if self._input_key() == self._inputs:
            _LOGGER.debug("Inputs unchanged; keeping current scene")
            return False
        try:
            self.render()
        except Exception:
            self.width, self.style, self.exclude_dc = previous
            raise
        return True

    def render(self) -> SceneNode:
        t0 = time.perf_counter()
        viewport = self.viewport
        style = self.style
        layout = compute_layout(
            viewport,
            self.store,
            self.labels,
            exclude_dc=self.exclude_dc,
            sort=style.sort,
            text_filter=style.text_filter,
        )

        tooltip = self.document.select_or_append(self.document.body, "div", TOOLTIP_KEY)
        tooltip.classes = ("map-tooltip",)
        tooltip.set_style("position", "absolute")
        tooltip.set_style("opacity", 0)
        tooltip.set_style("width", f"{_num(style.tooltip_width)}px")

        hover = (
            HoverController(style=style, tooltip=tooltip, drawing_width=layout.width)
            if style.hover_enabled
            else None
        )
        svg = SceneNode("svg", attrs={"width": layout.svg_width, "height": layout.svg_height})
        if not layout.is_empty:
            self._draw(svg, layout, hover)

        self.mount.clear()
        self.mount.adopt(svg)
        self.svg = svg
        self.layout = layout
        self.tooltip = tooltip
        self.hover = hover
        self._inputs = self._input_key()
        self.render_count += 1
        _LOGGER.debug(
            "Rendered map width=%.1f compact=%s in %.3fs",
            viewport.width,
            viewport.is_compact,
            time.perf_counter() - t0,
        )
        return svg

    def dispatch(self, event: str, node: SceneNode, *, page_x: float = 0.0, page_y: float = 0.0) -> bool:
        return node.fire(event, PointerEvent(page_x=page_x, page_y=page_y))

    def elements(self, cls: str) -> list[SceneNode]:
        if self.svg is None:
            return []
        return self.svg.find_all(cls=cls)

    def to_svg(self) -> str:
        return self.svg.to_markup() if self.svg is not None else ""

    def _input_key(self) -> tuple[Any, ...]:
        viewport = self.viewport
        return (viewport.width, viewport.is_compact, self.style, self.exclude_dc)

    def _draw(self, svg: SceneNode, layout: LayoutResult, hover: HoverController | None) -> None:
        root = svg.append("g", classes=("map",))
        self._draw_shapes(root, layout, hover)
        if self.style.overstroke_enabled:
            self._draw_overstrokes(root, layout)
        if self.style.text_background_enabled:
            self._draw_label_backgrounds(root, layout)
        self._draw_labels(root, layout)
        placements = (*layout.offshore_right, *layout.offshore_top)
        self._draw_offshore_boxes(root, layout, placements, hover)
        self._draw_offshore_labels(root, layout, placements)

    def _draw_shapes(self, root: SceneNode, layout: LayoutResult, hover: HoverController | None) -> None:
        style = self.style
        group = root.append("g", classes=("states",))
        for shape in layout.shapes:
            name = shape.name
            node = group.append(
                "path",
                {
                    "d": shape.path_data,
                    "fill": style.resolve("fill", name),
                    "stroke": style.resolve("stroke", name),
                    "stroke-width": style.resolve("stroke_width", name),
                },
                classes=("state",),
                entity=name,
            )
            if hover is not None:
                hover.register(node, name)

    def _draw_overstrokes(self, root: SceneNode, layout: LayoutResult) -> None:
        style = self.style
        group = root.append("g", classes=("states-overstrokes",))
        for shape in layout.shapes:
            group.append(
                "path",
                {
                    "d": shape.path_data,
                    "fill": "none",
                    "stroke": style.resolve("overstroke", shape.name),
                    "stroke-width": style.resolve("overstroke_width", shape.name),
                },
                classes=("state-overstroke",),
                entity=shape.name,
            )

    def _draw_label_backgrounds(self, root: SceneNode, layout: LayoutResult) -> None:
        style = self.style
        group = root.append("g", classes=("state-labels-backgrounds",))
        for label in layout.labels:
            x, y, width, height = label_background_rect(
                label,
                width=as_number(style.resolve("text_background_width", label.name)),
                height=as_number(style.resolve("text_background_height", label.name)),
                dy=as_number(style.resolve("text_background_dy", label.name)),
            )
            node = group.append(
                "rect",
                {"x": x, "y": y, "width": width, "height": height},
                classes=("state-label-background",),
                entity=label.name,
            )
            node.set_style("fill", style.resolve("text_background_fill", label.name))

    def _draw_labels(self, root: SceneNode, layout: LayoutResult) -> None:
        style = self.style
        font_size = style.font_size(layout.viewport.is_compact)
        group = root.append("g", classes=("state-labels",))
        for label in layout.labels:
            name = label.name
            node = group.append(
                "text",
                {"x": label.x, "y": label.y},
                classes=("state-label",),
                entity=name,
                text=label.text,
            )
            node.set_style("text-anchor", "middle")
            node.set_style("font-size", font_size)
            node.set_style("font-family", style.resolve("text_font_family", name))
            node.set_style("font-weight", style.resolve("text_font_weight", name))
            node.set_style("paint-order", "stroke")
            node.set_style("pointer-events", "none")
            if label.outside_shape:
                continue
            node.set_style("fill", style.resolve("text_fill", name))
            node.set_style("stroke", style.resolve("text_stroke", name))
            node.set_style("stroke-width", style.resolve("text_stroke_width", name))

    def _draw_offshore_boxes(
        self,
        root: SceneNode,
        layout: LayoutResult,
        placements: tuple[OffshorePlacement, ...],
        hover: HoverController | None,
    ) -> None:
        style = self.style
        group = root.append("g", classes=("states-offshore",))
        for placement in placements:
            name = placement.name
            holder = group.append(
                "g",
                {"transform": _translate(placement.x, placement.y)},
                classes=("state-offshore", f"state-offshore-{placement.region.value}"),
                entity=name,
            )
            box = holder.append(
                "rect",
                {
                    "x": 0,
                    "y": 0,
                    "width": layout.box_size,
                    "height": layout.box_size,
                    "fill": style.resolve("fill", name),
                    "stroke": style.resolve("stroke", name),
                    "stroke-width": style.resolve("stroke_width", name),
                },
                classes=("state-offshore-box",),
                entity=name,
            )
            if hover is not None:
                hover.register(box, name, raise_target=holder)

    def _draw_offshore_labels(
        self,
        root: SceneNode,
        layout: LayoutResult,
        placements: tuple[OffshorePlacement, ...],
    ) -> None:
        style = self.style
        font_size = style.font_size(layout.viewport.is_compact)
        label_x, label_y = layout.offshore_label_position()
        group = root.append("g", classes=("states-offshore-labels",))
        for placement in placements:
            name = placement.name
            holder = group.append(
                "g",
                {"transform": _translate(placement.x, placement.y)},
                classes=("state-offshore-label-group",),
                entity=name,
            )
            if style.text_background_enabled:
                x, y, width, height = layout.offshore_background_rect(
                    width=as_number(style.resolve("text_background_width", name)),
                    height=as_number(style.resolve("text_background_height", name)),
                    dy=as_number(style.resolve("text_background_dy", name)),
                )
                background = holder.append(
                    "rect",
                    {"x": x, "y": y, "width": width, "height": height},
                    classes=("state-offshore-label-background",),
                    entity=name,
                )
                background.set_style("fill", style.resolve("text_background_fill", name))
            text = holder.append(
                "text",
                {"x": label_x, "y": label_y},
                classes=("state-offshore-label",),
                entity=name,
                text=placement.text,
            )
            text.set_style("font-size", font_size)
            text.set_style("font-family", style.resolve("text_font_family", name))
            text.set_style("font-weight", style.resolve("text_font_weight", name))


def _translate(x: float, y: float) -> str:
    return f"translate({_num(x)}, {_num(y)})"


def _num(value: float) -> str:
    text = f"{float(value):.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
