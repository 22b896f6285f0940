"""Hover state machine: tooltip plus cross-highlighting by entity name."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Sequence

from .scene import SceneNode
from .style import StyleConfig

_LOGGER = logging.getLogger("usmap.interaction")

POINTER_ENTER = "pointerenter"
POINTER_MOVE = "pointermove"
POINTER_LEAVE = "pointerleave"

TOOLTIP_FLIP_RATIO = 0.75
TOOLTIP_OFFSET = 10

# (css property, normal channel, hover channel)
_HIGHLIGHT_CHANNELS = (
    ("fill", "fill", "fill_hover"),
    ("stroke", "stroke", "stroke_hover"),
    ("stroke-width", "stroke_width", "stroke_width_hover"),
)


class HoverState(enum.Enum):
    IDLE = "idle"
    HOVERING = "hovering"


@dataclass(frozen=True, slots=True)
class PointerEvent:
    page_x: float = 0.0
    page_y: float = 0.0


class HoverController:
    """Tracks the single hovered entity for one rendered scene.

    Every element registered under a name (the true-position shape and its
    offshore box) is highlighted and raised together. Leaving restores the
    normal style values, recomputed from the channels, and the paint order.
    """

    def __init__(self, *, style: StyleConfig, tooltip: SceneNode, drawing_width: float) -> None:
        self.style = style
        self.tooltip = tooltip
        self.drawing_width = drawing_width
        self.active: str | None = None
        self._targets: dict[str, list[SceneNode]] = {}
        self._raise_targets: dict[int, SceneNode] = {}
        self._raised: list[tuple[SceneNode, SceneNode, int]] = []

    @property
    def state(self) -> HoverState:
        return HoverState.IDLE if self.active is None else HoverState.HOVERING

    def register(self, node: SceneNode, name: str, *, raise_target: SceneNode | None = None) -> None:
        """Attach hover handlers; ``raise_target`` is raised in place of ``node``."""
        self._targets.setdefault(name, []).append(node)
        if raise_target is not None:
            self._raise_targets[id(node)] = raise_target
        node.on(POINTER_ENTER, lambda event: self.enter(name, event))
        node.on(POINTER_MOVE, lambda event: self.move(name, event))
        node.on(POINTER_LEAVE, lambda event: self.leave(name, event))

    def targets(self, name: str) -> Sequence[SceneNode]:
        return tuple(self._targets.get(name, ()))

    def enter(self, name: str, event: PointerEvent) -> None:
        if self.active is not None:
            self.leave(self.active, event)

        self.active = name
        self.tooltip.set_style("visibility", "visible")
        self.tooltip.set_style("opacity", 1)
        self.tooltip.html = self.style.tooltip_html(name)

        for node in self._targets.get(name, ()):
            for prop, _, hover_channel in _HIGHLIGHT_CHANNELS:
                node.set_style(prop, self.style.resolve(hover_channel, name))
            raised = self._raise_targets.get(id(node), node)
            if raised.parent is not None:
                self._raised.append((raised, raised.parent, raised.index()))
                raised.raise_()
        _LOGGER.debug("hover enter %s", name)

    def move(self, name: str, event: PointerEvent) -> None:
        if self.active != name:
            return
        width = self.style.tooltip_width
        if event.page_x > self.drawing_width * TOOLTIP_FLIP_RATIO:
            left = event.page_x - width
        else:
            left = event.page_x + TOOLTIP_OFFSET
        self.tooltip.set_style("left", f"{_px(left)}px")
        self.tooltip.set_style("top", f"{_px(event.page_y + TOOLTIP_OFFSET)}px")

    def leave(self, name: str, event: PointerEvent) -> None:
        if self.active != name:
            return
        self.tooltip.set_style("opacity", 0)
        self.tooltip.set_style("visibility", "hidden")

        for node in self._targets.get(name, ()):
            for prop, normal_channel, _ in _HIGHLIGHT_CHANNELS:
                node.set_style(prop, self.style.resolve(normal_channel, name))
        while self._raised:
            node, parent, index = self._raised.pop()
            parent.adopt(node, index)
        self.active = None
        _LOGGER.debug("hover leave %s", name)


def _px(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")
