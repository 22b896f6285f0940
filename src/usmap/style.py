"""Per-entity style channels and their resolution."""

from __future__ import annotations

import dataclasses
import functools
from dataclasses import dataclass
from typing import Any, Callable, Sequence

StyleValue = str | int | float | None
Channel = Callable[[str], Any]
Comparator = Callable[[str, str], Any]


def noop(name: str, *_: Any) -> None:
    """Shared sentinel: a channel set to this is switched off."""
    return None


NOOP: Channel = noop


def is_noop(channel: Callable[..., Any]) -> bool:
    return channel is NOOP


def resolve_style(channel: Channel, name: str, *, channel_name: str = "channel") -> StyleValue:
    value = channel(name)
    if value is None or isinstance(value, (str, int, float)):
        return value
    raise TypeError(
        f"Style channel '{channel_name}' returned {type(value).__name__} for '{name}'"
    )


def _fill(name: str) -> str:
    return "#eee"


def _stroke(name: str) -> str:
    return "#aaa"


def _stroke_width(name: str) -> int:
    return 1


def _text_filter(name: str) -> bool:
    return True


def _font_family(name: str) -> str:
    return "sans-serif"


CHANNEL_FIELDS = (
    "fill",
    "fill_hover",
    "stroke",
    "stroke_hover",
    "stroke_width",
    "stroke_width_hover",
    "overstroke",
    "overstroke_width",
    "text_filter",
    "text_font_family",
    "text_font_weight",
    "text_fill",
    "text_stroke",
    "text_stroke_width",
    "text_background_fill",
    "text_background_width",
    "text_background_height",
    "text_background_dy",
    "tooltip_html",
    "sort",
)


@dataclass(frozen=True, slots=True)
class StyleConfig:
    """Every styling input of the map, each defaulted.

    Channels map an entity name to a value. Hover channels only matter when
    ``tooltip_html`` is set. ``sort`` is a two-argument comparator deciding
    paint order; a result of ``None`` counts as equal.
    """

    fill: Channel = _fill
    fill_hover: Channel = NOOP
    stroke: Channel = _stroke
    stroke_hover: Channel = NOOP
    stroke_width: Channel = _stroke_width
    stroke_width_hover: Channel = NOOP
    overstroke: Channel = NOOP
    overstroke_width: Channel = NOOP
    text_filter: Channel = _text_filter
    text_font_size: tuple[str, str] = ("12px", "14px")
    text_font_family: Channel = _font_family
    text_font_weight: Channel = NOOP
    text_fill: Channel = NOOP
    text_stroke: Channel = NOOP
    text_stroke_width: Channel = NOOP
    text_background_fill: Channel = NOOP
    text_background_width: Channel = NOOP
    text_background_height: Channel = NOOP
    text_background_dy: Channel = NOOP
    tooltip_width: float = 200
    tooltip_html: Channel = NOOP
    sort: Comparator = NOOP

    def __post_init__(self) -> None:
        for field_name in CHANNEL_FIELDS:
            if not callable(getattr(self, field_name)):
                raise ValueError(f"Expected callable for '{field_name}'")
        font_size = self.text_font_size
        if isinstance(font_size, str) or not isinstance(font_size, Sequence) or len(font_size) != 2:
            raise ValueError("Expected [compact, wide] pair for 'text_font_size'")
        object.__setattr__(self, "text_font_size", tuple(font_size))
        width = self.tooltip_width
        if isinstance(width, bool) or not isinstance(width, (int, float)) or width < 0:
            raise ValueError("Expected non-negative number for 'tooltip_width'")

    def font_size(self, is_compact: bool) -> str:
        return self.text_font_size[0] if is_compact else self.text_font_size[1]

    @property
    def hover_enabled(self) -> bool:
        return not is_noop(self.tooltip_html)

    @property
    def overstroke_enabled(self) -> bool:
        return not is_noop(self.overstroke)

    @property
    def text_background_enabled(self) -> bool:
        return not is_noop(self.text_background_fill)

    def resolve(self, channel_name: str, name: str) -> StyleValue:
        return resolve_style(getattr(self, channel_name), name, channel_name=channel_name)

    def sort_key(self) -> Callable[[str], Any]:
        return comparator_key(self.sort)

    def replace(self, **changes: Any) -> StyleConfig:
        return dataclasses.replace(self, **changes)


def comparator_key(comparator: Comparator) -> Callable[[str], Any]:
    """Key function for sorted(); falsy comparator results keep input order."""

    def _compare(left: str, right: str) -> int:
        result = comparator(left, right)
        if not result:
            return 0
        return 1 if result > 0 else -1

    return functools.cmp_to_key(_compare)


def as_number(value: StyleValue) -> float:
    """Numeric layout input; a switched-off channel counts as zero."""
    if value is None or value == "":
        return 0.0
    return float(value)
