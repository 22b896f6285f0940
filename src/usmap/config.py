"""Typed loader turning a YAML style file into a :class:`StyleConfig`."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, cast

import yaml

from .abbreviations import to_postal
from .style import CHANNEL_FIELDS, NOOP, StyleConfig

# Channels expressible as plain values; tooltip_html and sort have their own forms.
_VALUE_CHANNELS = tuple(name for name in CHANNEL_FIELDS if name not in ("tooltip_html", "sort"))
_SCALAR_TYPES = (str, int, float, bool)


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    return tuple(_str(item, f"{field_name}[{idx}]") for idx, item in enumerate(value))


def _scalar(value: Any, field_name: str) -> Any:
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    raise ValueError(f"Expected scalar value for '{field_name}'")


def _channel(value: Any, field_name: str) -> Callable[[str], Any]:
    """Constant value or ``{default, by_name}`` lookup, as a channel function."""
    if isinstance(value, Mapping):
        unknown = set(value) - {"default", "by_name"}
        if unknown:
            raise ValueError(
                f"Unknown keys for '{field_name}': {', '.join(sorted(str(k) for k in unknown))}"
            )
        default = _scalar(value.get("default"), f"{field_name}.default")
        by_name_raw = _mapping(value.get("by_name", {}) or {}, f"{field_name}.by_name")
        by_name = {
            _str(key, f"{field_name}.by_name key"): _scalar(item, f"{field_name}.by_name.{key}")
            for key, item in by_name_raw.items()
        }

        def _lookup(name: str) -> Any:
            return by_name.get(name, default)

        return _lookup

    constant = _scalar(value, field_name)

    def _constant(name: str) -> Any:
        return constant

    return _constant


def _tooltip_html(value: Any) -> Callable[[str], Any]:
    template = _str(value, "tooltip_html")
    try:
        template.format(name="Texas", postal="TX")
    except (AttributeError, IndexError, KeyError, ValueError) as exc:
        raise ValueError(
            f"Invalid template for 'tooltip_html' (use {{{{ and }}}} for literal braces): {exc}"
        ) from exc

    def _render(name: str) -> str:
        return template.format(name=name, postal=to_postal(name) or "")

    return _render


def _sort(value: Any) -> Callable[[str, str], Any]:
    raw = _mapping(value, "sort")
    last = _str_list(raw.get("last", []), "sort.last")
    rank = {name: idx + 1 for idx, name in enumerate(last)}

    def _compare(left: str, right: str) -> int:
        return rank.get(left, 0) - rank.get(right, 0)

    return _compare


def style_config_from_mapping(raw: Mapping[str, Any]) -> StyleConfig:
    known = set(_VALUE_CHANNELS) | {"tooltip_html", "sort", "text_font_size", "tooltip_width"}
    unknown = sorted(str(key) for key in raw if key not in known)
    if unknown:
        raise ValueError(f"Unknown style keys: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for name in _VALUE_CHANNELS:
        if name in raw:
            values[name] = NOOP if raw[name] is None else _channel(raw[name], name)
    if raw.get("tooltip_html") is not None:
        values["tooltip_html"] = _tooltip_html(raw["tooltip_html"])
    if raw.get("sort") is not None:
        values["sort"] = _sort(raw["sort"])
    if "text_font_size" in raw:
        values["text_font_size"] = _str_list(raw["text_font_size"], "text_font_size")
    if "tooltip_width" in raw:
        values["tooltip_width"] = _float(raw["tooltip_width"], "tooltip_width")
    return StyleConfig(**values)


def load_style_config(path: str | Path) -> StyleConfig:
    """Load a style file; an empty file yields the defaults."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Style file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        return StyleConfig()
    return style_config_from_mapping(_mapping(raw, "root"))
