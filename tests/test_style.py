from __future__ import annotations

import pytest

from usmap.style import NOOP, StyleConfig, as_number, comparator_key, is_noop, resolve_style


def test_defaults_match_component_defaults():
    style = StyleConfig()
    assert style.fill("Texas") == "#eee"
    assert style.stroke("Texas") == "#aaa"
    assert style.stroke_width("Texas") == 1
    assert style.text_filter("Texas") is True
    assert style.text_font_family("Texas") == "sans-serif"
    assert style.text_font_size == ("12px", "14px")
    assert style.tooltip_width == 200
    assert not style.hover_enabled
    assert not style.overstroke_enabled
    assert not style.text_background_enabled


def test_noop_is_identity_checked():
    assert is_noop(NOOP)
    assert not is_noop(lambda name: None)
    assert StyleConfig(overstroke=lambda name: None).overstroke_enabled


def test_resolve_style_accepts_scalars_and_none():
    assert resolve_style(lambda name: "#fff", "Texas") == "#fff"
    assert resolve_style(lambda name: 2.5, "Texas") == 2.5
    assert resolve_style(NOOP, "Texas") is None


def test_resolve_style_rejects_other_types():
    with pytest.raises(TypeError, match="fill"):
        StyleConfig(fill=lambda name: ["#fff"]).resolve("fill", "Texas")


def test_channel_errors_propagate():
    def broken(name):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        StyleConfig(fill=broken).resolve("fill", "Texas")


@pytest.mark.parametrize(
    "changes",
    [
        {"fill": "#eee"},
        {"sort": None},
        {"text_font_size": ("12px",)},
        {"text_font_size": "12px"},
        {"tooltip_width": -1},
        {"tooltip_width": True},
    ],
)
def test_construction_validates(changes):
    with pytest.raises(ValueError):
        StyleConfig(**changes)


def test_font_size_list_is_normalized_to_tuple():
    assert StyleConfig(text_font_size=["9px", "11px"]).text_font_size == ("9px", "11px")


def test_replace_keeps_other_channels():
    base = StyleConfig(fill=lambda name: "#123")
    changed = base.replace(stroke=lambda name: "#456")
    assert changed.fill is base.fill
    assert changed != base


def test_comparator_key_treats_none_as_equal():
    names = ["Ohio", "Iowa", "Utah"]
    assert sorted(names, key=comparator_key(NOOP)) == names
    by_length_desc = comparator_key(lambda a, b: len(b) - len(a))
    assert sorted(["Utah", "Texas", "Iowa"], key=by_length_desc) == ["Texas", "Utah", "Iowa"]


def test_as_number():
    assert as_number(None) == 0.0
    assert as_number(4) == 4.0
    assert as_number("2.5") == 2.5
