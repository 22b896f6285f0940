from __future__ import annotations

import pytest

from usmap.render import TOOLTIP_KEY, USMap
from usmap.scene import Document
from usmap.style import NOOP, StyleConfig

LAYER_ORDER = [
    "states",
    "states-overstrokes",
    "state-labels-backgrounds",
    "state-labels",
    "states-offshore",
    "states-offshore-labels",
]


def _by_entity(nodes, name):
    return [node for node in nodes if node.entity == name]


def _tooltip_count(document):
    return sum(1 for node in document.body.iter() if node.key == TOOLTIP_KEY)


def test_layers_emitted_in_fixed_order(store, labels):
    style = StyleConfig(
        overstroke=lambda name: "#fff",
        overstroke_width=lambda name: 3,
        text_background_fill=lambda name: "#000",
    )
    usmap = USMap(store, labels, style, width=1000)
    root = usmap.svg.children[0]
    assert root.classes == ("map",)
    assert [child.classes[0] for child in root.children] == LAYER_ORDER


def test_disabled_channels_skip_their_layers(store, labels):
    usmap = USMap(store, labels, width=1000)
    root = usmap.svg.children[0]
    assert [child.classes[0] for child in root.children] == [
        "states",
        "state-labels",
        "states-offshore",
        "states-offshore-labels",
    ]
    assert usmap.elements("state-overstroke") == []
    assert usmap.elements("state-label-background") == []
    assert usmap.elements("state-offshore-label-background") == []


def test_overstroke_layer_has_one_path_per_shape(store, labels):
    style = StyleConfig(overstroke=lambda name: "#fff", overstroke_width=lambda name: 2)
    usmap = USMap(store, labels, style, width=1000)
    overstrokes = usmap.elements("state-overstroke")
    assert len(overstrokes) == len(store)
    assert all(node.attrs["fill"] == "none" for node in overstrokes)
    assert overstrokes[0].attrs["stroke-width"] == 2


def test_shapes_use_resolved_style_channels(store, labels):
    style = StyleConfig(fill=lambda name: "#c00" if name == "Texas" else "#eee")
    usmap = USMap(store, labels, style, width=1000)
    shapes = usmap.elements("state")
    assert len(shapes) == len(store)
    (texas,) = _by_entity(shapes, "Texas")
    assert texas.attrs["fill"] == "#c00"
    assert texas.attrs["stroke"] == "#aaa"
    assert texas.attrs["stroke-width"] == 1
    assert texas.attrs["d"].startswith("M")


def test_label_background_rect_centered_on_label(store, labels):
    style = StyleConfig(
        text_background_fill=lambda name: "#fff",
        text_background_width=lambda name: 20,
        text_background_height=lambda name: 10,
        text_background_dy=lambda name: 2,
    )
    usmap = USMap(store, labels, style, width=1000)
    label = usmap.layout.label("Texas")
    (rect,) = _by_entity(usmap.elements("state-label-background"), "Texas")
    assert rect.attrs["x"] == pytest.approx(label.x - 10)
    assert rect.attrs["y"] == pytest.approx(label.y - 5 + 2)
    assert rect.style["fill"] == "#fff"
    offshore_backgrounds = usmap.elements("state-offshore-label-background")
    assert len(offshore_backgrounds) == 4
    assert offshore_backgrounds[0].attrs["x"] == 17


def test_label_text_styles(store, labels):
    style = StyleConfig(
        text_fill=lambda name: "#111",
        text_stroke=lambda name: "#fff",
        text_font_weight=lambda name: "bold",
    )
    usmap = USMap(store, labels, style, width=1000)
    (texas,) = _by_entity(usmap.elements("state-label"), "Texas")
    assert texas.text == "TX"
    assert texas.style["font-size"] == "14px"
    assert texas.style["font-weight"] == "bold"
    assert texas.style["fill"] == "#111"
    assert texas.style["pointer-events"] == "none"


def test_compact_width_uses_compact_font_and_hides_offshore_labels(store, scenario_labels):
    usmap = USMap(store, scenario_labels, width=600, exclude_dc=True)
    label_names = {node.entity for node in usmap.elements("state-label")}
    assert not label_names & {"Alaska", "Hawaii", "District of Columbia"}
    assert all(node.style["font-size"] == "12px" for node in usmap.elements("state-label"))
    boxes = usmap.elements("state-offshore-right")
    assert [node.entity for node in boxes] == ["Alaska", "Hawaii"]
    assert usmap.elements("state-offshore-top") == []
    assert [node.text for node in usmap.elements("state-offshore-label")] == ["AK", "HI"]
    assert usmap.svg.attrs["width"] == 600


def test_rerender_is_idempotent(store, labels):
    document = Document()
    style = StyleConfig(tooltip_html=lambda name: name)
    usmap = USMap(store, labels, style, width=900, document=document)
    first = usmap.to_svg()
    usmap.render()
    usmap.render()
    assert usmap.to_svg() == first
    assert _tooltip_count(document) == 1
    assert len(usmap.mount.children) == 1


def test_maps_in_one_document_share_the_tooltip(store, labels):
    document = Document()
    USMap(store, labels, width=900, document=document)
    USMap(store, labels, width=500, document=document)
    assert _tooltip_count(document) == 1


def test_update_rerenders_only_on_changed_inputs(store, labels):
    style = StyleConfig()
    usmap = USMap(store, labels, style, width=900)
    assert usmap.render_count == 1

    assert usmap.update(width=900) is False
    assert usmap.update(style=style) is False
    assert usmap.render_count == 1

    assert usmap.update(width=650) is True
    assert usmap.layout.viewport.is_compact
    assert usmap.update(style=style.replace(fill=lambda name: "#000")) is True
    assert usmap.update(exclude_dc=True) is True
    assert usmap.render_count == 4
    assert "District of Columbia" not in {
        node.entity for node in usmap.elements("state-offshore-box")
    }


def test_resize_rebuilds_without_leaking_elements(store, labels):
    usmap = USMap(store, labels, width=1000)
    shapes_before = len(usmap.elements("state"))
    usmap.update(width=500)
    usmap.update(width=1000)
    assert len(usmap.elements("state")) == shapes_before
    assert len(usmap.mount.children) == 1


@pytest.mark.parametrize("width", [0, -10])
def test_degenerate_width_renders_empty_svg(store, labels, width):
    usmap = USMap(store, labels, width=width)
    assert usmap.svg.children == []
    assert usmap.svg.attrs["height"] == 0


def test_hawaii_label_skips_text_paint(store):
    from conftest import make_labels

    labels = make_labels([("Alaska", "right")])
    style = StyleConfig(text_fill=lambda name: "#111", text_stroke=lambda name: "#fff")
    usmap = USMap(store, labels, style, width=1000)
    (hawaii,) = _by_entity(usmap.elements("state-label"), "Hawaii")
    assert hawaii.text == "HI"
    assert "fill" not in hawaii.style
    assert "stroke" not in hawaii.style
    assert hawaii.style["font-family"] == "sans-serif"


def test_svg_markup_serializes(store, labels):
    usmap = USMap(store, labels, StyleConfig(tooltip_html=NOOP), width=800)
    markup = usmap.to_svg()
    assert markup.startswith("<svg")
    assert 'class="state"' in markup
    assert ">TX</text>" in markup


def test_failed_update_keeps_previous_inputs_and_scene(store, labels):
    style = StyleConfig()
    usmap = USMap(store, labels, style, width=900)
    svg = usmap.svg

    with pytest.raises(TypeError):
        usmap.update(width=500, style=style.replace(fill=lambda name: ["#000"]))

    assert usmap.width == 900
    assert usmap.style is style
    assert usmap.svg is svg
    assert usmap.layout.viewport.width == 900
    assert usmap.render_count == 1
    assert usmap.update(width=900) is False
