from __future__ import annotations

import json

import yaml
from shapely.geometry import box, mapping

from conftest import STATE_BOXES, adjustment_row
from usmap.cli import main


def _write_inputs(tmp_path, adjusted):
    geometry = tmp_path / "states.geojson"
    geometry.write_text(
        json.dumps(
            {
                "type": "FeatureCollection",
                "features": [
                    {
                        "type": "Feature",
                        "properties": {"name": name},
                        "geometry": mapping(box(*bounds)),
                    }
                    for name, bounds in STATE_BOXES.items()
                ],
            }
        ),
        encoding="utf-8",
    )
    labels = tmp_path / "labels.yaml"
    labels.write_text(
        yaml.safe_dump(
            {
                "adjustments": [adjustment_row(name, idx) for idx, name in enumerate(adjusted)],
                "offshore": [
                    {"state": "Alaska", "region": "right"},
                    {"state": "Hawaii", "region": "right"},
                    {"state": "District of Columbia", "region": "top"},
                ],
            }
        ),
        encoding="utf-8",
    )
    return geometry, labels


def test_render_writes_html_snapshot(tmp_path):
    geometry, labels = _write_inputs(tmp_path, list(STATE_BOXES))
    style = tmp_path / "style.yaml"
    style.write_text("fill: '#cde'\ntooltip_html: '{name}'\n", encoding="utf-8")
    output = tmp_path / "out" / "map.html"

    code = main(
        [
            "render",
            "--geometry",
            str(geometry),
            "--labels",
            str(labels),
            "--style",
            str(style),
            "--width",
            "640",
            "--exclude-dc",
            "--output",
            str(output),
        ]
    )
    assert code == 0
    html = output.read_text(encoding="utf-8")
    assert html.startswith("<!doctype html>")
    assert "<svg" in html
    assert 'fill="#cde"' in html
    assert ">DC</text>" not in html


def test_render_reports_configuration_errors(tmp_path):
    geometry, labels = _write_inputs(tmp_path, ["Texas"])
    code = main(
        [
            "render",
            "--geometry",
            str(geometry),
            "--labels",
            str(labels),
            "--output",
            str(tmp_path / "map.html"),
        ]
    )
    assert code == 1
    assert not (tmp_path / "map.html").exists()


def test_validate_exit_codes(tmp_path):
    geometry, labels = _write_inputs(tmp_path, list(STATE_BOXES))
    assert main(["validate", "--geometry", str(geometry), "--labels", str(labels)]) == 0

    geometry, labels = _write_inputs(tmp_path, ["Texas"])
    assert main(["validate", "--geometry", str(geometry), "--labels", str(labels)]) == 1


def test_missing_labels_file(tmp_path):
    geometry, _ = _write_inputs(tmp_path, list(STATE_BOXES))
    code = main(
        ["validate", "--geometry", str(geometry), "--labels", str(tmp_path / "none.yaml")]
    )
    assert code == 1
