from __future__ import annotations

from typing import Sequence

import pytest
from shapely.geometry import box

from usmap.geometry import GeometryStore, Subdivision
from usmap.labels import MapLabels

# Rough lon/lat rectangles; enough to exercise projection routing and layout.
STATE_BOXES = {
    "California": (-124.0, 33.0, -117.0, 41.0),
    "Texas": (-104.0, 28.0, -96.0, 34.0),
    "Oklahoma": (-103.0, 34.0, -95.0, 37.0),
    "Florida": (-87.0, 25.0, -80.0, 31.0),
    "Maine": (-71.0, 43.0, -67.0, 47.0),
    "Vermont": (-73.4, 42.7, -71.5, 45.0),
    "District of Columbia": (-77.1, 38.8, -76.9, 39.0),
    "Alaska": (-165.0, 55.0, -141.0, 70.0),
    "Hawaii": (-160.0, 19.0, -155.0, 22.3),
}


def make_store(names: Sequence[str] | None = None) -> GeometryStore:
    selected = names if names is not None else list(STATE_BOXES)
    return GeometryStore(
        Subdivision(name=name, geometry=box(*STATE_BOXES[name])) for name in selected
    )


def adjustment_row(name: str, idx: int) -> dict:
    return {
        "state": name,
        "label_adj_x": idx,
        "label_adj_y": -idx,
        "mobile_label_adj_x": 2 * idx,
        "mobile_label_adj_y": 3,
    }


def make_labels(
    offshore: Sequence[tuple[str, str]],
    *,
    adjusted: Sequence[str] | None = None,
) -> MapLabels:
    names = adjusted if adjusted is not None else list(STATE_BOXES)
    return MapLabels.from_mapping(
        {
            "adjustments": [adjustment_row(name, idx) for idx, name in enumerate(names)],
            "offshore": [{"state": name, "region": region} for name, region in offshore],
        }
    )


@pytest.fixture
def store() -> GeometryStore:
    return make_store()


@pytest.fixture
def labels() -> MapLabels:
    return make_labels(
        [
            ("Alaska", "right"),
            ("Hawaii", "right"),
            ("District of Columbia", "top"),
            ("Vermont", "top"),
        ]
    )


@pytest.fixture
def scenario_labels() -> MapLabels:
    return make_labels(
        [
            ("Alaska", "right"),
            ("Hawaii", "right"),
            ("District of Columbia", "top"),
        ]
    )
