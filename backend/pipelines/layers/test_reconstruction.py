from __future__ import annotations

import pytest

from pipelines.layers.reconstruction import (
    PointGeometryReconstructor,
    ReconstructionWarning,
    parse_coordinate,
    reconstruct_points,
)


def _feature(properties, geometry=None):
    return {"type": "Feature", "properties": properties, "geometry": geometry}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("-12.05", -12.05),
        (" -77.03 ", -77.03),
        (5, 5.0),
        (1.5, 1.5),
        ("1e2", 100.0),
        ("-12.05°", -12.05),
        ("-77.03 W", -77.03),
        ("12abc", 12.0),
        ("1_000", 1.0),
        ("+.5", 0.5),
        ("3e", 3.0),
        ("1,5", 1.0),
    ],
)
def test_parse_coordinate_accepts_numbers(value, expected) -> None:
    assert parse_coordinate(value) == expected


@pytest.mark.parametrize("value", ["abc", "", None, True, "nan", "inf", "Infinity", "-Infinity", "W 77", "°12", float("nan"), [1], {"v": 1}])
def test_parse_coordinate_rejects_non_finite_or_non_numeric(value) -> None:
    assert parse_coordinate(value) is None


def test_string_columns_become_point_geometry() -> None:
    collection = {
        "type": "FeatureCollection",
        "features": [_feature({"LAT": "-12.05", "LON": "-77.03", "name": "Lima"})],
    }
    result, warnings = reconstruct_points(collection, "LAT", "LON")

    assert warnings == []
    feature = result["features"][0]
    assert feature["geometry"] == {"type": "Point", "coordinates": [-77.03, -12.05]}
    assert feature["properties"]["name"] == "Lima"


def test_existing_geometry_is_replaced() -> None:
    feature = _feature({"lat": -5, "lon": -80}, {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [0, 0]]]})
    result, warnings = PointGeometryReconstructor("lat", "lon").reconstruct(feature)
    assert warnings == []
    assert result["geometry"] == {"type": "Point", "coordinates": [-80.0, -5.0]}


def test_bad_rows_are_reported_not_fatal() -> None:
    collection = {
        "type": "FeatureCollection",
        "features": [
            _feature({"LAT": "abc", "LON": "-77"}),
            _feature({"LAT": "95", "LON": "-77"}),
            {"type": "Feature", "geometry": None},
            _feature({"LAT": "-12", "LON": "-77"}),
        ],
    }
    result, warnings = reconstruct_points(collection, "LAT", "LON")

    assert [w.feature_index for w in warnings] == [0, 1, 2]
    assert [w.reason for w in warnings] == [
        "invalid coordinates",
        "coordinates out of range",
        "feature has no properties",
    ]
    assert warnings[0].latitude == "abc"
    # skipped rows keep their original geometry
    assert result["features"][0]["geometry"] is None
    assert result["features"][1]["geometry"] is None
    assert result["features"][3]["geometry"] == {"type": "Point", "coordinates": [-77.0, -12.0]}


def test_missing_column_is_invalid() -> None:
    _, warnings = reconstruct_points(_feature({"LAT": "-12"}), "LAT", "LON")
    assert len(warnings) == 1
    assert warnings[0].reason == "invalid coordinates"
    assert warnings[0].longitude is None


def test_topology_input_decoded_first() -> None:
    topology = {
        "type": "Topology",
        "objects": {"rows": {"type": "GeometryCollection", "geometries": [
            {"type": None, "properties": {"y": "-9.5", "x": "-75.2"}},
        ]}},
        "arcs": [],
    }
    result, warnings = reconstruct_points(topology, "y", "x")
    assert warnings == []
    assert result["type"] == "FeatureCollection"
    assert result["features"][0]["geometry"]["coordinates"] == [-75.2, -9.5]


def test_geometry_inputs_unchanged() -> None:
    geometry = {"type": "Point", "coordinates": [1, 2]}
    result, warnings = reconstruct_points(geometry, "LAT", "LON")
    assert result is geometry
    assert warnings == []


def test_warning_serializes_camel_case() -> None:
    warning = ReconstructionWarning(3, "invalid coordinates", "x", "-77")
    assert warning.to_dict() == {
        "featureIndex": 3,
        "reason": "invalid coordinates",
        "latitude": "x",
        "longitude": "-77",
    }


def test_reconstruction_is_repeatable() -> None:
    feature = _feature({"LAT": "-12.05", "LON": "-77.03"})
    once, _ = reconstruct_points(feature, "LAT", "LON")
    twice, _ = reconstruct_points(once, "LAT", "LON")
    assert once["geometry"] == twice["geometry"]


def test_columns_with_units_are_reconstructed() -> None:
    feature = _feature({"LAT": "-12.05°", "LON": "-77.03 W"})
    result, warnings = reconstruct_points(feature, "LAT", "LON")
    assert warnings == []
    assert result["geometry"] == {"type": "Point", "coordinates": [-77.03, -12.05]}
