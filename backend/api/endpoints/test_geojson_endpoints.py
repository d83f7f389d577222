from __future__ import annotations

import json

import pytest

from config import settings

POINT_COLLECTION = {
    "type": "FeatureCollection",
    "features": [
        {"type": "Feature", "properties": {"NOMBRE": "Pozo 1"}, "geometry": {"type": "Point", "coordinates": [-77.0, -12.0]}},
    ],
}


def _upload(client, payload, filename="Mi Capa!", upload_name="layer.geojson", content_type="application/geo+json", **fields):
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    data = {"filename": filename} if filename is not None else {}
    data.update({k: v for k, v in fields.items() if v is not None})
    return client.post(
        "/api/geojson/upload",
        files={"file": (upload_name, body, content_type)},
        data=data,
    )


def test_empty_storage_lists_nothing(client) -> None:
    response = client.get("/api/geojson/list")
    assert response.status_code == 200
    assert response.json() == {"layers": []}


def test_upload_then_list(client, storage_dir) -> None:
    response = _upload(client, POINT_COLLECTION, legendField="NOMBRE")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Layer uploaded successfully"
    assert body["warnings"] == []
    assert body["layer"] == {
        "id": "mi_capa",
        "name": "Mi Capa",
        "filename": "mi_capa.json",
        "url": "/geojson/mi_capa.json",
        "legendField": "NOMBRE",
    }
    assert json.loads((storage_dir / "mi_capa.json").read_text(encoding="utf-8")) == POINT_COLLECTION

    (listed,) = client.get("/api/geojson/list").json()["layers"]
    assert listed["id"] == "mi_capa"
    assert listed["legendField"] == "NOMBRE"
    assert listed["canDelete"] is True
    assert listed["isSystemLayer"] is False


def test_uploaded_layer_is_served_statically(client) -> None:
    _upload(client, POINT_COLLECTION)
    response = client.get("/geojson/mi_capa.json")
    assert response.status_code == 200
    assert response.json() == POINT_COLLECTION


def test_utm_upload_is_reprojected(client, storage_dir) -> None:
    payload = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [500000, 8600000]}},
        ],
    }
    response = _upload(client, payload, filename="utm", utmZone="18")
    assert response.status_code == 200

    saved = json.loads((storage_dir / "utm.json").read_text(encoding="utf-8"))
    lon, lat = saved["features"][0]["geometry"]["coordinates"]
    assert lon == pytest.approx(-75.0, abs=1e-6)
    assert -12.8 < lat < -12.5


def test_lat_lon_columns_rebuild_points(client, storage_dir) -> None:
    payload = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"LAT": "-12.05", "LON": "-77.03"}, "geometry": None},
            {"type": "Feature", "properties": {"LAT": "abc", "LON": "-77.03"}, "geometry": None},
        ],
    }
    response = _upload(client, payload, filename="puntos", latitudeField="LAT", longitudeField="LON")
    assert response.status_code == 200
    assert response.json()["warnings"] == [
        {"featureIndex": 1, "reason": "invalid coordinates", "latitude": "abc", "longitude": "-77.03"},
    ]

    saved = json.loads((storage_dir / "puntos.json").read_text(encoding="utf-8"))
    assert saved["features"][0]["geometry"] == {"type": "Point", "coordinates": [-77.03, -12.05]}
    assert saved["features"][1]["geometry"] is None


def test_topology_upload_is_stored_as_geojson(client, storage_dir) -> None:
    topology = {
        "type": "Topology",
        "objects": {"lote": {"type": "Polygon", "properties": {"lote": "X"}, "arcs": [[0]]}},
        "arcs": [[[0, 0], [1, 0], [1, 1], [0, 0]]],
    }
    response = _upload(client, topology, filename="lotes", upload_name="lotes.topojson", content_type="application/octet-stream")
    assert response.status_code == 200

    saved = json.loads((storage_dir / "lotes.json").read_text(encoding="utf-8"))
    assert saved["type"] == "FeatureCollection"
    assert saved["features"][0]["properties"] == {"lote": "X"}


def test_name_collision_gets_suffix(client) -> None:
    first = _upload(client, POINT_COLLECTION).json()["layer"]
    second = _upload(client, POINT_COLLECTION).json()["layer"]
    assert first["id"] == "mi_capa"
    assert second["id"] == "mi_capa_1"
    assert second["filename"] == "mi_capa_1.json"


def test_invalid_type_rejected(client, storage_dir) -> None:
    response = _upload(client, {"type": "Shapefile"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "FeatureCollection" in body["error"]
    assert list(storage_dir.iterdir()) == []


def test_invalid_zone_rejected(client, storage_dir) -> None:
    response = _upload(client, POINT_COLLECTION, utmZone="42")
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert list(storage_dir.iterdir()) == []


def test_malformed_json_rejected(client) -> None:
    response = _upload(client, b"{not json")
    assert response.status_code == 400
    assert "valid JSON" in response.json()["error"]


def test_unsupported_file_type_rejected(client) -> None:
    response = _upload(client, POINT_COLLECTION, upload_name="lotes.shp", content_type="application/octet-stream")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_missing_filename_rejected(client) -> None:
    response = _upload(client, POINT_COLLECTION, filename=None)
    assert response.status_code == 400
    assert response.json()["error"] == "File name is required"


def test_name_that_sanitizes_to_nothing_rejected(client) -> None:
    response = _upload(client, POINT_COLLECTION, filename="!!!")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_missing_file_rejected(client) -> None:
    response = client.post("/api/geojson/upload", data={"filename": "capa"})
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_oversized_upload_rejected(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "LAYERS_MAX_UPLOAD_BYTES", 64)
    response = _upload(client, POINT_COLLECTION)
    assert response.status_code == 413
    assert response.json()["success"] is False


def test_delete_user_layer(client, storage_dir) -> None:
    _upload(client, POINT_COLLECTION, legendField="NOMBRE")

    response = client.delete("/api/geojson/delete/mi_capa")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Layer deleted successfully",
        "deletedLayer": "mi_capa",
    }
    assert not (storage_dir / "mi_capa.json").exists()
    assert not (storage_dir / "mi_capa.meta").exists()
    assert client.get("/api/geojson/list").json() == {"layers": []}


def test_delete_system_layer_forbidden(client, storage_dir) -> None:
    (storage_dir / "Lotes Nacional.geojson").write_text(json.dumps(POINT_COLLECTION), encoding="utf-8")

    (listed,) = client.get("/api/geojson/list").json()["layers"]
    assert listed["isSystemLayer"] is True
    assert listed["canDelete"] is False

    response = client.delete("/api/geojson/delete/Lotes Nacional")
    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "System layers cannot be deleted"}
    assert (storage_dir / "Lotes Nacional.geojson").exists()


def test_delete_unknown_layer(client) -> None:
    response = client.delete("/api/geojson/delete/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Layer not found"}


def test_delete_rejects_path_traversal(client) -> None:
    response = client.delete("/api/geojson/delete/a..b")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_health_reports_storage(client, storage_dir) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["storage"]["exists"] is True


def test_malformed_topology_member_is_a_client_error(client, storage_dir) -> None:
    topology = {
        "type": "Topology",
        "objects": {"o": {"type": "GeometryCollection", "geometries": [{"type": "GeometryCollection", "geometries": [5]}]}},
        "arcs": [],
    }
    response = _upload(client, topology, filename="rota", upload_name="rota.topojson")
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert list(storage_dir.iterdir()) == []
