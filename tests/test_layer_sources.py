import json

import pytest

geopandas = pytest.importorskip("geopandas")
requests = pytest.importorskip("requests")

from grid_locator.auth.config import Settings
from grid_locator.ingestion import layer_sources
from grid_locator.ingestion.layer_sources import (
    LayerSourceError,
    feeder_aliases,
    load_configured_layers,
    load_layer_source,
    read_feature_collection,
    role_sources,
)
from factories import box, collection, line_feature, point_feature, polygon_feature

NO_SOURCES = dict(
    GRIDS_SOURCE=None,
    GRID_OOT_SOURCE=None,
    SUBSTATIONS_SOURCE=None,
    FEEDERS_SOURCE=None,
    HUTS_SOURCE=None,
)


def _write(path, doc):
    path.write_text(json.dumps(doc), encoding="utf-8")
    return str(path)


@pytest.fixture
def grids_file(tmp_path):
    return _write(tmp_path / "Grids.geojson", collection(
        polygon_feature(box(-94.25, 35.95, -94.15, 36.05), Number_="G1"),
    ))


class FakeResponse:
    def __init__(self, payload=None, status=200, text=None):
        self._payload = payload
        self.status_code = status
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


def test_read_local_file(grids_file):
    doc = read_feature_collection(grids_file)
    assert doc["type"] == "FeatureCollection"


def test_missing_file(tmp_path):
    with pytest.raises(LayerSourceError):
        read_feature_collection(str(tmp_path / "nope.geojson"))


def test_invalid_json_file(tmp_path):
    path = tmp_path / "bad.geojson"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LayerSourceError, match="not valid JSON"):
        read_feature_collection(str(path))


def test_read_url(monkeypatch):
    calls = {}

    def fake_get(url, timeout=None, headers=None):
        calls["url"] = url
        calls["timeout"] = timeout
        return FakeResponse(collection(point_feature(-94.0, 36.0)))

    monkeypatch.setattr(layer_sources.requests, "get", fake_get)
    doc = read_feature_collection("https://example.org/Huts.geojson")
    assert len(doc["features"]) == 1
    assert calls == {"url": "https://example.org/Huts.geojson", "timeout": layer_sources.REQUEST_TIMEOUT_S}


def test_url_http_error(monkeypatch):
    monkeypatch.setattr(layer_sources.requests, "get", lambda url, **kw: FakeResponse(status=500))
    with pytest.raises(LayerSourceError, match="500"):
        read_feature_collection("https://example.org/Grids.geojson")


def test_url_bad_json(monkeypatch):
    monkeypatch.setattr(layer_sources.requests, "get", lambda url, **kw: FakeResponse(text="<html>"))
    with pytest.raises(LayerSourceError, match="not valid JSON"):
        read_feature_collection("https://example.org/Grids.geojson")


def test_url_connection_error(monkeypatch):
    def refuse(url, **kw):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(layer_sources.requests, "get", refuse)
    with pytest.raises(LayerSourceError, match="connection refused"):
        read_feature_collection("http://localhost:1/Grids.geojson")


def test_load_layer_source_names_layer_after_file(grids_file):
    layer = load_layer_source(grids_file, "grid", "polygon")
    assert layer.name == "Grids.geojson"
    assert layer.role == "grid"
    assert len(layer) == 1


def test_role_sources_follow_geometry_settings():
    sources = role_sources(Settings(SUBSTATION_GEOMETRY="point", FEEDER_GEOMETRY="line", **NO_SOURCES))
    assert sources["substation"][1] == "point"
    assert sources["feeder"][1] == "line"
    assert sources["grid"][1] == "polygon"
    assert sources["hut"][1] == "point"


def test_feeder_aliases_put_preferred_field_first():
    aliases = feeder_aliases(Settings(FEEDER_CODE_FIELD="Circuit", **NO_SOURCES))
    assert aliases["feeder_code"][0] == "Circuit"
    assert "FEEDER" in aliases["feeder_code"]
    assert aliases["feeder_substation"][0] == "Substation"


def test_load_configured_layers(tmp_path, grids_file):
    feeders = _write(tmp_path / "Feeders.geojson", collection(
        line_feature([[-94.3, 36.0], [-94.1, 36.0]], FeederID="L-1"),
    ))
    settings = Settings(**{**NO_SOURCES, "GRIDS_SOURCE": grids_file, "FEEDERS_SOURCE": feeders}, FEEDER_GEOMETRY="line")
    layers, errors = load_configured_layers(settings)
    assert errors == {}
    assert len(layers.grid) == 1
    assert layers.feeder.family == "line"
    assert layers.feeder.features[0].get("feeder_code") == "L-1"
    assert layers.hut is None
    assert layers.grid_oot is None


def test_failed_role_is_missing_and_reported(tmp_path, grids_file):
    huts = _write(tmp_path / "Huts.geojson", collection(polygon_feature(box(-94.1, 36.0, -94.0, 36.1))))
    settings = Settings(**{**NO_SOURCES, "GRIDS_SOURCE": grids_file, "HUTS_SOURCE": huts,
                           "SUBSTATIONS_SOURCE": str(tmp_path / "missing.geojson")})
    layers, errors = load_configured_layers(settings)
    assert layers.grid is not None
    assert layers.hut is None
    assert layers.substation is None
    assert set(errors) == {"hut", "substation"}
    assert "expected point" in errors["hut"]


def test_overrides_replace_configured_sources(tmp_path, grids_file):
    settings = Settings(**{**NO_SOURCES, "GRIDS_SOURCE": str(tmp_path / "missing.geojson")})
    layers, errors = load_configured_layers(settings, {"grid": grids_file, "hut": None})
    assert errors == {}
    assert layers.grid.name == "Grids.geojson"
