"""Pytest configuration ensuring `src` and the repository root are on sys.path.

Allows `import grid_locator...`, `import api...` and `import main` without
installing the package. Also provides small synthetic layers around
Fayetteville, AR shared by the spatial, service and API tests.
"""
import sys
import os

import pytest

TESTS = os.path.abspath(os.path.dirname(__file__))
ROOT = os.path.abspath(os.path.join(TESTS, '..'))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT, TESTS):
    if path not in sys.path:
        sys.path.insert(0, path)

from grid_locator.spatial.geometry_set import load_layer  # noqa: E402
from grid_locator.services.assignment import LayerSet  # noqa: E402
from factories import FEEDER_ALIASES, box, collection, line_feature, point_feature, polygon_feature  # noqa: E402


@pytest.fixture
def grid_fc():
    # G1 holds QUERY; G2 north, G3 south, G4 east; G5 sits north-west, off every ray
    return collection(
        polygon_feature(box(-94.25, 35.95, -94.15, 36.05), Number_="G1"),
        polygon_feature(box(-94.25, 36.05, -94.15, 36.15), Number_="G2"),
        polygon_feature(box(-94.25, 35.85, -94.15, 35.95), Number_="G3"),
        polygon_feature(box(-94.15, 35.95, -94.05, 36.05), Number_="G4"),
        polygon_feature(box(-94.35, 36.06, -94.27, 36.12), Number_="G5"),
    )


@pytest.fixture
def grid_layer(grid_fc):
    return load_layer(grid_fc, name="Grids.geojson", role="grid", family="polygon")


@pytest.fixture
def grid_oot_layer():
    fc = collection(
        polygon_feature(box(-95.60, 37.60, -95.40, 37.70), Number_="OOT-7"),
        polygon_feature(box(-96.60, 38.60, -96.40, 38.70), Number_="OOT-9"),
    )
    return load_layer(fc, name="GridOOT.geojson", role="grid_oot", family="polygon")


@pytest.fixture
def zone_layer():
    fc = collection(
        polygon_feature(box(-94.50, 35.80, -93.90, 36.20), Substation="Zone-A"),
        polygon_feature(box(-93.90, 35.80, -93.50, 36.20), Substation="Zone-B"),
    )
    return load_layer(fc, name="Zones.geojson", role="substation", family="polygon")


@pytest.fixture
def feeder_polygon_layer():
    fc = collection(
        polygon_feature(box(-94.30, 35.90, -94.10, 36.10), FEEDER="F-101", Substation="Zone-A"),
        polygon_feature(box(-94.10, 35.90, -93.95, 36.10), Feeder_Code="F-102", Substation="Zone-A"),
    )
    return load_layer(fc, name="Feeders.geojson", role="feeder", family="polygon", aliases=FEEDER_ALIASES)


@pytest.fixture
def feeder_line_layer():
    fc = collection(
        line_feature([[-94.30, 36.00], [-94.10, 36.00]], FeederID="L-1", SUBSTATION="Zone-A"),
        line_feature([[-94.30, 36.20], [-94.10, 36.20]], FeederID="L-2", SUBSTATION="Zone-A"),
    )
    return load_layer(fc, name="FeederLines.geojson", role="feeder", family="line", aliases=FEEDER_ALIASES)


@pytest.fixture
def hut_layer():
    fc = collection(
        point_feature(-94.19, 36.00, stationID="HUT-1", Substation="Zone-A"),
        point_feature(-94.50, 36.30, stationID="HUT-2", Substation="Zone-B"),
    )
    return load_layer(fc, name="Huts.geojson", role="hut", family="point")


@pytest.fixture
def layers(grid_layer, grid_oot_layer, zone_layer, feeder_polygon_layer, hut_layer):
    return LayerSet(
        grid=grid_layer,
        grid_oot=grid_oot_layer,
        substation=zone_layer,
        feeder=feeder_polygon_layer,
        hut=hut_layer,
    )
