import pytest

geopandas = pytest.importorskip("geopandas")

from grid_locator.spatial import directional_neighbors, load_layer
from grid_locator.spatial.distance import EARTH_RADIUS_MI
from grid_locator.spatial.neighbors import DIRECTIONS, EPS, cardinal_rays, half_plane_tests
from factories import QUERY, FAR_AWAY, box, collection, point_feature, polygon_feature

MILES_PER_DEG_LAT = EARTH_RADIUS_MI * 3.141592653589793 / 180.0


def _codes(found):
    return {d: (m.feature.get("Number_") if m is not None else None) for d, m in found.items()}


def test_rays_hit_adjacent_grids(grid_layer):
    found = directional_neighbors(QUERY, grid_layer)
    assert set(found) == set(DIRECTIONS)
    assert _codes(found) == {"N": "G2", "S": "G3", "E": "G4", "W": "G5"}
    assert found["N"].distance_miles == pytest.approx(0.05 * MILES_PER_DEG_LAT, rel=1e-4)
    assert found["S"].distance_miles == pytest.approx(0.05 * MILES_PER_DEG_LAT, rel=1e-4)
    assert found["E"].distance_miles == pytest.approx(2.795, abs=0.01)
    assert not found["N"].via_fallback
    assert not found["E"].via_fallback


def test_west_falls_back_to_centroid_half_plane(grid_layer):
    # Nothing lies on the west ray; G5's centroid is west of the point
    west = directional_neighbors(QUERY, grid_layer)["W"]
    assert west.feature.get("Number_") == "G5"
    assert west.via_fallback
    assert west.distance_miles == pytest.approx(5.70, abs=0.02)


def test_containing_grid_is_never_a_neighbour(grid_layer):
    found = directional_neighbors(QUERY, grid_layer)
    assert "G1" not in _codes(found).values()


def test_two_grid_example():
    layer = load_layer(collection(
        polygon_feature(box(-94.25, 35.95, -94.15, 36.05), Number_="G1"),
        polygon_feature(box(-94.25, 36.05, -94.15, 36.15), Number_="G2"),
    ), family="polygon")
    found = directional_neighbors(QUERY, layer)
    assert found["N"].feature.get("Number_") == "G2"
    assert found["N"].distance_miles > 0
    assert found["S"] is None
    assert found["E"] is None
    assert found["W"] is None


def test_outside_all_grids_uses_fallback_only(grid_layer):
    found = directional_neighbors(FAR_AWAY, grid_layer)
    assert found["N"] is None
    assert found["W"] is None
    assert found["S"].via_fallback and found["E"].via_fallback
    assert found["S"].feature.get("Number_") == "G5"
    assert found["E"].feature is found["S"].feature


def test_nearest_crossing_wins_along_a_ray():
    layer = load_layer(collection(
        polygon_feature(box(-94.25, 36.30, -94.15, 36.40), Number_="far"),
        polygon_feature(box(-94.25, 36.10, -94.15, 36.20), Number_="near"),
    ), family="polygon")
    assert directional_neighbors(QUERY, layer)["N"].feature.get("Number_") == "near"


def test_equal_distance_goes_to_first_polygon():
    # Both polygons share their southern edge; the first listed wins
    layer = load_layer(collection(
        polygon_feature(box(-94.25, 36.10, -94.20, 36.20), Number_="left"),
        polygon_feature(box(-94.20, 36.10, -94.15, 36.20), Number_="right"),
    ), family="polygon")
    assert directional_neighbors(QUERY, layer)["N"].feature.get("Number_") == "left"


def test_rays_start_just_off_the_point():
    rays = cardinal_rays(-94.2, 36.0)
    assert rays["N"].coords[0] == (-94.2, 36.0 + EPS)
    assert rays["W"].coords[-1] == pytest.approx((-97.2, 36.0))
    tests = half_plane_tests(-94.2, 36.0)
    assert tests["N"](-94.2, 36.1)
    assert not tests["N"](-94.2, 36.0)
    assert tests["W"](-94.3, 36.0)


def test_absent_or_point_layer_yields_no_neighbours(hut_layer):
    assert directional_neighbors(QUERY, None) == {d: None for d in DIRECTIONS}
    assert directional_neighbors(QUERY, hut_layer) == {d: None for d in DIRECTIONS}
    lone = load_layer(collection(point_feature(-94.0, 36.0)))
    assert directional_neighbors(QUERY, lone) == {d: None for d in DIRECTIONS}
