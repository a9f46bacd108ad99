import pytest

np = pytest.importorskip("numpy")

from grid_locator.spatial.distance import (
    EARTH_RADIUS_MI,
    as_lon_lat,
    bearing_to_cardinal,
    closest_on_segments,
    haversine_miles,
    haversine_miles_many,
    initial_bearing,
    segment_distances_miles,
)

MILES_PER_DEG_LAT = EARTH_RADIUS_MI * np.pi / 180.0


def test_one_degree_of_latitude():
    assert haversine_miles(-94.0, 36.0, -94.0, 37.0) == pytest.approx(69.09, abs=0.01)
    assert MILES_PER_DEG_LAT == pytest.approx(69.093, abs=0.001)


def test_zero_and_symmetric():
    assert haversine_miles(-94.2, 36.0, -94.2, 36.0) == 0.0
    a = haversine_miles(-94.2, 36.0, -93.1, 35.4)
    b = haversine_miles(-93.1, 35.4, -94.2, 36.0)
    assert a == pytest.approx(b, abs=1e-9)


def test_vectorised_matches_scalar():
    lons = np.array([-94.1, -93.0, -94.2])
    lats = np.array([36.0, 35.0, 36.5])
    many = haversine_miles_many(-94.2, 36.0, lons, lats)
    for i in range(3):
        assert many[i] == pytest.approx(haversine_miles(-94.2, 36.0, lons[i], lats[i]))


def test_closest_point_clamps_to_segment_ends():
    starts = np.array([[-94.3, 36.0], [-94.1, 36.1]])
    ends = np.array([[-94.1, 36.0], [-94.0, 36.1]])
    nearest = closest_on_segments(-94.2, 36.05, starts, ends)
    # Perpendicular foot on the first segment
    assert list(nearest[0]) == pytest.approx([-94.2, 36.0])
    # The second segment lies entirely east; its west end is closest
    assert list(nearest[1]) == pytest.approx([-94.1, 36.1])


def test_degenerate_segment_is_its_start_point():
    starts = np.array([[-94.1, 36.0]])
    nearest = closest_on_segments(-94.2, 36.0, starts, starts.copy())
    assert list(nearest[0]) == pytest.approx([-94.1, 36.0])


def test_segment_distances():
    starts = np.array([[-94.3, 36.0]])
    ends = np.array([[-94.1, 36.0]])
    miles = segment_distances_miles(-94.2, 36.05, starts, ends)
    assert miles[0] == pytest.approx(0.05 * MILES_PER_DEG_LAT, rel=1e-6)
    assert len(segment_distances_miles(-94.2, 36.0, np.empty((0, 2)), np.empty((0, 2)))) == 0


def test_initial_bearing():
    assert initial_bearing(-94.0, 36.0, -94.0, 37.0) == pytest.approx(0.0)
    assert initial_bearing(-94.0, 36.0, -94.0, 35.0) == pytest.approx(180.0)
    assert initial_bearing(-94.0, 36.0, -93.0, 36.0) == pytest.approx(90.0, abs=0.5)
    assert initial_bearing(-94.0, 36.0, -95.0, 36.0) == pytest.approx(-90.0, abs=0.5)


@pytest.mark.parametrize("bearing,label", [
    (0.0, "N"),
    (22.4, "N"),
    (22.5, "NE"),
    (90.0, "E"),
    (135.0, "SE"),
    (-180.0, "S"),
    (-135.0, "SW"),
    (-90.0, "W"),
    (-45.0, "NW"),
    (350.0, "N"),
    (720.0, "N"),
])
def test_bearing_to_cardinal(bearing, label):
    assert bearing_to_cardinal(bearing) == label


def test_as_lon_lat_accepts_points_and_pairs():
    shapely_geometry = pytest.importorskip("shapely.geometry")
    assert as_lon_lat(shapely_geometry.Point(-94.2, 36.0)) == (-94.2, 36.0)
    assert as_lon_lat((-94.2, 36)) == (-94.2, 36.0)
