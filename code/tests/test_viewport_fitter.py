import pytest

from SafetyRoute import CrimeRate, FootTraffic, Lighting, SafetyRoute
from ViewportFitter import Bounds, NoRoutesError, ViewportFitter, fit_viewport


def make_route(route_id, coords):
    return SafetyRoute(
        id=route_id,
        name=f"Route {route_id}",
        safety_score=3.0,
        foot_traffic=FootTraffic.MEDIUM,
        lighting=Lighting.FAIR,
        crime_rate=CrimeRate.MEDIUM,
        coordinates=tuple(coords),
    )


ROUTE_A = make_route(1, [(37.7749, -122.4194), (37.7748, -122.4080), (37.7666, -122.3982)])
ROUTE_B = make_route(2, [(37.7749, -122.4194), (37.7866, -122.3982)])


def test_two_point_route():
    b = fit_viewport([make_route(1, [(37.77, -122.42), (37.79, -122.40)])])
    assert b == Bounds(min_lat=37.77, max_lat=37.79, min_lon=-122.42, max_lon=-122.40)


def test_empty_raises():
    with pytest.raises(NoRoutesError):
        fit_viewport([])


def test_interior_points_count():
    # the southern-most point is in the middle of the path, not an endpoint
    r = make_route(1, [(37.77, -122.42), (37.70, -122.41), (37.79, -122.40)])
    b = fit_viewport([r])
    assert b.min_lat == 37.70
    assert all(b.contains(p) for p in r.coordinates)


def test_covers_all_routes():
    b = fit_viewport([ROUTE_A, ROUTE_B])
    assert b.min_lat == 37.7666
    assert b.max_lat == 37.7866
    assert b.min_lon == -122.4194
    assert b.max_lon == -122.3982
    for r in (ROUTE_A, ROUTE_B):
        assert all(b.contains(p) for p in r.coordinates)


def test_idempotent():
    assert fit_viewport([ROUTE_A, ROUTE_B]) == fit_viewport([ROUTE_A, ROUTE_B])


def test_leaflet_bounds_and_center():
    b = Bounds(min_lat=1.0, max_lat=3.0, min_lon=10.0, max_lon=20.0)
    assert b.as_leaflet() == [[1.0, 10.0], [3.0, 20.0]]
    assert b.center == (2.0, 15.0)


def test_padding_is_separate_from_geometry():
    fitter = ViewportFitter(padding=(50, 50))
    vp, changed = fitter.update([ROUTE_A])
    assert changed
    assert vp.padding == (50, 50)
    assert vp.bounds == fit_viewport([ROUTE_A])
    d = vp.to_dict()
    assert d["padding"] == [50, 50]
    assert d["minLat"] == 37.7666


def test_refit_only_when_route_set_changes():
    fitter = ViewportFitter()
    vp1, changed1 = fitter.update([ROUTE_A, ROUTE_B])
    vp2, changed2 = fitter.update([ROUTE_A, ROUTE_B])
    vp3, changed3 = fitter.update([ROUTE_B, ROUTE_A])  # same set, other order
    assert changed1 and not changed2 and not changed3
    assert vp1 is vp2 is vp3
    assert fitter.fit_count == 1

    vp4, changed4 = fitter.update([ROUTE_A])
    assert changed4
    assert vp4.bounds != vp1.bounds
    assert fitter.fit_count == 2


def test_failed_fit_keeps_previous_viewport():
    fitter = ViewportFitter()
    vp, _ = fitter.update([ROUTE_A])
    with pytest.raises(NoRoutesError):
        fitter.update([])
    assert fitter.viewport is vp
