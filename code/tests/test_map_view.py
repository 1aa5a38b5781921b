import folium

import settings
from SafetyClassifier import GREEN, RED
from SafetyRoute import load_routes
from ViewportFitter import Bounds, Viewport
from map_view import render_route_map, route_tooltip, save_route_map


def bundled_routes():
    return load_routes(settings.DATA_DIR / "routes.json")


def test_render_colors_routes_by_safety():
    html = render_route_map(bundled_routes(), selected_route_id=1).get_root().render()
    assert GREEN in html
    assert RED in html
    assert "5, 5" in html  # unselected route is dashed
    assert "fitBounds" in html
    assert "origin-marker" in html
    assert "destination-marker" in html


def test_render_uses_given_viewport():
    vp = Viewport(bounds=Bounds(min_lat=1.5, max_lat=2.5, min_lon=3.5, max_lon=4.5), padding=(10, 10))
    html = render_route_map(bundled_routes(), viewport=vp).get_root().render()
    assert "1.5" in html and "4.5" in html


def test_render_without_routes_keeps_default_view():
    m = render_route_map([])
    assert isinstance(m, folium.Map)


def test_tooltip():
    route = bundled_routes()[1]
    text = route_tooltip(route)
    assert "Route B" in text
    assert "2.8/5" in text
    assert "Poor" in text


def test_save_route_map(tmp_path):
    out = tmp_path / "map.html"
    path = save_route_map(bundled_routes(), str(out), selected_route_id=2)
    assert path == str(out)
    assert "<html" in out.read_text(encoding="utf-8")
