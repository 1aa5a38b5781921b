import logging
from typing import List, Optional, Sequence

import folium

import settings
from SafetyClassifier import route_line_style
from SafetyRoute import RouteId, SafetyRoute
from ViewportFitter import NoRoutesError, Viewport, ViewportFitter

logger = logging.getLogger(__name__)

_PIN_HTML = (
    '<div style="display:flex;align-items:center;justify-content:center;width:24px;height:24px;'
    'background:{bg};color:#fff;font-size:12px;font-weight:bold;border-radius:50%;'
    'border:2px solid #fff">{text}</div>'
)


def _pin(text: str, bg: str, class_name: str) -> folium.DivIcon:
    return folium.DivIcon(
        html=_PIN_HTML.format(bg=bg, text=text),
        icon_size=(24, 24),
        icon_anchor=(12, 12),
        class_name=class_name,
    )


def route_tooltip(route: SafetyRoute) -> str:
    return (
        f"<strong>{route.name}</strong>"
        f"<div>Safety Score: {route.safety_score}/5</div>"
        f"<div>Foot Traffic: {route.foot_traffic.value}</div>"
        f"<div>Lighting: {route.lighting.value}</div>"
    )


def add_route(m: folium.Map, route: SafetyRoute, selected: bool) -> folium.PolyLine:
    style = route_line_style(route, selected)
    line = folium.PolyLine(
        [list(p) for p in route.coordinates],
        color=style["color"],
        weight=style["weight"],
        opacity=style["opacity"],
        dash_array=style["dash_array"],
        tooltip=folium.Tooltip(route_tooltip(route), sticky=True),
    )
    line.add_to(m)
    return line


def add_endpoints(m: folium.Map, route: SafetyRoute) -> None:
    # all candidate routes share origin and destination
    folium.Marker(
        list(route.origin),
        tooltip=folium.Tooltip("Start", permanent=True),
        icon=_pin("S", "#2563eb", "origin-marker"),
    ).add_to(m)
    folium.Marker(
        list(route.destination),
        tooltip=folium.Tooltip("End", permanent=True),
        icon=_pin("D", "#dc2626", "destination-marker"),
    ).add_to(m)


def render_route_map(routes: Sequence[SafetyRoute],
                     selected_route_id: Optional[RouteId] = None,
                     viewport: Optional[Viewport] = None) -> folium.Map:
    m = folium.Map(
        location=list(settings.DEFAULT_CENTER),
        zoom_start=settings.MAP_ZOOM_START,
        tiles=settings.MAP_TILES,
        zoom_control=False,
    )

    # draw the selected route last so it sits on top
    ordered: List[SafetyRoute] = sorted(routes, key=lambda r: r.id == selected_route_id)
    for route in ordered:
        add_route(m, route, selected=route.id == selected_route_id)

    if routes:
        add_endpoints(m, routes[0])

    if viewport is None:
        try:
            viewport, _ = ViewportFitter(padding=settings.VIEWPORT_PADDING).update(routes)
        except NoRoutesError:
            logger.warning("No routes to frame, keeping default map center")
    if viewport is not None:
        m.fit_bounds(viewport.bounds.as_leaflet(), padding=viewport.padding)

    return m


def save_route_map(routes: Sequence[SafetyRoute],
                   path: str = settings.MAP_FILE,
                   selected_route_id: Optional[RouteId] = None) -> str:
    m = render_route_map(routes, selected_route_id)
    m.save(path)
    logger.info("Map with %d routes written to %s", len(routes), path)
    return path
