"""
Event server for the route map UI.

HTTP
  GET /api/routes     route records with badge/line styles and walk estimates
  GET /api/viewport   bounds of all routes plus padding
  GET /map            rendered folium map, ?route_id= highlights a route
WebSocket /ws
  in:  {"type": "select_route", "route_id": 2} | {"type": "dismiss"} | {"type": "state"}
  out: {"type": "viewport", ...} | {"type": "alert", ...} | {"type": "error", ...}
"""
import asyncio
import contextlib
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from aiohttp import WSCloseCode, WSMsgType, web

import settings
from AlertClock import AsyncioScheduler
from AlertLifecycleManager import AlertLifecycleManager, AlertSelection
from SafetyAlert import SafetyAlert
from SafetyClassifier import (alert_style, classify_normalized, estimated_walk_minutes,
                              route_line_style, turn_count)
from SafetyRoute import RouteId, SafetyRoute
from ViewportFitter import NoRoutesError, ViewportFitter
from map_view import render_route_map
from ws_bus import publish_error, publish_nowait, pump

logger = logging.getLogger(__name__)


# -------------------------
# payloads
# -------------------------
def resolve_route_id(routes: Sequence[SafetyRoute], raw: Any) -> Optional[RouteId]:
    if raw is None:
        return None
    # True == 1 in Python, never let a JSON boolean pick a route
    if isinstance(raw, bool):
        raise KeyError(raw)
    for r in routes:
        if r.id == raw or str(r.id) == str(raw):
            return r.id
    raise KeyError(raw)


def route_summary(route: SafetyRoute, selected_route_id: Optional[RouteId] = None) -> Dict[str, Any]:
    rec = route.to_record()
    selected = route.id == selected_route_id
    rec["selected"] = selected
    rec["badge"] = classify_normalized(route.safety_score).to_dict()
    rec["line"] = route_line_style(route, selected)
    rec["estimatedMinutes"] = estimated_walk_minutes(route)
    rec["turns"] = turn_count(route)
    return rec


def alert_event(manager: AlertLifecycleManager) -> Dict[str, Any]:
    event = {"type": "alert"}
    event.update(manager.snapshot())
    alert = manager.get_current_alert()
    event["style"] = alert_style(alert.type) if alert is not None else None
    return event


# -------------------------
# http handlers
# -------------------------
async def handle_routes(request: web.Request) -> web.Response:
    routes = request.app["routes"]
    try:
        selected = resolve_route_id(routes, request.query.get("route_id"))
    except KeyError:
        return web.json_response({"error": "unknown route"}, status=404)
    return web.json_response({"routes": [route_summary(r, selected) for r in routes]})


async def handle_viewport(request: web.Request) -> web.Response:
    try:
        viewport, _ = request.app["viewport_fitter"].update(request.app["routes"])
    except NoRoutesError as e:
        return web.json_response({"error": str(e)}, status=404)
    return web.json_response(viewport.to_dict())


async def handle_map(request: web.Request) -> web.Response:
    routes = request.app["routes"]
    try:
        selected = resolve_route_id(routes, request.query.get("route_id"))
    except KeyError:
        return web.json_response({"error": "unknown route"}, status=404)
    try:
        viewport, _ = request.app["viewport_fitter"].update(routes)
    except NoRoutesError:
        viewport = None
    m = render_route_map(routes, selected, viewport)
    return web.Response(text=m.get_root().render(), content_type="text/html")


# -------------------------
# websocket
# -------------------------
def handle_message(manager: AlertLifecycleManager,
                   routes: Sequence[SafetyRoute],
                   q: asyncio.Queue,
                   raw: str) -> None:
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError:
        publish_error(q, "invalid json")
        return
    if not isinstance(msg, dict):
        publish_error(q, "message must be an object")
        return

    typ = msg.get("type")
    if typ == "select_route":
        try:
            route_id = resolve_route_id(routes, msg.get("route_id"))
        except KeyError:
            publish_error(q, "unknown route", route_id=msg.get("route_id"))
            return
        manager.on_route_context_changed(route_id)
    elif typ == "dismiss":
        manager.dismiss()
    elif typ == "state":
        publish_nowait(q, alert_event(manager))
    else:
        publish_error(q, "unknown message type", message_type=typ)


async def handle_ws(request: web.Request) -> web.WebSocketResponse:
    app = request.app
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    routes: List[SafetyRoute] = app["routes"]
    q: asyncio.Queue = asyncio.Queue(maxsize=app["queue_size"])
    manager = AlertLifecycleManager(
        app["alerts"],
        AsyncioScheduler(),
        selection=app["selection"],
        on_change=lambda m: publish_nowait(q, alert_event(m)),
    )
    sender = asyncio.create_task(pump(ws, q))
    app["connections"].add(ws)
    logger.info("websocket connected (%d open)", len(app["connections"]))

    try:
        try:
            viewport, _ = app["viewport_fitter"].update(routes)
            event = {"type": "viewport"}
            event.update(viewport.to_dict())
            publish_nowait(q, event)
        except NoRoutesError as e:
            publish_error(q, str(e))

        # first route is selected when the page opens
        manager.on_route_context_changed(routes[0].id if routes else None)

        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                handle_message(manager, routes, q, msg.data)
            elif msg.type == WSMsgType.ERROR:
                logger.warning("websocket closed with exception %s", ws.exception())
    finally:
        manager.close()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
        app["connections"].discard(ws)
        logger.info("websocket disconnected (%d open)", len(app["connections"]))

    return ws


async def close_connections(app: web.Application) -> None:
    for ws in set(app["connections"]):
        await ws.close(code=WSCloseCode.GOING_AWAY, message=b"server shutdown")


# -------------------------
# app
# -------------------------
def create_app(routes: Sequence[SafetyRoute],
               alerts: Sequence[SafetyAlert],
               selection: AlertSelection = AlertSelection.FIRST,
               padding=settings.VIEWPORT_PADDING,
               queue_size: int = settings.WS_QUEUE_SIZE) -> web.Application:
    app = web.Application()
    app["routes"] = list(routes)
    app["alerts"] = list(alerts)
    app["selection"] = selection
    app["viewport_fitter"] = ViewportFitter(padding=padding)
    app["queue_size"] = queue_size
    app["connections"] = set()

    app.router.add_get("/api/routes", handle_routes)
    app.router.add_get("/api/viewport", handle_viewport)
    app.router.add_get("/map", handle_map)
    app.router.add_get("/ws", handle_ws)
    app.on_shutdown.append(close_connections)
    return app


def run_server(routes: Sequence[SafetyRoute],
               alerts: Sequence[SafetyAlert],
               host: str = settings.SERVER_HOST,
               port: int = settings.SERVER_PORT,
               selection: AlertSelection = AlertSelection.FIRST) -> None:
    app = create_app(routes, alerts, selection=selection)
    logger.info("Serving %d routes and %d alerts on http://%s:%d", len(routes), len(alerts), host, port)
    web.run_app(app, host=host, port=port, print=None)
