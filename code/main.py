import argparse
import logging
import webbrowser
from pathlib import Path

import settings
from AlertLifecycleManager import AlertSelection
from SafetyAlert import load_alerts
from SafetyRoute import load_routes
from map_view import save_route_map
from safety_server import resolve_route_id, run_server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Route safety map and alert server")
    parser.add_argument("--routes", default=str(settings.ROUTES_FILE), help="route records (JSON)")
    parser.add_argument("--alerts", default=str(settings.ALERTS_FILE), help="alert records (JSON)")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="write the route map as HTML")
    render.add_argument("--out", default=settings.MAP_FILE)
    render.add_argument("--route-id", default=None, help="highlight this route")
    render.add_argument("--open", action="store_true", help="open the map in a browser")

    serve = sub.add_parser("serve", help="run the map/alert event server")
    serve.add_argument("--host", default=settings.SERVER_HOST)
    serve.add_argument("--port", type=int, default=settings.SERVER_PORT)
    serve.add_argument("--selection", choices=[s.value for s in AlertSelection],
                       default=settings.ALERT_SELECTION)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # argparse does not check defaults against choices
    if args.command == "serve" and args.selection not in {s.value for s in AlertSelection}:
        parser.error(f"invalid alert selection {args.selection!r}")
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    routes = load_routes(args.routes)

    if args.command == "render":
        try:
            selected = resolve_route_id(routes, args.route_id)
        except KeyError:
            parser.error(f"unknown route id {args.route_id}")
        path = save_route_map(routes, args.out, selected_route_id=selected)
        if args.open:
            webbrowser.open(Path(path).resolve().as_uri())
        return 0

    alerts = load_alerts(args.alerts)
    run_server(routes, alerts, host=args.host, port=args.port,
               selection=AlertSelection(args.selection))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
