from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from RouteLike import LatLon, RouteLike

logger = logging.getLogger(__name__)

Padding = Tuple[int, int]  # (x, y) in screen pixels


class NoRoutesError(ValueError):
    pass


@dataclass(frozen=True)
class Bounds:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def center(self) -> LatLon:
        return ((self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2)

    def contains(self, point: LatLon) -> bool:
        lat, lon = point
        return self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon

    def as_leaflet(self) -> List[List[float]]:
        # [[south, west], [north, east]]
        return [[self.min_lat, self.min_lon], [self.max_lat, self.max_lon]]

    def to_dict(self):
        return {
            "minLat": self.min_lat,
            "maxLat": self.max_lat,
            "minLon": self.min_lon,
            "maxLon": self.max_lon,
        }


@dataclass(frozen=True)
class Viewport:
    """Tight bounds plus the screen padding the renderer should apply around them."""
    bounds: Bounds
    padding: Padding

    def to_dict(self):
        d = self.bounds.to_dict()
        d["padding"] = list(self.padding)
        return d


def fit_viewport(routes: Iterable[RouteLike]) -> Bounds:
    min_lat = min_lon = float("inf")
    max_lat = max_lon = float("-inf")
    n_points = 0

    for route in routes:
        for lat, lon in route.coordinates:
            min_lat = min(min_lat, lat)
            max_lat = max(max_lat, lat)
            min_lon = min(min_lon, lon)
            max_lon = max(max_lon, lon)
            n_points += 1

    if n_points == 0:
        raise NoRoutesError("cannot fit a viewport without route coordinates")

    return Bounds(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)


def _route_set_key(routes: Sequence[RouteLike]) -> FrozenSet:
    return frozenset(
        (getattr(r, "id", i), tuple(map(tuple, r.coordinates))) for i, r in enumerate(routes)
    )


class ViewportFitter:
    """
    Keeps the viewport for the currently displayed route set.
    Only a different set of routes causes a refit; selecting a route does not.
    """

    def __init__(self, padding: Padding = (50, 50)):
        self.padding = padding
        self._key: Optional[FrozenSet] = None
        self._viewport: Optional[Viewport] = None
        self.fit_count = 0

    @property
    def viewport(self) -> Optional[Viewport]:
        return self._viewport

    def update(self, routes: Sequence[RouteLike]) -> Tuple[Viewport, bool]:
        """Returns (viewport, changed)."""
        routes = list(routes)
        key = _route_set_key(routes)
        if self._viewport is not None and key == self._key:
            return self._viewport, False

        bounds = fit_viewport(routes)
        self._key = key
        self._viewport = Viewport(bounds=bounds, padding=self.padding)
        self.fit_count += 1
        logger.debug("Viewport refit for %d routes: %s", len(routes), bounds)
        return self._viewport, True
