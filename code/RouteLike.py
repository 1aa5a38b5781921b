from typing import Protocol, Sequence, Tuple

LatLon = Tuple[float, float]


class RouteLike(Protocol):
    coordinates: Sequence[LatLon]
