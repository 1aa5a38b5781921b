from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]  # (lat, lon)
RouteId = Union[int, str]


class FootTraffic(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Lighting(Enum):
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"


class CrimeRate(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class SafetyRoute:
    """
    A pre-computed walking route with its safety attributes.
    coordinates: polyline points, origin first and destination last
    safety_score: 0..5, higher is safer
    """
    id: RouteId
    name: str
    safety_score: float
    foot_traffic: FootTraffic
    lighting: Lighting
    crime_rate: CrimeRate
    coordinates: Tuple[LatLon, ...]

    def __post_init__(self):
        if len(self.coordinates) < 2:
            raise ValueError(f"route {self.id!r} needs at least 2 coordinates, got {len(self.coordinates)}")
        if math.isnan(self.safety_score) or not 0.0 <= self.safety_score <= 5.0:
            raise ValueError(f"route {self.id!r} safety score {self.safety_score!r} outside [0, 5]")
        for lat, lon in self.coordinates:
            if not (math.isfinite(lat) and math.isfinite(lon)):
                raise ValueError(f"route {self.id!r} has non-finite coordinate ({lat}, {lon})")

    @property
    def origin(self) -> LatLon:
        return self.coordinates[0]

    @property
    def destination(self) -> LatLon:
        return self.coordinates[-1]

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "safetyScore": self.safety_score,
            "footTraffic": self.foot_traffic.value,
            "lighting": self.lighting.value,
            "crimeRate": self.crime_rate.value,
            "coordinates": [[lat, lon] for lat, lon in self.coordinates],
        }


# -------------------------
# record loading
# -------------------------
def route_from_record(rec: Dict[str, Any]) -> SafetyRoute:
    try:
        coords = tuple((float(lat), float(lon)) for lat, lon in rec["coordinates"])
        return SafetyRoute(
            id=rec["id"],
            name=rec["name"],
            safety_score=float(rec["safetyScore"]),
            foot_traffic=FootTraffic(rec["footTraffic"]),
            lighting=Lighting(rec["lighting"]),
            crime_rate=CrimeRate(rec["crimeRate"]),
            coordinates=coords,
        )
    except KeyError as e:
        raise ValueError(f"route record missing field {e}") from e
    except TypeError as e:
        raise ValueError(f"malformed route record {rec.get('id')!r}: {e}") from e


def routes_from_records(records: List[Dict[str, Any]]) -> List[SafetyRoute]:
    routes = [route_from_record(r) for r in records]
    ids = [r.id for r in routes]
    if len(set(ids)) != len(ids):
        raise ValueError(f"duplicate route ids: {ids}")
    return routes


def load_routes(path: Union[str, Path]) -> List[SafetyRoute]:
    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)
    routes = routes_from_records(records)
    logger.info("Loaded %d routes from %s", len(routes), path)
    return routes
