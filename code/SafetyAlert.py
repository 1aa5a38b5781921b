from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from SafetyRoute import RouteId

logger = logging.getLogger(__name__)

Expiration = Union[str, datetime, None]


class AlertType(Enum):
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


class MalformedTimestampError(ValueError):
    pass


@dataclass(frozen=True)
class SafetyAlert:
    """
    A pre-authored advisory.
    routes: ids the alert applies to, None means every route
    expiration: ISO-8601 string or datetime, None never expires
    """
    id: Union[int, str]
    type: AlertType
    message: str
    routes: Optional[Tuple[RouteId, ...]] = None
    expiration: Expiration = None
    severity: Optional[str] = None
    icon: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.routes is None

    def applies_to(self, route_id: Optional[RouteId]) -> bool:
        # no selected route: every alert is relevant
        if route_id is None or self.routes is None:
            return True
        return route_id in self.routes

    def expires_at(self) -> Optional[datetime]:
        return parse_expiration(self.expiration)

    def to_record(self) -> Dict[str, Any]:
        exp = self.expiration
        if isinstance(exp, datetime):
            exp = exp.isoformat()
        return {
            "id": self.id,
            "type": self.type.value,
            "message": self.message,
            "severity": self.severity,
            "icon": self.icon,
            "routes": list(self.routes) if self.routes is not None else None,
            "expiration": exp,
        }


# -------------------------
# expiration handling
# -------------------------
def parse_expiration(value: Expiration) -> Optional[datetime]:
    """
    None -> None (never expires). Naive timestamps are taken as UTC.
    Raises MalformedTimestampError for anything that is not a timestamp.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedTimestampError(f"unparsable expiration {value!r}") from e
    else:
        raise MalformedTimestampError(f"unsupported expiration type {type(value).__name__}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def is_unexpired(alert: SafetyAlert, now: datetime) -> bool:
    try:
        exp = alert.expires_at()
    except MalformedTimestampError as e:
        logger.warning("Alert %r treated as expired: %s", alert.id, e)
        return False
    return exp is None or exp > now


# -------------------------
# record loading
# -------------------------
def alert_from_record(rec: Dict[str, Any]) -> SafetyAlert:
    try:
        routes = rec.get("routes")
        return SafetyAlert(
            id=rec["id"],
            type=AlertType(rec["type"]),
            message=rec["message"],
            routes=tuple(routes) if routes is not None else None,
            expiration=rec.get("expiration"),
            severity=rec.get("severity"),
            icon=rec.get("icon"),
        )
    except KeyError as e:
        raise ValueError(f"alert record missing field {e}") from e


def alerts_from_records(records: List[Dict[str, Any]]) -> List[SafetyAlert]:
    return [alert_from_record(r) for r in records]


def load_alerts(path: Union[str, Path]) -> List[SafetyAlert]:
    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)
    alerts = alerts_from_records(records)
    logger.info("Loaded %d alerts from %s", len(alerts), path)
    return alerts
