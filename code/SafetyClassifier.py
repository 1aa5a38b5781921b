"""
Safety classification for routes.

Two policies exist side by side:
  classify_direct      - route lines and markers, raw 0..5 thresholds
  classify_normalized  - list badges, score mapped onto 0..10 first
They disagree around the 3.5..4.0 band (e.g. 3.6 is Moderate on the map but
Safe on the badge). Both are kept until one of them is chosen as canonical.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from SafetyRoute import SafetyRoute

logger = logging.getLogger(__name__)

SCORE_MIN = 0.0
SCORE_MAX = 5.0
NORMALIZED_MAX = 10.0

GREEN = "#22c55e"
YELLOW = "#eab308"
RED = "#ef4444"


class InvalidScoreError(ValueError):
    pass


class SafetyCategory(Enum):
    SAFE = "Safe"
    MODERATE = "Moderate"
    UNSAFE = "Unsafe"


@dataclass(frozen=True)
class SafetyInfo:
    category: SafetyCategory
    color: str
    description: str
    icon: str
    badge_class: str
    text_class: str

    @property
    def label(self) -> str:
        return self.category.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "color": self.color,
            "description": self.description,
            "icon": self.icon,
            "badgeClass": self.badge_class,
            "textClass": self.text_class,
        }


_INFO = {
    SafetyCategory.SAFE: SafetyInfo(
        category=SafetyCategory.SAFE,
        color=GREEN,
        description="This route has good lighting and high foot traffic",
        icon="✓",
        badge_class="bg-green-100 text-green-800 border-green-200",
        text_class="text-green-700",
    ),
    SafetyCategory.MODERATE: SafetyInfo(
        category=SafetyCategory.MODERATE,
        color=YELLOW,
        description="This route has some safety concerns",
        icon="!",
        badge_class="bg-yellow-100 text-yellow-800 border-yellow-200",
        text_class="text-yellow-700",
    ),
    SafetyCategory.UNSAFE: SafetyInfo(
        category=SafetyCategory.UNSAFE,
        color=RED,
        description="This route has poor lighting and low foot traffic",
        icon="⚠",
        badge_class="bg-red-100 text-red-800 border-red-200",
        text_class="text-red-700",
    ),
}


# -------------------------
# score domain
# -------------------------
def validate_score(score: float, upper: float = SCORE_MAX) -> float:
    if score is None or math.isnan(score) or score < SCORE_MIN or score > upper:
        raise InvalidScoreError(f"safety score {score!r} outside [{SCORE_MIN}, {upper}]")
    return float(score)


def clamp_score(score: float, upper: float = SCORE_MAX) -> float:
    try:
        return validate_score(score, upper)
    except InvalidScoreError as e:
        # NaN has no nearest bound, use the most cautious one
        clamped = SCORE_MIN if score is None or math.isnan(score) else min(max(score, SCORE_MIN), upper)
        logger.warning("%s, clamped to %s", e, clamped)
        return clamped


# -------------------------
# policies
# -------------------------
def direct_category(score: float) -> SafetyCategory:
    s = clamp_score(score)
    if s >= 4.0:
        return SafetyCategory.SAFE
    if s >= 3.0:
        return SafetyCategory.MODERATE
    return SafetyCategory.UNSAFE


def normalize_score(score: float) -> float:
    s = clamp_score(score, upper=NORMALIZED_MAX)
    # values above 5 are taken to be on the 0..10 scale already
    return s if s > SCORE_MAX else s * 2


def normalized_category(score: float) -> SafetyCategory:
    n = normalize_score(score)
    if n > 7:
        return SafetyCategory.SAFE
    if n >= 4:
        return SafetyCategory.MODERATE
    return SafetyCategory.UNSAFE


def classify_direct(score: float) -> SafetyInfo:
    return _INFO[direct_category(score)]


def classify_normalized(score: float) -> SafetyInfo:
    return _INFO[normalized_category(score)]


# -------------------------
# presentation helpers
# -------------------------
def route_line_style(route: SafetyRoute, selected: bool = False) -> Dict[str, Any]:
    """Polyline options for a route; the selected one is drawn thicker and solid."""
    return {
        "color": classify_direct(route.safety_score).color,
        "weight": 7 if selected else 5,
        "opacity": 0.9 if selected else 0.7,
        "dash_array": None if selected else "5, 5",
    }


def estimated_walk_minutes(route: SafetyRoute) -> int:
    # rough placeholder, no real distance involved
    return 5 + len(route.coordinates) * 2


def turn_count(route: SafetyRoute) -> int:
    return len(route.coordinates) - 1


_ALERT_STYLES = {
    "warning": {"bg": "bg-amber-50", "text": "text-amber-800", "border": "border-amber-200", "icon": "exclamation-triangle"},
    "danger": {"bg": "bg-red-50", "text": "text-red-800", "border": "border-red-200", "icon": "lightbulb"},
    "info": {"bg": "bg-blue-50", "text": "text-blue-800", "border": "border-blue-200", "icon": "info-circle"},
}


def alert_style(alert_type: Any) -> Dict[str, str]:
    key = getattr(alert_type, "value", alert_type)
    return dict(_ALERT_STYLES.get(key, _ALERT_STYLES["info"]))
