from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional

from AlertClock import AlertScheduler, TimerHandle
from SafetyAlert import AlertType, SafetyAlert, is_unexpired
from SafetyRoute import RouteId

logger = logging.getLogger(__name__)


class AlertState(Enum):
    IDLE = auto()
    SHOWING = auto()
    DISMISSED = auto()


class AlertSelection(Enum):
    FIRST = "first"        # original list order
    SEVERITY = "severity"  # danger > warning > info, ties keep list order


SEVERITY_RANK = {
    AlertType.DANGER: 0,
    AlertType.WARNING: 1,
    AlertType.INFO: 2,
}


@dataclass
class AlertDisplayState:
    route_id: Optional[RouteId] = None
    alert: Optional[SafetyAlert] = None
    visible: bool = False
    state: AlertState = AlertState.IDLE


@dataclass
class _ExpiryTimer:
    generation: int
    handle: TimerHandle


class AlertLifecycleManager:
    """
    Owns the single displayed alert for the current route context.

    Each context change bumps a generation number and cancels the previous
    expiry timer. Expiry callbacks carry the generation they were scheduled
    for and are ignored once it is no longer current.
    """

    def __init__(self,
                 alerts: Iterable[SafetyAlert],
                 scheduler: AlertScheduler,
                 selection: AlertSelection = AlertSelection.FIRST,
                 on_change: Optional[Callable[["AlertLifecycleManager"], None]] = None):
        self._alerts = tuple(alerts)
        self._scheduler = scheduler
        self.selection = selection
        self.on_change = on_change

        self._display = AlertDisplayState()
        self._generation = 0
        self._timer: Optional[_ExpiryTimer] = None

    # -------------------------
    # queries
    # -------------------------
    @property
    def state(self) -> AlertState:
        return self._display.state

    @property
    def route_id(self) -> Optional[RouteId]:
        return self._display.route_id

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    def get_current_alert(self) -> Optional[SafetyAlert]:
        return self._display.alert

    def is_visible(self) -> bool:
        return self._display.visible

    def displayed_alert(self) -> Optional[SafetyAlert]:
        return self._display.alert if self._display.visible else None

    def active_alerts(self, route_id: Optional[RouteId], now=None) -> List[SafetyAlert]:
        if now is None:
            now = self._scheduler.now()
        return [a for a in self._alerts if is_unexpired(a, now) and a.applies_to(route_id)]

    def select(self, active: List[SafetyAlert]) -> Optional[SafetyAlert]:
        if not active:
            return None
        if self.selection is AlertSelection.SEVERITY:
            # sorted() is stable, equal ranks keep list order
            return sorted(active, key=lambda a: SEVERITY_RANK[a.type])[0]
        return active[0]

    def snapshot(self) -> Dict[str, Any]:
        alert = self._display.alert
        return {
            "routeId": self._display.route_id,
            "state": self._display.state.name.lower(),
            "visible": self._display.visible,
            "alert": alert.to_record() if alert is not None else None,
        }

    # -------------------------
    # transitions
    # -------------------------
    def on_route_context_changed(self, route_id: Optional[RouteId]) -> None:
        self._cancel_timer()
        self._generation += 1

        now = self._scheduler.now()
        alert = self.select(self.active_alerts(route_id, now))

        if alert is None:
            self._display = AlertDisplayState(route_id=route_id)
            logger.info("Route context %r: no active alert", route_id)
        else:
            self._display = AlertDisplayState(route_id=route_id, alert=alert,
                                              visible=True, state=AlertState.SHOWING)
            logger.info("Route context %r: showing alert %r (%s)", route_id, alert.id, alert.type.value)
            self._schedule_expiry(alert, now)

        self._notify()

    def dismiss(self) -> None:
        if self._display.state is not AlertState.SHOWING:
            logger.debug("dismiss ignored in state %s", self._display.state.name)
            return
        self._cancel_timer()
        self._hide()
        logger.info("Alert %r dismissed", self._display.alert.id)
        self._notify()

    def close(self) -> None:
        """Drop the pending timer when the owner of this context goes away."""
        self._cancel_timer()
        self._generation += 1
        self.on_change = None

    # -------------------------
    # timer
    # -------------------------
    def _schedule_expiry(self, alert: SafetyAlert, now) -> None:
        exp = alert.expires_at()
        if exp is None:
            return
        delay_s = (exp - now).total_seconds()
        if delay_s <= 0:
            return
        handle = self._scheduler.call_later(delay_s, partial(self._on_expiry, self._generation))
        self._timer = _ExpiryTimer(generation=self._generation, handle=handle)
        logger.debug("Expiry of alert %r scheduled in %.3fs (gen %d)", alert.id, delay_s, self._generation)

    def _cancel_timer(self) -> None:
        if self._timer is None:
            return
        self._timer.handle.cancel()
        logger.debug("Expiry timer cancelled (gen %d)", self._timer.generation)
        self._timer = None

    def _on_expiry(self, generation: int) -> None:
        if generation != self._generation:
            logger.debug("Stale expiry timer ignored (gen %d, current %d)", generation, self._generation)
            return
        self._timer = None
        if self._display.state is not AlertState.SHOWING:
            return
        self._hide()
        logger.info("Alert %r expired", self._display.alert.id)
        self._notify()

    def _hide(self) -> None:
        self._display.visible = False
        self._display.state = AlertState.DISMISSED

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)
