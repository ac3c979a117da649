"""
RESOURCE LEDGER - soil and sun budgets
======================================

Wraps one LedgerState row. Pure balance arithmetic: persisting the row and
notifying observers of balance changes is the caller's job.

    ledger = ResourceLedger(store.ledger_state(), guard, reload=store.lock_ledger_state)
    with ledger.operation("graft"):
        cost = ledger.cost_of("1m", "firm")
        ledger.spend_soil(cost)
        store.persist()

Author: Growth Ledger Team
"""
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, Optional

from domain.growth_rules import soil_cost, week_start
from exceptions import InsufficientResource, LedgerBusy, ValidationError
from logging_config import get_logger

logger = get_logger(__name__)

SUN_UNIT_COST = 1


class LedgerGuard:
    """
    Makes "check, then commit" a single unit.

    Other threads wait for the running operation; a re-entrant call from
    the same thread (e.g. a callback firing mid-operation) is rejected.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._active: Optional[str] = None

    @contextmanager
    def operation(self, name: str):
        with self._lock:
            if self._active is not None:
                logger.warning("ledger_reentry_rejected", operation=name, active=self._active)
                raise LedgerBusy(operation=name)
            self._active = name
            try:
                yield
            finally:
                self._active = None

    @property
    def active(self) -> Optional[str]:
        return self._active


class ResourceLedger:
    """Soil/sun balances of one garden."""

    def __init__(self, state, guard: Optional[LedgerGuard] = None,
                 reload: Optional[Callable[[], object]] = None):
        self._state = state
        self._guard = guard or LedgerGuard()
        self._reload = reload

    @property
    def state(self):
        return self._state

    @contextmanager
    def operation(self, name: str):
        """
        Guarded section for one check-then-commit operation.

        With a `reload` callable the row is re-read (and locked) once the
        guard is held, so every check inside sees the committed balances.
        """
        with self._guard.operation(name):
            if self._reload is not None:
                self._state = self._reload()
            yield

    # -------------------------------------------------------------------------
    # Soil
    # -------------------------------------------------------------------------

    def available_soil(self) -> int:
        return self._state.soil_available

    def soil_capacity(self) -> int:
        return self._state.soil_capacity

    @staticmethod
    def cost_of(season, environment) -> int:
        return soil_cost(season, environment)

    def can_afford(self, cost: int) -> bool:
        return cost <= self.available_soil()

    def spend_soil(self, cost: int, at: Optional[datetime] = None) -> int:
        """
        Decrement soil by `cost`. Returns the new balance.

        Raises:
            InsufficientResource: cost exceeds the balance (nothing changes)
        """
        if isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
            raise ValidationError("Soil cost must be a non-negative integer", field="cost", value=repr(cost))

        available = self.available_soil()
        if not self.can_afford(cost):
            raise InsufficientResource(resource="soil", required=cost, available=available)

        self._state.soil_available = available - cost
        self._touch(at)
        logger.info("soil_spent", cost=cost, soil_available=self._state.soil_available)
        return self._state.soil_available

    # -------------------------------------------------------------------------
    # Sun
    # -------------------------------------------------------------------------

    def available_sun(self) -> int:
        return self._state.sun_available

    def sun_capacity(self) -> int:
        return self._state.sun_capacity

    def can_afford_sun(self) -> bool:
        return SUN_UNIT_COST <= self.available_sun()

    def spend_sun(self, at: Optional[datetime] = None) -> int:
        """Spend one sun. Weekly gating is the reflection gate's concern."""
        available = self.available_sun()
        if not self.can_afford_sun():
            raise InsufficientResource(resource="sun", required=SUN_UNIT_COST, available=available)

        self._state.sun_available = available - SUN_UNIT_COST
        self._touch(at)
        logger.info("sun_spent", sun_available=self._state.sun_available)
        return self._state.sun_available

    def replenish_sun(self, now: datetime) -> bool:
        """
        Reset sun to capacity once per calendar week.

        Idempotent within a week: returns True only for the call that
        actually performed the reset.
        """
        current_week = week_start(now)
        last = self._state.sun_replenished_at
        if last is not None and week_start(last) >= current_week:
            return False

        self._state.sun_available = self._state.sun_capacity
        self._state.sun_replenished_at = current_week
        self._touch(now)
        logger.info(
            "sun_replenished",
            sun_available=self._state.sun_available,
            week_start=current_week.isoformat(),
        )
        return True

    # -------------------------------------------------------------------------

    def snapshot(self) -> Dict[str, object]:
        replenished = self._state.sun_replenished_at
        return {
            "soil_available": self.available_soil(),
            "soil_capacity": self.soil_capacity(),
            "sun_available": self.available_sun(),
            "sun_capacity": self.sun_capacity(),
            "sun_replenished_at": replenished.isoformat() if replenished else None,
        }

    def _touch(self, at: Optional[datetime]) -> None:
        if at is not None:
            self._state.updated_at = at
