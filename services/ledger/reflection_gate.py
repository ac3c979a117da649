"""
REFLECTION GATE - one sun reflection per twig per calendar week
===============================================================

Weeks run Monday 00:00 UTC to the following Monday. The same boundary is
used to check the gate and to stamp the entry.

Check order is fixed: the weekly gate first, then sun affordability. The
two are independent; a twig can have sun left and still be gated.

Author: Growth Ledger Team
"""
from typing import Optional

from config import DEFAULT_SUN_PROMPTS
from domain.growth_rules import same_week, week_start
from exceptions import InsufficientResource, NotFoundError, ValidationError, WeeklyLimitReached
from logging_config import get_logger
from prompt_rotation import PromptRotation
from resource_ledger import SUN_UNIT_COST, ResourceLedger

logger = get_logger(__name__)


class ReflectionGate:
    def __init__(self, store, ledger: Optional[ResourceLedger] = None,
                 prompts: Optional[PromptRotation] = None):
        self._store = store
        self._ledger = ledger or ResourceLedger(store.ledger_state(), reload=store.lock_ledger_state)
        self._prompts = prompts or PromptRotation(DEFAULT_SUN_PROMPTS)

    def was_reflected_this_week(self, twig_id: str) -> bool:
        twig = self._store.load_thread(twig_id)
        if twig is None:
            return False
        now = self._store.now()
        return any(same_week(entry.timestamp, now) for entry in twig.sun_entries)

    def open_reflection(self, twig_id: str) -> str:
        """
        Check both gates and hand out a prompt for the reflection form.

        Nothing is persisted; dismissing the form costs nothing.
        """
        self._require_twig(twig_id)
        self._check_gates(twig_id)
        return self._prompts.next_prompt()

    def record_reflection(
        self,
        twig_id: str,
        content: str,
        prompt: Optional[str] = None,
        sprout_id: Optional[str] = None,
    ):
        """
        Spend one sun and append one reflection entry to the twig, atomically.

        Raises:
            ValidationError: blank content, or sprout_id outside this twig
            NotFoundError: unknown twig or sprout
            WeeklyLimitReached: twig already reflected on this week
            InsufficientResource: no sun left
            PersistenceError: the commit failed (nothing was saved)
        """
        from models import SunEntry

        content = (content or "").strip()
        if not content:
            raise ValidationError("Reflection must not be empty", field="content")

        with self._ledger.operation("record_reflection"):
            twig = self._require_twig(twig_id)
            self._store.refresh_reflections(twig)

            sprout = None
            if sprout_id is not None:
                sprout = self._store.get_sprout(sprout_id)
                if sprout is None:
                    raise NotFoundError("sprout", sprout_id)
                if sprout.twig_id != twig_id:
                    raise ValidationError(
                        "Sprout belongs to another twig",
                        field="sprout_id",
                        sprout_id=sprout_id,
                        sprout_twig_id=sprout.twig_id,
                    )

            self._check_gates(twig_id)

            # --- validation complete, mutations start here ---
            now = self._store.now()
            self._ledger.spend_sun(at=now)
            entry = SunEntry(
                timestamp=now,
                content=content,
                prompt=(prompt or "").strip() or None,
                sprout=sprout,
            )
            twig.sun_entries.append(entry)
            self._store.persist("record_reflection")

        logger.info(
            "reflection_recorded",
            twig_id=twig_id,
            sprout_id=sprout_id,
            sun_available=self._ledger.available_sun(),
        )
        return entry

    def status(self, twig_id: str) -> dict:
        """Gate status for the presentation layer."""
        reflected = self.was_reflected_this_week(twig_id)
        return {
            "twig_id": twig_id,
            "reflected_this_week": reflected,
            "week_start": week_start(self._store.now()).isoformat(),
            "sun_available": self._ledger.available_sun(),
            "sun_capacity": self._ledger.sun_capacity(),
            "can_reflect": not reflected and self._ledger.can_afford_sun(),
        }

    # -------------------------------------------------------------------------

    def _require_twig(self, twig_id: str):
        twig = self._store.load_thread(twig_id)
        if twig is None:
            raise NotFoundError("twig", twig_id)
        return twig

    def _check_gates(self, twig_id: str) -> None:
        if self.was_reflected_this_week(twig_id):
            raise WeeklyLimitReached(
                twig_id=twig_id,
                week_start=week_start(self._store.now()).isoformat(),
            )
        if not self._ledger.can_afford_sun():
            raise InsufficientResource(
                resource="sun",
                required=SUN_UNIT_COST,
                available=self._ledger.available_sun(),
            )
