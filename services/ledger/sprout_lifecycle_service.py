"""
SPROUT LIFECYCLE SERVICE - application layer
============================================

ARCHITECTURE:
- Domain Layer: domain/sprout_domain_service.py, domain/growth_rules.py
- Application Layer: this file - validation order, ledger spend, persist
- Infrastructure: infrastructure/garden_store.py - loads and commits state

Every operation validates fully before its first mutation, and ends with
exactly one store.persist().

Author: Growth Ledger Team
"""
from typing import Optional

from config import END_DATE_ANCHOR_HOUR
from domain.growth_rules import Environment, Season, end_date_for, validate_result
from domain.sprout_domain_service import (
    SproutState,
    TransitionReason,
    sprout_domain_service,
)
from exceptions import InsufficientResource, NotFoundError, ValidationError
from logging_config import get_logger, log_sprout_transition
from resource_ledger import ResourceLedger

logger = get_logger(__name__)


class SproutLifecycleService:
    """Graft, complete, fail and water sprouts."""

    def __init__(self, store, ledger: Optional[ResourceLedger] = None, domain=None,
                 anchor_hour: int = END_DATE_ANCHOR_HOUR):
        self._store = store
        self._ledger = ledger or ResourceLedger(store.ledger_state(), reload=store.lock_ledger_state)
        self._domain = domain or sprout_domain_service
        self._anchor_hour = anchor_hour

    @property
    def ledger(self) -> ResourceLedger:
        return self._ledger

    # -------------------------------------------------------------------------
    # Graft
    # -------------------------------------------------------------------------

    def graft(
        self,
        twig_id: str,
        leaf_id: str,
        title: str,
        season,
        environment,
        origin_id: Optional[str] = None,
    ):
        """
        Plant a new active sprout on a leaf, optionally continuing `origin_id`.

        Initial planting is a graft without origin.

        Raises:
            ValidationError: empty title, bad season/environment, the leaf
                already has an active sprout, origin not finished or in
                another twig
            NotFoundError: origin_id resolves to nothing
            InsufficientResource: not enough soil
            PersistenceError: the commit failed (nothing was saved)
        """
        from models import Sprout

        title = self._domain.validate_title(title)
        season = Season.parse(season)
        environment = Environment.parse(environment)

        with self._ledger.operation("graft"):
            leaf = self._store.get_leaf(leaf_id)
            if leaf is not None and leaf.twig_id != twig_id:
                raise ValidationError(
                    "Leaf belongs to another twig",
                    field="leaf_id",
                    leaf_id=leaf_id,
                    leaf_twig_id=leaf.twig_id,
                )

            self._domain.ensure_no_active_sprout(self._store.list_sprouts(twig_id, leaf_id), leaf_id)

            if origin_id is not None:
                self._resolve_origin(twig_id, origin_id)

            cost = self._ledger.cost_of(season, environment)
            if not self._ledger.can_afford(cost):
                raise InsufficientResource(
                    resource="soil",
                    required=cost,
                    available=self._ledger.available_soil(),
                )

            # --- validation complete, mutations start here ---
            now = self._store.now()
            twig, _ = self._store.ensure_thread(twig_id, leaf_id)
            self._ledger.spend_soil(cost, at=now)

            sprout = Sprout(
                twig_id=twig_id,
                leaf_id=leaf_id,
                title=title,
                season=season.value,
                environment=environment.value,
                _state=SproutState.ACTIVE.value,
                soil_cost=cost,
                created_at=now,
                activated_at=now,
                end_date=end_date_for(season, now, self._anchor_hour),
                grafted_from_id=origin_id,
            )
            twig.sprouts.append(sprout)
            self._store.add(sprout)
            self._store.persist("graft")

        logger.info(
            "sprout_grafted",
            sprout_id=sprout.id,
            twig_id=twig_id,
            leaf_id=leaf_id,
            season=season.value,
            environment=environment.value,
            cost=cost,
            grafted_from_id=origin_id,
            soil_available=self._ledger.available_soil(),
        )
        log_sprout_transition(
            sprout.id, None, SproutState.ACTIVE.value, TransitionReason.GRAFTED.value, sprout.created_at
        )
        return sprout

    def _resolve_origin(self, twig_id: str, origin_id: str):
        origin = self._store.get_sprout(origin_id)
        if origin is not None:
            self._domain.validate_origin_sprout(origin, twig_id)
            return origin

        leaf = self._store.get_leaf(origin_id)
        if leaf is not None:
            if leaf.twig_id != twig_id:
                raise ValidationError(
                    "Graft origin belongs to another twig",
                    field="origin_id",
                    origin_id=origin_id,
                    origin_twig_id=leaf.twig_id,
                )
            return leaf

        raise NotFoundError("graft origin", origin_id)

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def complete(self, sprout_id: str, result: int, reflection: Optional[str] = None):
        """Harvest an active sprout with a 1..5 result and optional reflection."""
        result = validate_result(result)
        reflection = (reflection or "").strip() or None

        with self._ledger.operation("complete"):
            sprout = self._get_sprout(sprout_id)
            now = self._store.now()
            event = self._domain.transition(
                sprout, SproutState.COMPLETED, at=now, reason=TransitionReason.HARVESTED.value
            )
            sprout.result = result
            sprout.reflection = reflection
            sprout.completed_at = now
            self._store.persist("complete")

        logger.info("sprout_completed", sprout_id=sprout.id, result=result)
        log_sprout_transition(event.sprout_id, event.from_state, event.to_state, event.reason, event.timestamp)
        return sprout

    def fail(self, sprout_id: str):
        """Prune an active sprout. No outcome is recorded."""
        with self._ledger.operation("fail"):
            sprout = self._get_sprout(sprout_id)
            now = self._store.now()
            event = self._domain.transition(
                sprout, SproutState.FAILED, at=now, reason=TransitionReason.PRUNED.value
            )
            sprout.completed_at = now
            self._store.persist("fail")

        logger.info("sprout_failed", sprout_id=sprout.id)
        log_sprout_transition(event.sprout_id, event.from_state, event.to_state, event.reason, event.timestamp)
        return sprout

    # -------------------------------------------------------------------------
    # Watering
    # -------------------------------------------------------------------------

    def add_watering(self, sprout_id: str, content: str, prompt: Optional[str] = None):
        """
        Append a journal entry stamped with the current time.

        Blank content is ignored (returns None) rather than reported.
        """
        from models import WaterEntry

        content = (content or "").strip()
        if not content:
            logger.debug("watering_ignored_empty", sprout_id=sprout_id)
            return None

        sprout = self._get_sprout(sprout_id)
        entry = WaterEntry(
            timestamp=self._store.now(),
            content=content,
            prompt=(prompt or "").strip() or None,
        )
        sprout.water_entries.append(entry)
        self._store.persist("add_watering")

        logger.info("sprout_watered", sprout_id=sprout.id, entries=len(sprout.water_entries))
        return entry

    # -------------------------------------------------------------------------

    def _get_sprout(self, sprout_id: str):
        sprout = self._store.get_sprout(sprout_id)
        if sprout is None:
            raise NotFoundError("sprout", sprout_id)
        return sprout
