"""
Garden Store - storage collaborator for the ledger services
===========================================================

Loads and saves the Twig -> Leaf -> Sprout tree and the ledger balances.
The services only ever talk to this object; they never touch the session.
"""
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import SOIL_CAPACITY, SUN_CAPACITY
from domain.growth_rules import week_start
from exceptions import PersistenceError, ValidationError
from infrastructure.clock import SystemClock
from infrastructure.uow import LedgerStateRepository, SproutRepository, TwigRepository
from logging_config import get_logger

logger = get_logger(__name__)


class GardenStore:
    def __init__(self, session: Session, clock=None):
        self._session = session
        self._clock = clock or SystemClock()
        self.twigs = TwigRepository(session)
        self.sprouts = SproutRepository(session)
        self._ledger = LedgerStateRepository(session)

    def now(self) -> datetime:
        return self._clock.now()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def load_thread(self, twig_id: str):
        """Twig or None. Never creates anything."""
        return self.twigs.get(twig_id)

    def list_sprouts(self, twig_id: str, leaf_id: str) -> list:
        return self.sprouts.list_by_leaf(twig_id, leaf_id)

    def get_sprout(self, sprout_id: str):
        return self.sprouts.get(sprout_id)

    def get_leaf(self, leaf_id: str):
        return self.twigs.get_leaf(leaf_id)

    def ledger_state(self):
        """The garden's LedgerState, created at full capacity on first use."""
        from models import LedgerState

        state = self._ledger.get()
        if state is None:
            now = self.now()
            state = LedgerState(
                id=LedgerStateRepository.LEDGER_ID,
                soil_capacity=SOIL_CAPACITY,
                soil_available=SOIL_CAPACITY,
                sun_capacity=SUN_CAPACITY,
                sun_available=SUN_CAPACITY,
                sun_replenished_at=week_start(now),
                updated_at=now,
            )
            self._ledger.add(state)
            # flushed so a locked reload in this transaction finds the row
            self._session.flush()
            logger.info(
                "ledger_state_initialized",
                soil_capacity=SOIL_CAPACITY,
                sun_capacity=SUN_CAPACITY,
            )
        return state

    def lock_ledger_state(self):
        """
        The LedgerState row re-read from the database under a row lock.

        Called at the start of every guarded ledger operation: whatever this
        session loaded earlier may have been spent by another session since.
        """
        return self._ledger.get_for_update() or self.ledger_state()

    def refresh_reflections(self, twig) -> None:
        """Drop the loaded sun entries of `twig`; the next access reloads them."""
        self._session.expire(twig, ["sun_entries"])

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def ensure_thread(self, twig_id: str, leaf_id: str):
        """
        Repair step: create the twig and/or leaf if they are missing.

        Called deliberately by the lifecycle engine before its first write
        to a thread. Returns (twig, leaf).
        """
        from models import Leaf, Twig

        now = self.now()
        twig = self.twigs.get(twig_id)
        if twig is None:
            twig = Twig(id=twig_id, status="active", created_at=now)
            self.twigs.add(twig)
            logger.warning("twig_repaired", twig_id=twig_id)

        leaf = next((l for l in twig.leaves if l.id == leaf_id), None)
        if leaf is None:
            existing = self.twigs.get_leaf(leaf_id)
            if existing is not None and existing.twig_id != twig_id:
                raise ValidationError(
                    "Leaf belongs to another twig",
                    field="leaf_id",
                    leaf_id=leaf_id,
                    leaf_twig_id=existing.twig_id,
                )
            leaf = existing or Leaf(id=leaf_id, status="active", created_at=now)
            if existing is None:
                twig.leaves.append(leaf)
                logger.warning("leaf_repaired", twig_id=twig_id, leaf_id=leaf_id)

        return twig, leaf

    def add(self, obj) -> None:
        self._session.add(obj)

    def persist(self, operation: str = "persist") -> None:
        """
        Commit the current unit of work.

        On failure the session is rolled back (loaded objects are expired and
        reload from the database) and PersistenceError is raised.
        """
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            logger.error("persist_failed", operation=operation, error=str(e))
            raise PersistenceError(operation=operation, original_error=str(e)) from e
