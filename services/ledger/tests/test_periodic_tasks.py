"""
PERIODIC TASK + UNIT OF WORK TESTS
"""
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from infrastructure.garden_store import GardenStore
from infrastructure.uow import UnitOfWork
from models import Twig
from periodic_tasks import celery_app, run_sun_replenishment

LAST_MONDAY = datetime(2026, 2, 23, 0, 0, tzinfo=timezone.utc)


class TestSunReplenishment:

    def test_first_run_of_new_week_resets_sun(self, session_factory, ledger_state, store, clock):
        ledger_state.sun_available = 0
        ledger_state.sun_replenished_at = LAST_MONDAY
        store.persist()

        result = run_sun_replenishment(session_factory=session_factory, clock=clock)

        assert result["replenished"] is True
        assert result["sun_available"] == 3
        with UnitOfWork(session_factory) as uow:
            assert uow.ledger.get().sun_available == 3

    def test_later_runs_in_same_week_do_nothing(self, session_factory, ledger_state, store, clock):
        ledger_state.sun_replenished_at = LAST_MONDAY
        store.persist()
        run_sun_replenishment(session_factory=session_factory, clock=clock)

        result = run_sun_replenishment(session_factory=session_factory, clock=clock)

        assert result["replenished"] is False

    def test_fresh_garden_starts_full(self, session_factory, clock):
        result = run_sun_replenishment(session_factory=session_factory, clock=clock)

        assert result["replenished"] is False
        assert result["sun_available"] == result["sun_capacity"]
        with UnitOfWork(session_factory) as uow:
            assert uow.ledger.get() is not None

    def test_reset_is_visible_to_a_request_that_loaded_earlier(
        self, session_factory, ledger_state, store, lifecycle, gate, ledger, clock
    ):
        """
        SCENARIO: a request loaded the ledger at sun=0; the scheduled reset
                  commits from its own session before the request records
        EXPECTED: the request spends from the reset balance instead of
                  failing on (or writing back) its stale copy
        """
        lifecycle.graft("twig-health", "leaf-running", "Run", "1w", "fertile")
        ledger_state.sun_available = 0
        ledger_state.sun_replenished_at = LAST_MONDAY
        store.persist()

        assert run_sun_replenishment(session_factory=session_factory, clock=clock)["replenished"] is True

        gate.record_reflection("twig-health", "Good week")

        assert ledger.available_sun() == 2
        with UnitOfWork(session_factory) as uow:
            assert uow.ledger.get().sun_available == 2

    def test_failures_are_logged_and_raised(self, clock):
        def broken_factory():
            raise OperationalError("connect", {}, Exception("no database"))

        with patch("error_handler.log_error") as log_error:
            with pytest.raises(OperationalError):
                run_sun_replenishment(session_factory=broken_factory, clock=clock)

        log_error.assert_called_once()
        assert log_error.call_args[0][1]["operation"] == "replenish_sun"

    def test_beat_schedule(self):
        entry = celery_app.conf.beat_schedule["replenish-sun"]

        assert entry["task"] == "replenish_sun"
        assert celery_app.conf.timezone == "UTC"


class TestUnitOfWork:

    def test_commits_on_success(self, session_factory, clock):
        with UnitOfWork(session_factory) as uow:
            uow.twigs.add(Twig(id="twig-health", created_at=clock.now()))

        with UnitOfWork(session_factory) as uow:
            assert uow.twigs.get("twig-health") is not None

    def test_rolls_back_on_error(self, session_factory, clock):
        with pytest.raises(ValueError):
            with UnitOfWork(session_factory) as uow:
                uow.twigs.add(Twig(id="twig-health", created_at=clock.now()))
                uow.session.flush()
                raise ValueError("boom")

        with UnitOfWork(session_factory) as uow:
            assert uow.twigs.get("twig-health") is None

    def test_session_outside_context(self, session_factory):
        with pytest.raises(RuntimeError):
            UnitOfWork(session_factory).session


class TestGardenStoreRepair:

    def test_ensure_thread_is_idempotent(self, store):
        twig, leaf = store.ensure_thread("twig-health", "leaf-running")
        store.persist()

        again_twig, again_leaf = store.ensure_thread("twig-health", "leaf-running")

        assert again_twig is twig
        assert again_leaf is leaf
        assert len(twig.leaves) == 1

    def test_load_thread_never_creates(self, store: GardenStore):
        assert store.load_thread("twig-health") is None
        assert store.load_thread("twig-health") is None
