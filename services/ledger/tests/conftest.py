"""
Shared fixtures: in-memory SQLite garden, manual clock, wired services.
"""
import os
import random
import sys
from datetime import datetime, timezone

import pytest

# Add service directory to path
app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import init_db
from infrastructure.clock import ManualClock
from infrastructure.garden_store import GardenStore
from prompt_rotation import PromptRotation
from reflection_gate import ReflectionGate
from resource_ledger import LedgerGuard, ResourceLedger
from sprout_lifecycle_service import SproutLifecycleService

# Wednesday; the calendar week started Monday 2026-03-02
START = datetime(2026, 3, 4, 10, 0, tzinfo=timezone.utc)

PROMPTS = [f"Prompt {i}" for i in range(1, 10)]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def store(session, clock):
    return GardenStore(session, clock)


@pytest.fixture
def ledger_state(store):
    """Ledger at soil=100, sun=3/3, already committed."""
    state = store.ledger_state()
    state.soil_capacity = 100
    state.soil_available = 100
    state.sun_capacity = 3
    state.sun_available = 3
    store.persist()
    return state


@pytest.fixture
def ledger(ledger_state, store):
    return ResourceLedger(ledger_state, LedgerGuard(), reload=store.lock_ledger_state)


@pytest.fixture
def lifecycle(store, ledger):
    return SproutLifecycleService(store, ledger)


@pytest.fixture
def prompts():
    return PromptRotation(PROMPTS, rng=random.Random(7))


@pytest.fixture
def gate(store, ledger, prompts):
    return ReflectionGate(store, ledger, prompts)
