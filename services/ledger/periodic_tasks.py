"""
PERIODIC TASKS - scheduled ledger maintenance
=============================================

Scheduled tasks:
- Weekly sun replenishment check (every SUN_REPLENISH_CHECK_MINUTES)

The check is idempotent: it resets sun at most once per calendar week no
matter how often it runs.

Author: Growth Ledger Team
"""

from datetime import timedelta

from celery import Celery

from config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, SUN_REPLENISH_CHECK_MINUTES
from database import SessionLocal
from error_handler import handle_errors
from infrastructure.garden_store import GardenStore
from infrastructure.uow import UnitOfWork
from logging_config import get_logger
from resource_ledger import ResourceLedger

logger = get_logger(__name__)

celery_app = Celery(
    'periodic_tasks',
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND
)


# =============================================================================
# PERIODIC TASKS
# =============================================================================

@handle_errors(context={"operation": "replenish_sun"})
def run_sun_replenishment(session_factory=SessionLocal, clock=None) -> dict:
    """Reset sun to capacity if a new week started since the last reset."""
    with UnitOfWork(session_factory) as uow:
        store = GardenStore(uow.session, clock)
        ledger = ResourceLedger(store.ledger_state(), reload=store.lock_ledger_state)
        with ledger.operation("replenish_sun"):
            replenished = ledger.replenish_sun(store.now())
            store.persist("replenish_sun")

    logger.info("sun_replenishment_checked", replenished=replenished)
    return {"replenished": replenished, **ledger.snapshot()}


@celery_app.task(name='replenish_sun')
def replenish_sun():
    """
    Weekly sun replenishment

    Runs every SUN_REPLENISH_CHECK_MINUTES; only the first run of a week
    changes anything.
    """
    logger.info("replenish_sun_started")
    return run_sun_replenishment()


# =============================================================================
# CELERY BEAT SCHEDULE
# =============================================================================

celery_app.conf.beat_schedule = {
    'replenish-sun': {
        'task': 'replenish_sun',
        'schedule': timedelta(minutes=SUN_REPLENISH_CHECK_MINUTES),
    },
}

celery_app.conf.timezone = 'UTC'
