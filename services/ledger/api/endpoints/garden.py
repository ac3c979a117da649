"""
Garden API Controller

Thin wrapper over the ledger services. All business rules live in the
services; this module only maps requests in and domain exceptions out.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from config import DEFAULT_SUN_PROMPTS, SUN_PROMPTS_FILE
from database import get_db
from domain.sprout_domain_service import sprout_domain_service
from exceptions import BaseLedgerException, EXCEPTION_TO_STATUS
from infrastructure.clock import SystemClock
from infrastructure.garden_store import GardenStore
from prompt_rotation import PromptRotation, load_prompt_pool
from reflection_gate import ReflectionGate
from resource_ledger import LedgerGuard, ResourceLedger
from schemas import (
    CompleteRequest,
    GraftRequest,
    GraftResponse,
    LedgerResponse,
    ReflectionPromptResponse,
    ReflectionRecordedResponse,
    ReflectionRequest,
    ReflectionStatusResponse,
    ReplenishResponse,
    SoilCostResponse,
    SproutResponse,
    SunEntryResponse,
    TimelineResponse,
    WaterEntryResponse,
    WaterRequest,
)
from sprout_lifecycle_service import SproutLifecycleService
from timeline import build_timeline

router = APIRouter(tags=["Garden"])

# Process-wide: one guard serializes ledger operations across worker threads,
# one rotation remembers recently shown sun prompts until restart.
ledger_guard = LedgerGuard()
sun_prompts = PromptRotation(load_prompt_pool(SUN_PROMPTS_FILE, fallback=DEFAULT_SUN_PROMPTS))


def map_exception_to_http(exc: BaseLedgerException) -> HTTPException:
    """Map a domain exception to an HTTP error with the structured payload."""
    status_code = EXCEPTION_TO_STATUS.get(type(exc), 500)
    return HTTPException(status_code=status_code, detail=exc.to_dict())


# =============================================================================
# Dependencies
# =============================================================================

def get_clock():
    return SystemClock()


def get_guard() -> LedgerGuard:
    return ledger_guard


def get_prompts() -> PromptRotation:
    return sun_prompts


def get_store(db: Session = Depends(get_db), clock=Depends(get_clock)) -> GardenStore:
    return GardenStore(db, clock)


def get_ledger(store: GardenStore = Depends(get_store), guard: LedgerGuard = Depends(get_guard)) -> ResourceLedger:
    return ResourceLedger(store.ledger_state(), guard, reload=store.lock_ledger_state)


def get_lifecycle(store: GardenStore = Depends(get_store),
                  ledger: ResourceLedger = Depends(get_ledger)) -> SproutLifecycleService:
    return SproutLifecycleService(store, ledger)


def get_gate(store: GardenStore = Depends(get_store),
             ledger: ResourceLedger = Depends(get_ledger),
             prompts: PromptRotation = Depends(get_prompts)) -> ReflectionGate:
    return ReflectionGate(store, ledger, prompts)


# =============================================================================
# Ledger
# =============================================================================

@router.get("/ledger", response_model=LedgerResponse)
def read_ledger(ledger: ResourceLedger = Depends(get_ledger)):
    return LedgerResponse(**ledger.snapshot())


@router.get("/ledger/cost", response_model=SoilCostResponse)
def read_soil_cost(season: str, environment: str, ledger: ResourceLedger = Depends(get_ledger)):
    try:
        cost = ledger.cost_of(season, environment)
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    return SoilCostResponse(
        season=season,
        environment=environment,
        cost=cost,
        affordable=ledger.can_afford(cost),
        soil_available=ledger.available_soil(),
    )


@router.post("/ledger/replenish", response_model=ReplenishResponse)
def replenish_sun(store: GardenStore = Depends(get_store), ledger: ResourceLedger = Depends(get_ledger)):
    try:
        with ledger.operation("replenish_sun"):
            replenished = ledger.replenish_sun(store.now())
            store.persist("replenish_sun")
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    return ReplenishResponse(replenished=replenished, ledger=LedgerResponse(**ledger.snapshot()))


# =============================================================================
# Sprouts
# =============================================================================

@router.post("/twigs/{twig_id}/leaves/{leaf_id}/graft", response_model=GraftResponse, status_code=201)
def graft_sprout(
    twig_id: str,
    leaf_id: str,
    payload: GraftRequest,
    lifecycle: SproutLifecycleService = Depends(get_lifecycle),
):
    """
    Plant a sprout on a leaf, optionally continuing a finished one.

    ## Error Codes
    - 400: empty title, bad season/environment, leaf already growing,
      origin not finished
    - 404: origin not found
    - 409: not enough soil
    - 503: state could not be saved
    """
    try:
        sprout = lifecycle.graft(
            twig_id=twig_id,
            leaf_id=leaf_id,
            title=payload.title,
            season=payload.season,
            environment=payload.environment,
            origin_id=payload.origin_id,
        )
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    return GraftResponse(
        sprout=SproutResponse.model_validate(sprout),
        ledger=LedgerResponse(**lifecycle.ledger.snapshot()),
    )


@router.post("/sprouts/{sprout_id}/complete", response_model=SproutResponse)
def complete_sprout(
    sprout_id: str,
    payload: CompleteRequest,
    lifecycle: SproutLifecycleService = Depends(get_lifecycle),
):
    try:
        sprout = lifecycle.complete(sprout_id, payload.result, payload.reflection)
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    return SproutResponse.model_validate(sprout)


@router.post("/sprouts/{sprout_id}/fail", response_model=SproutResponse)
def fail_sprout(sprout_id: str, lifecycle: SproutLifecycleService = Depends(get_lifecycle)):
    try:
        sprout = lifecycle.fail(sprout_id)
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    return SproutResponse.model_validate(sprout)


@router.post("/sprouts/{sprout_id}/water")
def water_sprout(
    sprout_id: str,
    payload: WaterRequest,
    lifecycle: SproutLifecycleService = Depends(get_lifecycle),
):
    try:
        entry = lifecycle.add_watering(sprout_id, payload.content, payload.prompt)
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    if entry is None:
        return {"status": "ignored", "sprout_id": sprout_id}
    return {"status": "ok", "sprout_id": sprout_id, "entry": WaterEntryResponse.model_validate(entry)}


@router.get("/twigs/{twig_id}/leaves/{leaf_id}/timeline", response_model=TimelineResponse)
def read_timeline(twig_id: str, leaf_id: str, store: GardenStore = Depends(get_store)):
    sprouts = store.list_sprouts(twig_id, leaf_id)
    events = build_timeline(sprouts)
    return TimelineResponse(
        twig_id=twig_id,
        leaf_id=leaf_id,
        has_active_sprout=sprout_domain_service.has_active_sprout(sprouts),
        events=[e.to_dict() for e in events],
    )


# =============================================================================
# Reflection (shine)
# =============================================================================

@router.get("/twigs/{twig_id}/shine", response_model=ReflectionStatusResponse)
def read_reflection_status(twig_id: str, gate: ReflectionGate = Depends(get_gate)):
    return ReflectionStatusResponse(**gate.status(twig_id))


@router.post("/twigs/{twig_id}/shine/open", response_model=ReflectionPromptResponse)
def open_reflection(twig_id: str, gate: ReflectionGate = Depends(get_gate)):
    try:
        prompt = gate.open_reflection(twig_id)
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    return ReflectionPromptResponse(twig_id=twig_id, prompt=prompt)


@router.post("/twigs/{twig_id}/shine", response_model=ReflectionRecordedResponse, status_code=201)
def record_reflection(
    twig_id: str,
    payload: ReflectionRequest,
    gate: ReflectionGate = Depends(get_gate),
    ledger: ResourceLedger = Depends(get_ledger),
):
    try:
        entry = gate.record_reflection(twig_id, payload.content, payload.prompt, payload.sprout_id)
    except BaseLedgerException as e:
        raise map_exception_to_http(e)
    return ReflectionRecordedResponse(
        entry=SunEntryResponse.model_validate(entry),
        ledger=LedgerResponse(**ledger.snapshot()),
    )
