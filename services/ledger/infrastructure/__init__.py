# Infrastructure Layer
from .uow import (
    UnitOfWork,
    TwigRepository,
    SproutRepository,
    LedgerStateRepository,
)
from .clock import SystemClock, ManualClock
from .garden_store import GardenStore
