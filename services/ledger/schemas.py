from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


# =============================================================================
# Ledger Schemas
# =============================================================================

class LedgerResponse(BaseModel):
    soil_available: int
    soil_capacity: int
    sun_available: int
    sun_capacity: int
    sun_replenished_at: Optional[str] = None


class SoilCostResponse(BaseModel):
    season: str
    environment: str
    cost: int
    affordable: bool
    soil_available: int


class ReplenishResponse(BaseModel):
    replenished: bool
    ledger: LedgerResponse


# =============================================================================
# Sprout Lifecycle Schemas
# =============================================================================

class GraftRequest(BaseModel):
    """Request body for planting/grafting a sprout on a leaf"""
    title: str = Field(..., max_length=60, description="What's the new goal?")
    season: str = Field(..., description="1w | 2w | 1m | 3m | 6m | 1y")
    environment: str = Field(..., description="fertile | firm | barren")
    origin_id: Optional[str] = Field(None, description="Finished sprout (or leaf) this one continues")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Run three times a week",
                "season": "1m",
                "environment": "firm",
                "origin_id": None
            }
        }


class CompleteRequest(BaseModel):
    """Request body for harvesting a sprout"""
    result: int = Field(..., description="Outcome 1..5")
    reflection: Optional[str] = Field(None, max_length=2000)


class WaterRequest(BaseModel):
    content: str
    prompt: Optional[str] = None


class ReflectionRequest(BaseModel):
    """Request body for the weekly twig reflection"""
    content: str
    prompt: Optional[str] = None
    sprout_id: Optional[str] = Field(None, description="Sprout the reflection was opened from")


class WaterEntryResponse(BaseModel):
    timestamp: datetime
    content: str
    prompt: Optional[str] = None

    class Config:
        from_attributes = True


class SunEntryResponse(BaseModel):
    twig_id: str
    sprout_id: Optional[str] = None
    timestamp: datetime
    content: str
    prompt: Optional[str] = None

    class Config:
        from_attributes = True


class SproutResponse(BaseModel):
    id: str
    twig_id: str
    leaf_id: str
    title: str
    season: str
    environment: str
    state: str
    soil_cost: int
    created_at: datetime
    activated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    end_date: Optional[datetime] = None
    result: Optional[int] = None
    reflection: Optional[str] = None
    grafted_from_id: Optional[str] = None
    water_entries: List[WaterEntryResponse] = []

    class Config:
        from_attributes = True


class GraftResponse(BaseModel):
    sprout: SproutResponse
    ledger: LedgerResponse


# =============================================================================
# Timeline / Reflection Schemas
# =============================================================================

class TimelineEventResponse(BaseModel):
    type: str
    timestamp: str
    sprout_id: str
    sprout_title: str
    data: Dict[str, Any] = {}


class TimelineResponse(BaseModel):
    twig_id: str
    leaf_id: str
    has_active_sprout: bool
    events: List[TimelineEventResponse]


class ReflectionStatusResponse(BaseModel):
    twig_id: str
    reflected_this_week: bool
    week_start: str
    sun_available: int
    sun_capacity: int
    can_reflect: bool


class ReflectionPromptResponse(BaseModel):
    twig_id: str
    prompt: str


class ReflectionRecordedResponse(BaseModel):
    entry: SunEntryResponse
    ledger: LedgerResponse
