"""
Timeline Assembler
==================

Flattens a thread's sprouts into one list of events, most recent first.
Pure: reads sprouts, never mutates them, keeps no state between calls.

Ordering: timestamps strictly non-increasing. Python's sort is stable
(also with reverse=True), so events sharing a timestamp keep expansion
order: per sprout start, graft-origin, waterings, reflections, completion;
sprouts in input order. A freshly grafted sprout therefore lists its start
before its graft-origin marker.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

UNKNOWN_ORIGIN_TITLE = "previous sprout"


class EventType(str, Enum):
    START = "start"
    GRAFT_ORIGIN = "graft-origin"
    WATERING = "watering"
    REFLECTION = "reflection"
    COMPLETION = "completion"


@dataclass(frozen=True)
class TimelineEvent:
    type: EventType
    timestamp: datetime
    sprout_id: str
    sprout_title: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["type"] = self.type.value
        payload["timestamp"] = self.timestamp.isoformat()
        return payload


def build_timeline(sprouts: Iterable) -> List[TimelineEvent]:
    """Expand every sprout into its events and sort them newest first."""
    sprouts = list(sprouts)
    titles = {s.id: s.title for s in sprouts}
    events: List[TimelineEvent] = []

    for sprout in sprouts:
        events.extend(_expand(sprout, titles))

    return sorted(events, key=lambda e: e.timestamp, reverse=True)


def _expand(sprout, titles: Dict[str, str]) -> List[TimelineEvent]:
    def event(kind: EventType, timestamp: datetime, **data) -> TimelineEvent:
        return TimelineEvent(
            type=kind,
            timestamp=timestamp,
            sprout_id=sprout.id,
            sprout_title=sprout.title,
            data=data,
        )

    events = [
        event(
            EventType.START,
            sprout.activated_at or sprout.created_at,
            season=sprout.season,
            environment=sprout.environment,
            end_date=_iso(sprout.end_date),
        )
    ]

    if sprout.grafted_from_id:
        events.append(event(
            EventType.GRAFT_ORIGIN,
            sprout.created_at,
            grafted_from_id=sprout.grafted_from_id,
            grafted_from_title=titles.get(sprout.grafted_from_id, UNKNOWN_ORIGIN_TITLE),
        ))

    for water in sprout.water_entries or []:
        events.append(event(EventType.WATERING, water.timestamp, content=water.content, prompt=water.prompt))

    for sun in sprout.sun_entries or []:
        events.append(event(EventType.REFLECTION, sun.timestamp, content=sun.content, prompt=sun.prompt))

    if sprout.completed_at:
        events.append(event(
            EventType.COMPLETION,
            sprout.completed_at,
            result=sprout.result,
            reflection=sprout.reflection,
            is_success=sprout.state == "completed",
        ))

    return events


def _iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment else None
