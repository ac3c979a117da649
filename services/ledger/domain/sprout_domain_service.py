"""
Sprout Domain Service - pure domain layer
=========================================
No session, no commit, no logging, no side effects.
Only the sprout state machine and the graft preconditions.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from exceptions import ValidationError


class SproutState(Enum):
    """All states a sprout can be in"""
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class TransitionReason(Enum):
    """Typical transition reasons"""
    GRAFTED = "Sprout grafted"
    HARVESTED = "Harvested with outcome"
    PRUNED = "Pruned without outcome"


@dataclass
class SproutTransitioned:
    """Domain event - a sprout changed state"""
    sprout_id: str
    from_state: Optional[str]
    to_state: str
    reason: str
    timestamp: datetime


class SproutDomainService:
    """
    PURE domain logic for sprout state transitions.

    Responsibilities:
    - transition validation (invariants)
    - state change
    - domain events

    Does NOT:
    - commit/flush
    - logging
    - side effects beyond the sprout passed in
    """

    TERMINAL_STATES = {SproutState.COMPLETED, SproutState.FAILED}

    ALLOWED_TRANSITIONS = {
        SproutState.ACTIVE.value: {
            SproutState.COMPLETED.value,
            SproutState.FAILED.value,
        },
    }

    def is_terminal(self, state: str) -> bool:
        return state in {s.value for s in self.TERMINAL_STATES}

    def transition(
        self,
        sprout,
        new_state: SproutState,
        at: datetime,
        reason: Optional[str] = None
    ) -> SproutTransitioned:
        """
        The ONLY way to change a sprout's state.

        Raises:
            ValidationError: the transition is not allowed
        """
        old_state = sprout._state
        new_state_str = new_state.value if isinstance(new_state, SproutState) else new_state

        if old_state == new_state_str:
            raise ValidationError(
                f"Sprout is already '{old_state}'",
                field="state",
                sprout_id=str(sprout.id),
            )

        if self.is_terminal(old_state):
            raise ValidationError(
                f"Cannot transition from terminal state '{old_state}'",
                field="state",
                sprout_id=str(sprout.id),
                current_state=old_state,
            )

        allowed = self.ALLOWED_TRANSITIONS.get(old_state, set())
        if new_state_str not in allowed:
            raise ValidationError(
                f"Invalid transition: cannot go from '{old_state}' to '{new_state_str}'",
                field="state",
                sprout_id=str(sprout.id),
                allowed=sorted(allowed),
            )

        sprout._state = new_state_str

        return SproutTransitioned(
            sprout_id=str(sprout.id),
            from_state=old_state,
            to_state=new_state_str,
            reason=reason or "State transition",
            timestamp=at,
        )

    # -------------------------------------------------------------------------
    # Graft preconditions
    # -------------------------------------------------------------------------

    def validate_title(self, title) -> str:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title must not be empty", field="title")
        return title

    def active_sprouts(self, sprouts: Iterable) -> list:
        return [s for s in sprouts if s._state == SproutState.ACTIVE.value]

    def has_active_sprout(self, sprouts: Iterable) -> bool:
        return bool(self.active_sprouts(sprouts))

    def ensure_no_active_sprout(self, sprouts: Iterable, leaf_id: str) -> None:
        """At most one active sprout per leaf."""
        active = self.active_sprouts(sprouts)
        if active:
            raise ValidationError(
                "This leaf already has an active sprout",
                field="leaf_id",
                leaf_id=leaf_id,
                active_sprout_id=str(active[0].id),
            )

    def validate_origin_sprout(self, origin, twig_id: str) -> None:
        """
        A sprout can only be grafted from a finished sprout of the same twig.
        Requiring the origin to be terminal and pre-existing keeps lineage
        forward-only: no new sprout can ever be its own ancestor.
        """
        if origin.twig_id != twig_id:
            raise ValidationError(
                "Graft origin belongs to another twig",
                field="origin_id",
                origin_id=str(origin.id),
                origin_twig_id=origin.twig_id,
            )
        if not self.is_terminal(origin._state):
            raise ValidationError(
                "Can only graft from a completed or failed sprout",
                field="origin_id",
                origin_id=str(origin.id),
                origin_state=origin._state,
            )


# Global instance for convenience
sprout_domain_service = SproutDomainService()
