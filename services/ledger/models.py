from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer, CheckConstraint
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship, validates
from sqlalchemy.types import TypeDecorator
from datetime import timezone
import uuid
from database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """
    Stores UTC datetimes and always hands back timezone-aware values.

    SQLite drops tzinfo on the way out; comparing those against the
    clock's aware values would raise.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# =============================================================================
# GARDEN TREE: Twig -> Leaf, Twig -> Sprout (by leaf_id)
# =============================================================================

class Twig(Base):
    """Life-facet category. Owns its leaves and its weekly reflections."""
    __tablename__ = "twigs"

    id = Column(String, primary_key=True, default=_new_id)
    label = Column(String, nullable=True)
    status = Column(String, default="active", nullable=False)
    created_at = Column(UTCDateTime, nullable=False)

    leaves = relationship(
        "Leaf",
        back_populates="twig",
        cascade="all, delete-orphan",
        order_by="Leaf.created_at",
    )
    sun_entries = relationship(
        "SunEntry",
        back_populates="twig",
        cascade="all, delete-orphan",
        order_by="SunEntry.timestamp",
    )
    sprouts = relationship(
        "Sprout",
        back_populates="twig",
        cascade="all, delete-orphan",
        order_by="Sprout.created_at",
    )


class Leaf(Base):
    """Goal thread within a twig. Sprouts point at it by id only."""
    __tablename__ = "leaves"

    id = Column(String, primary_key=True, default=_new_id)
    twig_id = Column(String, ForeignKey("twigs.id"), nullable=False, index=True)
    status = Column(String, default="active", nullable=False)
    created_at = Column(UTCDateTime, nullable=False)

    twig = relationship("Twig", back_populates="leaves")


class Sprout(Base):
    """One goal instance."""
    __tablename__ = "sprouts"
    __table_args__ = (
        CheckConstraint("soil_cost >= 0", name="ck_sprouts_soil_cost_non_negative"),
        CheckConstraint("result IS NULL OR (result BETWEEN 1 AND 5)", name="ck_sprouts_result_range"),
    )

    id = Column(String, primary_key=True, default=_new_id)
    twig_id = Column(String, ForeignKey("twigs.id"), nullable=False, index=True)
    leaf_id = Column(String, nullable=False, index=True)  # weak reference, no FK

    title = Column(String, nullable=False)
    season = Column(String, nullable=False)        # 1w | 2w | 1m | 3m | 6m | 1y
    environment = Column(String, nullable=False)   # fertile | firm | barren
    _state = Column('state', String, default="active", nullable=False)
    soil_cost = Column(Integer, nullable=False, default=0)

    created_at = Column(UTCDateTime, nullable=False)
    activated_at = Column(UTCDateTime, nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)
    end_date = Column(UTCDateTime, nullable=True)

    # Outcome, set on completion
    result = Column(Integer, nullable=True)
    reflection = Column(Text, nullable=True)

    # Lineage: id of the sprout (or leaf) this one continues from
    grafted_from_id = Column(String, nullable=True, index=True)

    # 🔒 PROTECTION: Direct state assignment is FORBIDDEN
    # Use SproutDomainService.transition() instead
    @hybrid_property
    def state(self):
        """Read-only state - use SproutDomainService.transition() to change"""
        return self._state

    @state.setter
    def state(self, value):
        raise RuntimeError(
            f"DIRECT STATE ASSIGNMENT BLOCKED: sprout.state = '{value}'. "
            f"Use SproutLifecycleService.complete()/fail() instead."
        )

    @validates("grafted_from_id")
    def _validate_grafted_from_id(self, key, value):
        current = self.__dict__.get("grafted_from_id")
        if current is not None and value != current:
            raise RuntimeError(
                f"grafted_from_id is immutable once set (sprout {self.id}: {current!r} -> {value!r})"
            )
        return value

    twig = relationship("Twig", back_populates="sprouts")
    water_entries = relationship(
        "WaterEntry",
        back_populates="sprout",
        cascade="all, delete-orphan",
        order_by="WaterEntry.timestamp",
    )
    sun_entries = relationship(
        "SunEntry",
        back_populates="sprout",
        order_by="SunEntry.timestamp",
    )


# =============================================================================
# JOURNAL ENTRIES
# =============================================================================

class WaterEntry(Base):
    """Free-form journal entry on a sprout"""
    __tablename__ = "water_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sprout_id = Column(String, ForeignKey("sprouts.id"), nullable=False, index=True)
    timestamp = Column(UTCDateTime, nullable=False)
    content = Column(Text, nullable=False)
    prompt = Column(Text, nullable=True)

    sprout = relationship("Sprout", back_populates="water_entries")


class SunEntry(Base):
    """
    Weekly reflection on a twig.

    sprout_id is set when the reflection was opened from a sprout; the
    entry then also shows up on that sprout's timeline.
    """
    __tablename__ = "sun_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    twig_id = Column(String, ForeignKey("twigs.id"), nullable=False, index=True)
    sprout_id = Column(String, ForeignKey("sprouts.id"), nullable=True, index=True)
    timestamp = Column(UTCDateTime, nullable=False)
    content = Column(Text, nullable=False)
    prompt = Column(Text, nullable=True)

    twig = relationship("Twig", back_populates="sun_entries")
    sprout = relationship("Sprout", back_populates="sun_entries")


# =============================================================================
# RESOURCE LEDGER STATE
# =============================================================================

class LedgerState(Base):
    """
    Soil and sun balances. One row per garden.

    sun_replenished_at holds the Monday (00:00 UTC) of the week sun was
    last reset to capacity.
    """
    __tablename__ = "ledger_state"
    __table_args__ = (
        CheckConstraint("soil_available >= 0", name="ck_ledger_soil_non_negative"),
        CheckConstraint("sun_available >= 0", name="ck_ledger_sun_non_negative"),
    )

    id = Column(Integer, primary_key=True, default=1)
    soil_capacity = Column(Integer, nullable=False)
    soil_available = Column(Integer, nullable=False)
    sun_capacity = Column(Integer, nullable=False)
    sun_available = Column(Integer, nullable=False)
    sun_replenished_at = Column(UTCDateTime, nullable=True)
    updated_at = Column(UTCDateTime, nullable=True)
