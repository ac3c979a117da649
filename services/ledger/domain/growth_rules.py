"""
Growth Rules - pure domain layer
================================
No session, no logging, no side effects.
Seasons, environments, soil costs, end dates and the calendar week.
"""
import calendar
import math
from datetime import datetime, timedelta, timezone
from enum import Enum

from exceptions import ValidationError


class Season(str, Enum):
    """Duration class of a sprout, shortest first"""
    ONE_WEEK = "1w"
    TWO_WEEKS = "2w"
    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"

    @property
    def label(self) -> str:
        return SEASON_LABELS[self]

    @classmethod
    def parse(cls, value) -> "Season":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Unknown season: {value!r}",
                field="season",
                allowed=[s.value for s in cls],
            ) from None


class Environment(str, Enum):
    """Commitment class of a sprout, gentlest first"""
    FERTILE = "fertile"
    FIRM = "firm"
    BARREN = "barren"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value) -> "Environment":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Unknown environment: {value!r}",
                field="environment",
                allowed=[e.value for e in cls],
            ) from None


SEASON_LABELS = {
    Season.ONE_WEEK: "1 week",
    Season.TWO_WEEKS: "2 weeks",
    Season.ONE_MONTH: "1 month",
    Season.THREE_MONTHS: "3 months",
    Season.SIX_MONTHS: "6 months",
    Season.ONE_YEAR: "1 year",
}

# Soil cost = ceil(base * multiplier); both tables are monotonic
SEASON_BASE_COST = {
    Season.ONE_WEEK: 5,
    Season.TWO_WEEKS: 8,
    Season.ONE_MONTH: 13,
    Season.THREE_MONTHS: 25,
    Season.SIX_MONTHS: 40,
    Season.ONE_YEAR: 60,
}

ENVIRONMENT_MULTIPLIER = {
    Environment.FERTILE: 1.0,
    Environment.FIRM: 1.5,
    Environment.BARREN: 2.0,
}

# Seasons measured in days; the rest are calendar months
SEASON_DAYS = {
    Season.ONE_WEEK: 7,
    Season.TWO_WEEKS: 14,
}

SEASON_MONTHS = {
    Season.ONE_MONTH: 1,
    Season.THREE_MONTHS: 3,
    Season.SIX_MONTHS: 6,
    Season.ONE_YEAR: 12,
}

RESULT_MIN = 1
RESULT_MAX = 5


def soil_cost(season, environment) -> int:
    """Soil needed to plant a sprout of the given season and environment."""
    season = Season.parse(season)
    environment = Environment.parse(environment)
    return math.ceil(SEASON_BASE_COST[season] * ENVIRONMENT_MULTIPLIER[environment])


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def end_date_for(season, activated_at: datetime, anchor_hour: int = 15) -> datetime:
    """
    End date of a sprout activated at `activated_at`.

    Day-based seasons add 7/14 days, the others add calendar months
    (a year is twelve). The result is pinned to `anchor_hour`:00 UTC.
    """
    season = Season.parse(season)
    start = as_utc(activated_at)

    if season in SEASON_DAYS:
        end = start + timedelta(days=SEASON_DAYS[season])
    else:
        end = add_months(start, SEASON_MONTHS[season])

    return end.replace(hour=anchor_hour, minute=0, second=0, microsecond=0)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def week_start(moment: datetime) -> datetime:
    """Monday 00:00 UTC of the calendar week containing `moment`."""
    moment = as_utc(moment)
    monday = moment - timedelta(days=moment.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def same_week(first: datetime, second: datetime) -> bool:
    return week_start(first) == week_start(second)


def validate_result(result) -> int:
    """Outcome results are integers 1..5; nothing is clamped."""
    if isinstance(result, bool) or not isinstance(result, int):
        raise ValidationError("Result must be an integer", field="result", value=repr(result))
    if not RESULT_MIN <= result <= RESULT_MAX:
        raise ValidationError(
            f"Result must be between {RESULT_MIN} and {RESULT_MAX}",
            field="result",
            value=result,
        )
    return result
