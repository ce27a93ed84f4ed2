# pcb_quote/services/delivery_date.py

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Union

from pcb_quote.services.config_loader import DEFAULT_ENGINE_CONFIG, EngineConfig

logger = logging.getLogger(__name__)

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class DeliveryDateResult:
    finish_date: date
    working_days: int
    calendar_days: int
    skipped_days: List[str] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finish_date": self.finish_date.isoformat(),
            "working_days": self.working_days,
            "calendar_days": self.calendar_days,
            "skipped_days": list(self.skipped_days),
            "reasons": list(self.reasons),
        }


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_working_day(day: Union[date, datetime], config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> bool:
    """Mon-Fri except public holidays, plus the make-up working weekends."""
    day = _as_date(day)
    if day in config.holidays:
        return False
    if day in config.working_weekends:
        return True
    return day.weekday() < 5


def next_working_day(day: Union[date, datetime], config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> date:
    current = _as_date(day) + timedelta(days=1)
    while not is_working_day(current, config):
        current += timedelta(days=1)
    return current


def working_days_between(
    start: Union[date, datetime], end: Union[date, datetime], config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> int:
    """Working days from ``start`` to ``end``, both inclusive."""
    current, end = _as_date(start), _as_date(end)
    count = 0
    while current <= end:
        if is_working_day(current, config):
            count += 1
        current += timedelta(days=1)
    return count


def _skip_label(day: date, config: EngineConfig) -> str:
    if day in config.holidays:
        return f"{day.isoformat()} (public holiday)"
    return f"{day.isoformat()} ({DAY_NAMES[day.weekday()]})"


def project_finish_date(
    start: datetime,
    cycle_days: int,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    apply_cutoff: bool = True,
) -> DeliveryDateResult:
    """
    Advance ``cycle_days`` working days from the order timestamp.

    Counting starts the day after ``start``. With ``apply_cutoff`` an order
    placed at or after the cut-off hour starts one more day later; leave it
    off when the cycle already carries the cut-off day.

    Args:
        start: Order timestamp
        cycle_days: Production cycle in working days
        config: Engine configuration with the holiday calendar
        apply_cutoff: Shift the start for late orders

    Returns:
        DeliveryDateResult with the finish date and the days that were skipped
    """
    reasons: List[str] = []
    skipped: List[str] = []
    current = _as_date(start) + timedelta(days=1)

    reasons.append(f"Start: {_as_date(start).isoformat()}, {cycle_days} working day(s) required")
    if apply_cutoff and isinstance(start, datetime) and start.hour >= config.order_cutoff_hour:
        current += timedelta(days=1)
        reasons.append(f"Order placed at {start.hour}:00, counting starts one day later")

    working = 0
    calendar = 0
    finish = current - timedelta(days=1)
    while working < cycle_days:
        calendar += 1
        if is_working_day(current, config):
            working += 1
            finish = current
        else:
            skipped.append(_skip_label(current, config))
        current += timedelta(days=1)

    reasons.append(f"Estimated finish: {finish.isoformat()} ({calendar} calendar days, {working} working days)")
    if skipped:
        more = "..." if len(skipped) > 3 else ""
        reasons.append(f"Skipped {len(skipped)} day(s): {', '.join(skipped[:3])}{more}")

    logger.debug(f"Projected {cycle_days} working days from {start} to {finish}")
    return DeliveryDateResult(
        finish_date=finish,
        working_days=working,
        calendar_days=calendar,
        skipped_days=skipped,
        reasons=reasons,
    )
