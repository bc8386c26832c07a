# services.py
from __future__ import annotations
import logging
import math
from datetime import date
from typing import Iterable, List, Optional, Sequence

from config import DEFAULT_POLICY, HoursPolicy
from domain import (
    ComparisonResult, PeriodId, PeriodStatistics, PeriodWindow, ShiftKind, ShiftMap,
    ShiftRecord, Trend, add_months, date_key, parse_date_key,
)
from errors import InvalidSelection, ShiftValidationError

logger = logging.getLogger(__name__)


def round_half_up(x: float) -> int:
    """Rounds .5 towards +infinity (not banker's rounding)."""
    return int(math.floor(x + 0.5))


def resolve_window(reference_date: date, boundary_day: int = DEFAULT_POLICY.period_boundary_day) -> PeriodWindow:
    """Pay period containing the reference month: the boundary day of that month to the next one, inclusive."""
    start = date(reference_date.year, reference_date.month, boundary_day)
    end = add_months(start, 1, day=boundary_day)
    return PeriodWindow(start=start, end=end)


class PeriodStatisticsCalculator:
    """Business rules for counting shifts and worked hours over a pay period."""
    def __init__(self, policy: HoursPolicy = DEFAULT_POLICY):
        self.policy = policy

    def window_for(self, reference: date | PeriodId) -> PeriodWindow:
        if isinstance(reference, PeriodId):
            reference = date(reference.year, reference.month, 1)
        return resolve_window(reference, self.policy.period_boundary_day)

    def shift_hours(self, record: ShiftRecord) -> int:
        spec = record.effective_hours_spec
        return self.policy.hours_for(record.kind, spec.hours if spec else None)

    def aggregate(self, shift_map: ShiftMap, window: PeriodWindow) -> PeriodStatistics:
        """
        Walks the window day by day and looks each date up in the (sparse) map.
        Absent dates count for nothing; rest days only add to rest_count.
        """
        stats = PeriodStatistics(
            period_id=PeriodId.from_date(window.start).id,
            period_label=PeriodId.from_date(window.start).label,
            year=window.start.year,
            month=window.start.month,
        )
        for d in window.days():
            record = shift_map.get(date_key(d))
            if record is None:
                continue
            if record.kind is ShiftKind.REST:
                stats.rest_count += 1
            elif record.kind is ShiftKind.MORNING:
                stats.morning_count += 1
                stats.morning_hours += self.shift_hours(record)
            elif record.kind is ShiftKind.NIGHT:
                hours = self.shift_hours(record)
                stats.night_count += 1
                stats.night_hours += hours
                stats.night_hours_nocturnal += self.policy.nocturnal_for(hours)

        stats.total_hours = stats.morning_hours + stats.night_hours
        return stats

    def period_statistics(self, shift_map: ShiftMap, reference: date | PeriodId) -> PeriodStatistics:
        return self.aggregate(shift_map, self.window_for(reference))

    def detail(self, shift_map: ShiftMap, window: PeriodWindow) -> List[ShiftRecord]:
        """Records inside the window, ascending by date."""
        return [shift_map[date_key(d)] for d in window.days() if date_key(d) in shift_map]


def calculate_trend(per_period: Sequence[PeriodStatistics]) -> Trend:
    """Percentage change between the first and the last period of the selection."""
    if len(per_period) < 2:
        return Trend()
    first = per_period[0].total_hours
    last = per_period[-1].total_hours
    if first == 0:
        return Trend()

    pct = round_half_up((last - first) / first * 100)
    direction = "up" if pct > 0 else "down" if pct < 0 else "neutral"
    return Trend(direction=direction, percentage=abs(pct))


class PeriodComparator:
    """Runs the aggregator over several periods and derives trend and roll-ups."""
    def __init__(self, calculator: Optional[PeriodStatisticsCalculator] = None, max_periods: Optional[int] = None):
        self.calculator = calculator or PeriodStatisticsCalculator()
        self.max_periods = max_periods if max_periods is not None else self.calculator.policy.max_comparison_periods

    def normalize_selection(self, period_ids: Iterable[PeriodId | str]) -> List[PeriodId]:
        """Drops repeated ids and truncates to max_periods, keeping selection order. Accepts "YYYY-MM" ids."""
        unique: List[PeriodId] = []
        for p in period_ids:
            if isinstance(p, str):
                p = PeriodId.parse(p)
            if p not in unique:
                unique.append(p)
        if len(unique) > self.max_periods:
            logger.warning("Comparison limited to %d periods, ignoring %d",
                           self.max_periods, len(unique) - self.max_periods)
            unique = unique[: self.max_periods]
        return unique

    def validate_selection(self, selected: Sequence[PeriodId], candidate: PeriodId) -> List[PeriodId]:
        """Returns the selection with `candidate` appended; refuses to grow past max_periods."""
        if candidate in selected:
            return list(selected)
        if len(selected) >= self.max_periods:
            raise InvalidSelection(f"Puedes comparar hasta {self.max_periods} períodos a la vez")
        return [*selected, candidate]

    def compare_many(self, shift_map: ShiftMap, period_ids: Iterable[PeriodId | str]) -> ComparisonResult:
        per_period = [
            self.calculator.period_statistics(shift_map, p) for p in self.normalize_selection(period_ids)
        ]
        if not per_period:
            return ComparisonResult()

        total = sum(s.total_hours for s in per_period)
        return ComparisonResult(
            per_period=per_period,
            trend=calculate_trend(per_period),
            average=round_half_up(total / len(per_period)),
            total=total,
        )


def available_periods(shift_map: ShiftMap, today: date) -> List[PeriodId]:
    """
    Candidate periods for the comparison selector.
    Empty map: the 12 months of today's year. Otherwise every month from the first
    shift to one month past the last one, most recent first.
    """
    dates = []
    for key in shift_map:
        try:
            dates.append(parse_date_key(key))
        except ShiftValidationError:
            logger.debug("Skipping malformed shift key %r", key)
    if not dates:
        return [PeriodId(today.year, m) for m in range(1, 13)]

    first = PeriodId.from_date(min(dates))
    last = PeriodId.from_date(max(dates)).shifted(1)
    periods = []
    current = first
    while current <= last:
        periods.append(current)
        current = current.shifted(1)
    return list(reversed(periods))
