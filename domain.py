# domain.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterator, Mapping, Optional

from errors import ShiftValidationError

MONTHS_ES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]
WEEKDAYS_ES = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]

ALLOWED_HOURS = (8, 12)
MAX_NOTE_LENGTH = 200


class ShiftKind(str, Enum):
    """The only classifications a calendar date can carry."""
    MORNING = "morning"
    NIGHT = "night"
    REST = "rest"

    @classmethod
    def parse(cls, value: str | ShiftKind) -> ShiftKind:
        try:
            return cls(value)
        except ValueError:
            raise ShiftValidationError(f"Tipo de turno desconocido: {value!r}") from None

    @property
    def label(self) -> str:
        return {"morning": "Mañana", "night": "Noche", "rest": "Descanso"}[self.value]

    @property
    def long_label(self) -> str:
        return {
            "morning": "Turno Mañana",
            "night": "Turno Noche",
            "rest": "Día de Descanso",
        }[self.value]

    @property
    def default_time_range(self) -> str:
        return {"morning": "07:00 - 19:00", "night": "19:00 - 07:00", "rest": "Sin trabajo"}[self.value]

    @property
    def is_worked(self) -> bool:
        return self is not ShiftKind.REST


@dataclass(frozen=True)
class HoursSpec:
    """Custom length of a worked shift. Start/end are display only."""
    hours: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    def __post_init__(self):
        if self.hours not in ALLOWED_HOURS:
            raise ShiftValidationError(f"Horas no permitidas: {self.hours} (solo 8 o 12)")


@dataclass(frozen=True)
class ShiftRecord:
    """One entry of the shift map. `date` must match the key it is stored under."""
    date: str
    kind: ShiftKind
    note: Optional[str] = None
    hours_spec: Optional[HoursSpec] = None

    def __post_init__(self):
        parse_date_key(self.date)
        object.__setattr__(self, "kind", ShiftKind.parse(self.kind))
        if self.note is not None and len(self.note) > MAX_NOTE_LENGTH:
            raise ShiftValidationError(
                f"La nota admite como máximo {MAX_NOTE_LENGTH} caracteres ({len(self.note)})"
            )

    @property
    def work_date(self) -> date:
        return parse_date_key(self.date)

    @property
    def effective_hours_spec(self) -> Optional[HoursSpec]:
        """Hours override as seen by computations: never applies to rest days."""
        if self.kind is ShiftKind.REST:
            return None
        return self.hours_spec

    def normalized(self) -> ShiftRecord:
        """Copy without an hours override on rest days."""
        if self.kind is ShiftKind.REST and self.hours_spec is not None:
            return replace(self, hours_spec=None)
        return self


ShiftMap = Mapping[str, ShiftRecord]


def date_key(d: date) -> str:
    return d.isoformat()


def parse_date_key(key: str) -> date:
    try:
        d = date.fromisoformat(key)
    except (TypeError, ValueError):
        d = None
    # fromisoformat también acepta 20240125 o 2024-W04-4: solo vale la forma canónica
    if d is None or d.isoformat() != key:
        raise ShiftValidationError(f"Fecha no válida (se espera YYYY-MM-DD): {key!r}")
    return d


def add_months(d: date, months: int, day: int | None = None) -> date:
    """Calendar-safe month shift; `day` defaults to d.day and must exist in the target month."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, d.day if day is None else day)


def set_shift(shift_map: ShiftMap, key: str, record: ShiftRecord) -> Dict[str, ShiftRecord]:
    """Returns a new map with `record` stored at `key`, replacing any previous entry."""
    if record.date != key:
        raise ShiftValidationError(f"La fecha del turno ({record.date}) no coincide con la clave {key}")
    new_map = dict(shift_map)
    new_map[key] = record.normalized()
    return new_map


def delete_shift(shift_map: ShiftMap, key: str) -> Dict[str, ShiftRecord]:
    """Returns a new map without `key`. No-op if absent."""
    new_map = dict(shift_map)
    new_map.pop(key, None)
    return new_map


@dataclass(frozen=True, order=True)
class PeriodId:
    """A pay period named after the month it starts in (month is 1-12)."""
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ShiftValidationError(f"Mes no válido: {self.month} (1-12)")

    @classmethod
    def from_date(cls, d: date) -> PeriodId:
        return cls(d.year, d.month)

    @classmethod
    def parse(cls, value: str) -> PeriodId:
        try:
            y, m = value.split("-")
            return cls(int(y), int(m))
        except ValueError:
            raise ShiftValidationError(f"Período no válido (se espera YYYY-MM): {value!r}") from None

    @property
    def id(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return f"{MONTHS_ES[self.month - 1]} {self.year}"

    def shifted(self, months: int) -> PeriodId:
        return PeriodId.from_date(add_months(date(self.year, self.month, 1), months))


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive [start, end] range between two consecutive boundary days."""
    start: date
    end: date

    def days(self) -> Iterator[date]:
        d = self.start
        while d <= self.end:
            yield d
            d += timedelta(days=1)

    def __contains__(self, d: date) -> bool:
        return self.start <= d <= self.end

    @property
    def description(self) -> str:
        return (f"Del {self.start.day} de {MONTHS_ES[self.start.month - 1]} "
                f"al {self.end.day} de {MONTHS_ES[self.end.month - 1]}")

    @property
    def period_text(self) -> str:
        start_label = f"{MONTHS_ES[self.start.month - 1]} {self.start.year}"
        end_label = f"{MONTHS_ES[self.end.month - 1]} {self.end.year}"
        return start_label if start_label == end_label else f"{start_label} - {end_label}"


@dataclass
class PeriodStatistics:
    """Aggregation result for one period window."""
    period_id: str
    period_label: str
    year: int
    month: int
    morning_count: int = 0
    night_count: int = 0
    rest_count: int = 0
    morning_hours: int = 0
    night_hours: int = 0
    night_hours_nocturnal: int = 0
    total_hours: int = 0

    @property
    def total_days(self) -> int:
        return self.morning_count + self.night_count + self.rest_count


@dataclass(frozen=True)
class Trend:
    direction: str = "neutral"  # up | down | neutral
    percentage: int = 0


@dataclass
class ComparisonResult:
    per_period: list[PeriodStatistics] = field(default_factory=list)
    trend: Trend = field(default_factory=Trend)
    average: int = 0
    total: int = 0
