# config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping
from zoneinfo import ZoneInfo

from domain import ShiftKind

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class HoursPolicy:
    """Constants the aggregator works with. Pass an alternate instance to change the rules."""
    default_hours: Mapping[ShiftKind, int] = field(default_factory=lambda: MappingProxyType({
        ShiftKind.MORNING: 12,
        ShiftKind.NIGHT: 12,
        ShiftKind.REST: 0,
    }))
    # horas nocturnas por duración del turno de noche
    nocturnal_hours: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({8: 6, 12: 9}))
    # duraciones que no están en la tabla
    nocturnal_fallback: int = 9
    max_comparison_periods: int = 6
    period_boundary_day: int = 20

    def hours_for(self, kind: ShiftKind, override: int | None = None) -> int:
        if kind is ShiftKind.REST:
            return 0
        return override if override is not None else self.default_hours[kind]

    def nocturnal_for(self, hours: int) -> int:
        # nunca más horas nocturnas que horas trabajadas
        return min(self.nocturnal_hours.get(hours, self.nocturnal_fallback), hours)


DEFAULT_POLICY = HoursPolicy()


# =========================
# Persistencia por entorno
# =========================
def _pick_data_dir() -> Path:
    """First writable directory among DATA_DIR, /data (mounted volume) and ./data."""
    env = os.getenv("DATA_DIR")
    candidates = ([Path(env)] if env else []) + [Path("/data"), Path.cwd() / "data"]
    for directory in candidates:
        marker = directory / ".write_check"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            marker.touch()
            marker.unlink()
        except OSError:
            continue
        return directory
    return Path.cwd()


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    database_url: str
    timezone: ZoneInfo
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        data_dir = _pick_data_dir()
        default_sqlite = f"sqlite:///{(data_dir / 'shifts.db').as_posix()}"
        return cls(
            data_dir=data_dir,
            database_url=os.getenv("DATABASE_URL", default_sqlite),
            timezone=ZoneInfo(os.getenv("APP_TZ", "Europe/Madrid")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    if level not in logging.getLevelNamesMapping():
        level = "INFO"
    logging.basicConfig(level=level, format=LOG_FORMAT)
