# utils.py
from datetime import date
from typing import Iterable, Optional, Sequence

import pandas as pd

from config import DEFAULT_POLICY, HoursPolicy
from domain import MONTHS_ES, WEEKDAYS_ES, PeriodStatistics, ShiftKind, ShiftRecord

DETAIL_COLUMNS = ["Fecha", "Día", "Turno", "Horas", "Inicio", "Fin", "Notas"]
CHART_COLUMNS = ["Horas Totales", "Turnos Mañana", "Turnos Noche", "Días Descanso"]
SHIFT_ICONS = {ShiftKind.MORNING: "☀️", ShiftKind.NIGHT: "🌙", ShiftKind.REST: "🍃"}


def month_name_es(month: int) -> str:
    return MONTHS_ES[month - 1]


def format_hours(hours: int) -> str:
    return f"{hours}h"


def day_button_label(d: date, record: Optional[ShiftRecord], today: date) -> str:
    """Calendar cell text: day number (red and bold for today) plus the shift icon."""
    day = f"**:red[{d.day}]**" if d == today else str(d.day)
    return f"{day} {SHIFT_ICONS[record.kind]}" if record else day


def shifts_to_dataframe(records: Iterable[ShiftRecord], policy: HoursPolicy = DEFAULT_POLICY) -> pd.DataFrame:
    rows = []
    for r in records:
        d = r.work_date
        spec = r.effective_hours_spec
        hours = policy.hours_for(r.kind, spec.hours if spec else None)
        rows.append({
            "Fecha": d.strftime("%d/%m/%Y"),
            "Día": WEEKDAYS_ES[d.weekday()],
            "Turno": r.kind.label,
            "Horas": format_hours(hours) if r.kind.is_worked else "",
            "Inicio": (spec.start_time if spec else None) or "",
            "Fin": (spec.end_time if spec else None) or "",
            "Notas": r.note or "",
            "_key": r.date,
        })
    if not rows:
        return pd.DataFrame(columns=DETAIL_COLUMNS)
    df = pd.DataFrame(rows)
    df = df.sort_values(["_key"]).drop(columns=["_key"]).reset_index(drop=True)
    return df[DETAIL_COLUMNS]


def comparison_chart_dataframe(per_period: Sequence[PeriodStatistics]) -> pd.DataFrame:
    """Chart dataset: one row per period, indexed by the period label, in selection order."""
    rows = [{
        "Período": s.period_label,
        "Horas Totales": s.total_hours,
        "Turnos Mañana": s.morning_count,
        "Turnos Noche": s.night_count,
        "Días Descanso": s.rest_count,
    } for s in per_period]
    if not rows:
        return pd.DataFrame(columns=CHART_COLUMNS)
    return pd.DataFrame(rows).set_index("Período")


def comparison_summary_dataframe(per_period: Sequence[PeriodStatistics]) -> pd.DataFrame:
    rows = [{
        "Período": s.period_label,
        "Total Horas": s.total_hours,
        "Turnos Mañana": f"{s.morning_count} ({format_hours(s.morning_hours)})",
        "Turnos Noche": f"{s.night_count} ({format_hours(s.night_hours)})",
        "Días Descanso": s.rest_count,
        "Horas Nocturnas": s.night_hours_nocturnal,
    } for s in per_period]
    return pd.DataFrame(rows)
