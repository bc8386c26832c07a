from __future__ import annotations

from datetime import date

from domain import HoursSpec, PeriodStatistics, ShiftKind, ShiftRecord
from factories import shift
from utils import (
    CHART_COLUMNS, DETAIL_COLUMNS, comparison_chart_dataframe, comparison_summary_dataframe, day_button_label,
    shifts_to_dataframe,
)


def test_detail_dataframe_is_ascending():
    records = [
        ShiftRecord(date="2024-02-01", kind=ShiftKind.NIGHT,
                    hours_spec=HoursSpec(hours=8, start_time="22:00", end_time="06:00")),
        shift("2024-01-20", ShiftKind.MORNING, note="formación"),
        shift("2024-01-22", ShiftKind.REST),
    ]
    df = shifts_to_dataframe(records)

    assert list(df.columns) == DETAIL_COLUMNS
    assert list(df["Fecha"]) == ["20/01/2024", "22/01/2024", "01/02/2024"]
    assert list(df["Día"]) == ["Sábado", "Lunes", "Jueves"]
    assert list(df["Turno"]) == ["Mañana", "Descanso", "Noche"]
    assert list(df["Horas"]) == ["12h", "", "8h"]
    assert df.loc[2, "Inicio"] == "22:00"
    assert df.loc[0, "Notas"] == "formación"


def test_detail_dataframe_empty():
    df = shifts_to_dataframe([])
    assert df.empty
    assert list(df.columns) == DETAIL_COLUMNS


def _stats(month: int, total: int, morning: int = 0, night: int = 0, rest: int = 0) -> PeriodStatistics:
    return PeriodStatistics(
        period_id=f"2024-{month:02d}", period_label=f"Mes{month} 2024", year=2024, month=month,
        morning_count=morning, night_count=night, rest_count=rest,
        morning_hours=morning * 12, night_hours=night * 12, night_hours_nocturnal=night * 9,
        total_hours=total,
    )


def test_chart_dataset_keeps_selection_order():
    df = comparison_chart_dataframe([_stats(3, 24, night=2), _stats(1, 12, morning=1, rest=4)])
    assert list(df.index) == ["Mes3 2024", "Mes1 2024"]
    assert list(df.columns) == CHART_COLUMNS
    assert df.loc["Mes1 2024", "Días Descanso"] == 4
    assert df.loc["Mes3 2024", "Horas Totales"] == 24


def test_chart_dataset_empty():
    df = comparison_chart_dataframe([])
    assert df.empty
    assert list(df.columns) == CHART_COLUMNS


def test_summary_table():
    df = comparison_summary_dataframe([_stats(1, 36, morning=1, night=2)])
    row = df.iloc[0]
    assert row["Turnos Noche"] == "2 (24h)"
    assert row["Horas Nocturnas"] == 18


def test_day_button_label_marks_today():
    today = date(2024, 1, 25)
    assert day_button_label(date(2024, 1, 24), None, today) == "24"
    assert day_button_label(today, None, today) == "**:red[25]**"
    assert day_button_label(today, shift("2024-01-25", ShiftKind.NIGHT), today) == "**:red[25]** 🌙"
