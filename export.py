# export.py
"""PDF export of one pay period: summary box plus a per-day detail table."""
from __future__ import annotations

import io
import logging
from datetime import date
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config import DEFAULT_POLICY, HoursPolicy
from domain import PeriodStatistics, PeriodWindow, ShiftKind, ShiftMap
from errors import ExportFailed
from services import PeriodStatisticsCalculator
from utils import month_name_es, shifts_to_dataframe

logger = logging.getLogger(__name__)

TITLE = "Calendario de Turnos"
BORDER_COLOR = colors.HexColor("#C7CCD6")
SHIFT_COLORS = {
    ShiftKind.MORNING.label: colors.Color(200 / 255, 150 / 255, 50 / 255),
    ShiftKind.NIGHT.label: colors.Color(80 / 255, 80 / 255, 150 / 255),
    ShiftKind.REST.label: colors.Color(100 / 255, 180 / 255, 100 / 255),
}


def pdf_file_name(reference_date: date, policy: HoursPolicy = DEFAULT_POLICY) -> str:
    start = PeriodStatisticsCalculator(policy).window_for(reference_date).start
    return f"turnos_{start.year}_{start.month:02d}.pdf"


def period_heading(window: PeriodWindow) -> str:
    return (f"Período: {window.start.day} de {month_name_es(window.start.month)} - "
            f"{window.end.day} de {month_name_es(window.end.month)} {window.end.year}")


def summary_lines(stats: PeriodStatistics) -> list[str]:
    return [
        f"Turnos Mañana ({ShiftKind.MORNING.default_time_range}): "
        f"{stats.morning_count} · {stats.morning_hours} h",
        f"Turnos Noche ({ShiftKind.NIGHT.default_time_range}): "
        f"{stats.night_count} · {stats.night_hours} h ({stats.night_hours_nocturnal} h nocturnas)",
        f"Días de Descanso: {stats.rest_count}",
        f"Total: {stats.total_days} días · {stats.total_hours} h trabajadas",
    ]


def _detail_table(df: pd.DataFrame, width: float, note_style: ParagraphStyle) -> Table:
    notes_col = list(df.columns).index("Notas")
    data = [list(df.columns)]
    for row in df.values.tolist():
        row[notes_col] = Paragraph(escape(row[notes_col]), note_style)
        data.append(row)
    fixed = [62, 58, 55, 40, 40, 40]
    table = Table(data, colWidths=fixed + [width - sum(fixed)], repeatRows=1, hAlign="CENTER")
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F5F5F7")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#E0E0E0")),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    turno_col = list(df.columns).index("Turno")
    for i, label in enumerate(df["Turno"], start=1):
        if label in SHIFT_COLORS:
            style.append(("TEXTCOLOR", (turno_col, i), (turno_col, i), SHIFT_COLORS[label]))
    table.setStyle(TableStyle(style))
    return table


def _draw_page_border(canvas, doc_obj):
    canvas.saveState()
    w, h = doc_obj.pagesize
    canvas.setStrokeColor(BORDER_COLOR)
    canvas.setLineWidth(0.8)
    margin = 12
    canvas.rect(margin, margin, w - 2 * margin, h - 2 * margin)
    canvas.restoreState()


def build_pdf(stats: PeriodStatistics, window: PeriodWindow, detail: pd.DataFrame) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, topMargin=24, bottomMargin=24, leftMargin=24, rightMargin=24)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(name="TitleCentered", parent=styles["Title"], alignment=TA_CENTER)
    period_style = ParagraphStyle(
        name="Period", parent=styles["Normal"], alignment=TA_CENTER,
        textColor=colors.HexColor("#505050"), fontSize=13, leading=16, spaceAfter=6,
    )
    summary_style = ParagraphStyle(
        name="Summary", parent=styles["Normal"], textColor=colors.HexColor("#3C3C3C"),
        fontSize=11, leading=14,
    )

    story = [Paragraph(TITLE, title_style), Paragraph(period_heading(window), period_style), Spacer(1, 10)]

    story.append(Paragraph("Resumen", styles["Heading2"]))
    summary_box = Table([[Paragraph(line, summary_style)] for line in summary_lines(stats)],
                        colWidths=[min(480, 0.9 * doc.width)], hAlign="LEFT")
    summary_box.setStyle(TableStyle([
        ("BOX", (0, 0), (-1, -1), 0.6, BORDER_COLOR),
        ("BACKGROUND", (0, 0), (-1, -1), colors.white),
        ("LEFTPADDING", (0, 0), (-1, -1), 8),
    ]))
    story += [summary_box, Spacer(1, 14)]

    story.append(Paragraph("Detalle de Turnos", styles["Heading2"]))
    if detail.empty:
        story.append(Paragraph("Sin turnos registrados en este período.", styles["Normal"]))
    else:
        note_style = ParagraphStyle(name="Note", parent=styles["Normal"], fontSize=8, leading=10)
        story.append(_detail_table(detail, doc.width, note_style))

    doc.build(story, onFirstPage=_draw_page_border, onLaterPages=_draw_page_border)
    return buf.getvalue()


def generate_period_pdf(shift_map: ShiftMap, reference_date: date, policy: HoursPolicy = DEFAULT_POLICY) -> bytes:
    """
    Builds the PDF for the pay period of `reference_date`.
    Raises ExportFailed if the document could not be written; retrying is up to the caller.
    """
    calculator = PeriodStatisticsCalculator(policy)
    window = calculator.window_for(reference_date)
    stats = calculator.aggregate(shift_map, window)
    detail = shifts_to_dataframe(calculator.detail(shift_map, window), policy)
    try:
        pdf_bytes = build_pdf(stats, window, detail)
    except Exception as e:
        logger.exception("PDF export failed for period %s", stats.period_id)
        raise ExportFailed(f"No se pudo generar el PDF del período {stats.period_label}") from e
    logger.info("PDF export for period %s: %d shifts, %d bytes", stats.period_id, len(detail), len(pdf_bytes))
    return pdf_bytes
