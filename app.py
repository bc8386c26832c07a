# app.py
# -----------------------------------------------
# 📅 Mi Calendario de turnos (Streamlit)
# -----------------------------------------------
# Requiere: streamlit, sqlmodel, pandas, reportlab, psycopg2-binary (si usas Postgres)
# Períodos de pago del día 20 de un mes al día 20 del siguiente (ambos incluidos).

import calendar
from datetime import date, datetime

import streamlit as st

from config import DEFAULT_POLICY, Settings, configure_logging
from domain import (
    MONTHS_ES, HoursSpec, PeriodId, ShiftKind, ShiftRecord, add_months, date_key, delete_shift, set_shift,
)
from errors import ExportFailed, InvalidSelection, ShiftValidationError
from export import generate_period_pdf, pdf_file_name
from repository import ShiftRepository
from services import PeriodComparator, PeriodStatisticsCalculator, available_periods
from utils import (
    SHIFT_ICONS, comparison_chart_dataframe, comparison_summary_dataframe, day_button_label, shifts_to_dataframe,
)

SETTINGS = Settings.from_env()
configure_logging(SETTINGS.log_level)

TITULO_APP = "Mi Calendario"
DIAS_CORTOS = ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]
OPCIONES_HORAS = [f"Por defecto ({DEFAULT_POLICY.default_hours[ShiftKind.MORNING]} h)", "8 h", "12 h"]

st.set_page_config(page_title=TITULO_APP, page_icon="📅", layout="wide")


def hoy_local() -> date:
    return datetime.now(SETTINGS.timezone).date()


@st.cache_resource
def get_repo(url: str):
    return ShiftRepository(url, echo=False)


repo = get_repo(SETTINGS.database_url)
calculator = PeriodStatisticsCalculator(DEFAULT_POLICY)
comparator = PeriodComparator(calculator)

st.title(f"📅 {TITULO_APP}")
st.caption("Organiza tus turnos de trabajo")

# =========================
# Estado efímero de la vista
# =========================
hoy = hoy_local()
if "mes_visible" not in st.session_state:
    st.session_state["mes_visible"] = date(hoy.year, hoy.month, 1)
if "fecha_seleccionada" not in st.session_state:
    st.session_state["fecha_seleccionada"] = None
if "periodos_comparados" not in st.session_state:
    st.session_state["periodos_comparados"] = []


def _flash_success_if_any():
    msg = st.session_state.pop("_flash_success", None)
    if msg:
        st.toast(msg, icon="✅")


def _mover_mes(delta: int):
    st.session_state["mes_visible"] = add_months(st.session_state["mes_visible"], delta)


def _seleccionar(d: date):
    st.session_state["fecha_seleccionada"] = d


def _pdf_descargado():
    st.session_state["_flash_success"] = "PDF generado exitosamente"


_flash_success_if_any()
shifts = repo.load_map()
mes_visible: date = st.session_state["mes_visible"]

col_cal, col_stats = st.columns(2, gap="large")

# =========================
# 🗓️ Calendario
# =========================
with col_cal:
    nav_prev, nav_label, nav_next = st.columns([1, 4, 1])
    nav_prev.button("◀", on_click=_mover_mes, args=(-1,), use_container_width=True)
    nav_label.markdown(f"### {MONTHS_ES[mes_visible.month - 1]} {mes_visible.year}")
    nav_next.button("▶", on_click=_mover_mes, args=(1,), use_container_width=True)

    cabecera = st.columns(7)
    for col, nombre in zip(cabecera, DIAS_CORTOS):
        col.markdown(f"**{nombre}**")

    for semana in calendar.Calendar(firstweekday=0).monthdatescalendar(mes_visible.year, mes_visible.month):
        cols = st.columns(7)
        for col, d in zip(cols, semana):
            if d.month != mes_visible.month:
                col.write("")
                continue
            col.button(
                day_button_label(d, shifts.get(date_key(d)), hoy),
                key=f"dia_{date_key(d)}",
                on_click=_seleccionar,
                args=(d,),
                type="primary" if d == st.session_state["fecha_seleccionada"] else "secondary",
                use_container_width=True,
            )

    # =========================
    # ✏️ Seleccionar turno
    # =========================
    seleccion: date | None = st.session_state["fecha_seleccionada"]
    if seleccion is not None:
        clave = date_key(seleccion)
        actual = repo.get(clave)
        st.subheader("Seleccionar Turno")
        st.caption(seleccion.strftime("%d/%m/%Y"))

        tipos = list(ShiftKind)
        with st.form(f"form_turno_{clave}"):
            tipo = st.radio(
                "Turno",
                tipos,
                index=tipos.index(actual.kind) if actual else 0,
                format_func=lambda k: f"{SHIFT_ICONS[k]} {k.long_label} ({k.default_time_range})",
            )
            nota = st.text_input("Nota (opcional)", value=(actual.note or "") if actual else "", max_chars=200)
            spec_actual = actual.effective_hours_spec if actual else None
            horas = st.selectbox(
                "Horas", OPCIONES_HORAS,
                index=OPCIONES_HORAS.index(f"{spec_actual.hours} h") if spec_actual else 0,
            )
            c_ini, c_fin = st.columns(2)
            inicio = c_ini.text_input("Inicio (HH:MM)", value=(spec_actual.start_time or "") if spec_actual else "")
            fin = c_fin.text_input("Fin (HH:MM)", value=(spec_actual.end_time or "") if spec_actual else "")
            guardar = st.form_submit_button("Guardar turno", use_container_width=True)

        if guardar:
            try:
                hours_spec = None
                if horas != OPCIONES_HORAS[0] and tipo.is_worked:
                    hours_spec = HoursSpec(
                        hours=int(horas.split()[0]),
                        start_time=inicio.strip() or None,
                        end_time=fin.strip() or None,
                    )
                record = ShiftRecord(date=clave, kind=tipo, note=nota.strip() or None, hours_spec=hours_spec)
                shifts = set_shift(shifts, clave, record)
                repo.set(shifts[clave])
            except ShiftValidationError as e:
                st.warning(str(e))
            else:
                st.session_state["_flash_success"] = f"{tipo.long_label} agregado"
                st.session_state["fecha_seleccionada"] = None
                st.rerun()

        if actual and st.button("🗑️ Eliminar Turno", use_container_width=True):
            shifts = delete_shift(shifts, clave)
            repo.delete(clave)
            st.session_state["_flash_success"] = "Turno eliminado"
            st.session_state["fecha_seleccionada"] = None
            st.rerun()

# =========================
# 📊 Resumen del período
# =========================
with col_stats:
    st.header("Estadísticas")
    ventana = calculator.window_for(mes_visible)
    stats = calculator.aggregate(shifts, ventana)

    st.subheader("Resumen del Período")
    st.caption(f"{ventana.description} · {ventana.period_text}")
    m1, m2, m3 = st.columns(3)
    m1.metric("☀️ Turnos Mañana", stats.morning_count, f"{stats.morning_hours} h", delta_color="off")
    m2.metric("🌙 Turnos Noche", stats.night_count, f"{stats.night_hours} h", delta_color="off")
    m3.metric("🍃 Días de Descanso", stats.rest_count)
    st.markdown(
        f"- **Total de días en el período**: {stats.total_days}\n"
        f"- **Horas trabajadas**: {stats.total_hours} h\n"
        f"- **Horas nocturnas**: {stats.night_hours_nocturnal} h"
    )

    detalle = shifts_to_dataframe(calculator.detail(shifts, ventana))
    if detalle.empty:
        st.info("Sin turnos en este período.")
    else:
        st.dataframe(detalle, use_container_width=True, hide_index=True)

    try:
        pdf_bytes = generate_period_pdf(shifts, mes_visible)
    except ExportFailed:
        st.error("Error al generar el PDF. Por favor, intenta de nuevo.")
    else:
        st.download_button(
            "📄 Exportar PDF",
            data=pdf_bytes,
            file_name=pdf_file_name(mes_visible),
            mime="application/pdf",
            on_click=_pdf_descargado,
            use_container_width=True,
        )

    # =========================
    # 📈 Comparativa de períodos
    # =========================
    st.subheader("Comparativa de Períodos")
    candidatos = available_periods(shifts, hoy)
    # en sesión se guardan los ids "YYYY-MM"
    seleccionados: list[PeriodId] = [
        p for p in map(PeriodId.parse, st.session_state["periodos_comparados"]) if p in candidatos
    ]
    restantes = [p for p in candidatos if p not in seleccionados]

    c_add, c_info = st.columns([3, 2])
    nuevo = c_add.selectbox(
        "Selecciona un período para agregar",
        [None] + restantes,
        format_func=lambda p: "—" if p is None else p.label,
    )
    if c_add.button("Agregar período", disabled=nuevo is None):
        try:
            seleccionados = comparator.validate_selection(seleccionados, nuevo)
        except InvalidSelection as e:
            st.warning(str(e))
    if len(seleccionados) < comparator.max_periods:
        c_info.caption(f"{comparator.max_periods - len(seleccionados)} períodos más disponibles")

    seleccionados = st.multiselect(
        "Períodos comparados",
        candidatos,
        default=seleccionados,
        format_func=lambda p: p.label,
        max_selections=comparator.max_periods,
    )
    st.session_state["periodos_comparados"] = [p.id for p in seleccionados]

    resultado = comparator.compare_many(shifts, st.session_state["periodos_comparados"])
    if not resultado.per_period:
        st.info(f"Selecciona períodos para comenzar la comparación (hasta {comparator.max_periods} a la vez).")
    else:
        n = len(resultado.per_period)
        k1, k2, k3 = st.columns(3)
        k1.metric("Promedio de Horas", f"{resultado.average}h", f"Entre {n} período{'s' if n > 1 else ''}",
                  delta_color="off")
        signo = {"up": "+", "down": "-"}.get(resultado.trend.direction, "")
        texto_tendencia = {
            "up": "Incremento en horas", "down": "Reducción en horas", "neutral": "Sin cambios",
        }[resultado.trend.direction]
        k2.metric("Tendencia", f"{resultado.trend.percentage}%",
                  f"{signo}{texto_tendencia}" if signo else texto_tendencia,
                  delta_color="normal" if signo else "off")
        k3.metric("Total Comparado", f"{resultado.total}h", "Suma de todos los períodos", delta_color="off")

        grafico = comparison_chart_dataframe(resultado.per_period)
        st.markdown("**Horas Trabajadas por Período**")
        st.bar_chart(grafico[["Horas Totales"]])
        st.markdown("**Distribución de Turnos**")
        st.line_chart(grafico[["Turnos Mañana", "Turnos Noche", "Días Descanso"]])
        st.dataframe(comparison_summary_dataframe(resultado.per_period), use_container_width=True, hide_index=True)
