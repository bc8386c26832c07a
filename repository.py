# repository.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy import make_url, text
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, Field, Session, create_engine, select

from domain import HoursSpec, ShiftKind, ShiftRecord

logger = logging.getLogger(__name__)


class ShiftRecordDB(SQLModel, table=True):
    date: str = Field(primary_key=True, max_length=10)
    kind: str
    note: str | None = Field(default=None, max_length=200)
    hours: int | None = None
    start_time: str | None = None
    end_time: str | None = None

    @classmethod
    def from_record(cls, r: ShiftRecord) -> ShiftRecordDB:
        spec = r.effective_hours_spec
        return cls(
            date=r.date,
            kind=r.kind.value,
            note=r.note,
            hours=spec.hours if spec else None,
            start_time=spec.start_time if spec else None,
            end_time=spec.end_time if spec else None,
        )

    def to_record(self) -> ShiftRecord:
        spec = None
        if self.hours is not None:
            spec = HoursSpec(hours=self.hours, start_time=self.start_time, end_time=self.end_time)
        return ShiftRecord(date=self.date, kind=ShiftKind.parse(self.kind), note=self.note, hours_spec=spec)


def build_engine(db_url: str, echo: bool = False):
    url = make_url(db_url)
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        # Streamlit atiende cada sesión en su propio hilo
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # servidores gestionados (Neon/Supabase): sin pool local, timeout y SSL
        kwargs["poolclass"] = NullPool
        kwargs["connect_args"] = {"connect_timeout": 10}
        if url.get_backend_name() == "postgresql" and "sslmode" not in url.query:
            url = url.update_query_dict({"sslmode": "require"})
    return create_engine(url, **kwargs)


class ShiftRepository:
    """Shift map storage keyed by ISO date. Writes are full replacements."""
    def __init__(self, url: str = "sqlite:///shifts.db", echo: bool = False):
        self.url = url
        self.engine = build_engine(url, echo=echo)

        backend = self.engine.url.get_backend_name()
        # servidores remotos: se comprueba la conexión al arrancar
        if backend != "sqlite":
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("select 1"))
            except Exception as e:
                raise RuntimeError(f"No se pudo conectar a la base de datos ({backend}): {e}") from e

        SQLModel.metadata.create_all(self.engine)
        logger.info("Shift storage ready (%s)", backend)

    def load_map(self) -> Dict[str, ShiftRecord]:
        with Session(self.engine) as session:
            rows = session.exec(select(ShiftRecordDB)).all()
            return {r.date: r.to_record() for r in rows}

    def get(self, key: str) -> Optional[ShiftRecord]:
        with Session(self.engine) as session:
            row = session.get(ShiftRecordDB, key)
            return row.to_record() if row else None

    def set(self, record: ShiftRecord) -> None:
        new_row = ShiftRecordDB.from_record(record)
        with Session(self.engine) as session:
            row = session.get(ShiftRecordDB, record.date)
            if row is None:
                session.add(new_row)
            else:
                # sustitución completa: nunca se conservan campos del turno anterior
                for column in ("kind", "note", "hours", "start_time", "end_time"):
                    setattr(row, column, getattr(new_row, column))
                session.add(row)
            session.commit()
        logger.info("Shift %s set to %s", record.date, record.kind.value)

    def delete(self, key: str) -> None:
        with Session(self.engine) as session:
            row = session.get(ShiftRecordDB, key)
            if row is None:
                return
            session.delete(row)
            session.commit()
        logger.info("Shift %s deleted", key)


__all__ = ["ShiftRecordDB", "ShiftRepository", "build_engine"]
