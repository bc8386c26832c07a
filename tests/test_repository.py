from __future__ import annotations

import pytest
from sqlalchemy.engine import make_url

import repository
from domain import HoursSpec, ShiftKind, ShiftRecord
from factories import shift
from repository import ShiftRepository, build_engine


def test_new_repository_is_empty(repo):
    assert repo.load_map() == {}
    assert repo.get("2024-01-20") is None


def test_set_and_get_round_trip(repo):
    record = ShiftRecord(
        date="2024-01-20", kind=ShiftKind.NIGHT, note="cambio con Luis",
        hours_spec=HoursSpec(hours=8, start_time="22:00", end_time="06:00"),
    )
    repo.set(record)

    assert repo.get("2024-01-20") == record
    assert repo.load_map() == {"2024-01-20": record}


def test_set_replaces_every_field(repo):
    repo.set(shift("2024-01-20", ShiftKind.NIGHT, hours=8, note="primera"))
    repo.set(shift("2024-01-20", ShiftKind.MORNING))

    stored = repo.get("2024-01-20")
    assert stored.kind is ShiftKind.MORNING
    assert stored.note is None
    assert stored.hours_spec is None


def test_rest_day_hours_are_not_stored(repo):
    repo.set(shift("2024-01-21", ShiftKind.REST, hours=12))
    assert repo.get("2024-01-21").hours_spec is None


def test_delete(repo):
    repo.set(shift("2024-01-20", ShiftKind.REST))
    repo.delete("2024-01-20")
    repo.delete("2024-01-20")
    assert repo.load_map() == {}


def test_data_survives_a_new_repository(tmp_path):
    url = f"sqlite:///{(tmp_path / 'persist.db').as_posix()}"
    ShiftRepository(url).set(shift("2024-02-02", ShiftKind.MORNING, hours=12))
    assert ShiftRepository(url).get("2024-02-02") == shift("2024-02-02", ShiftKind.MORNING, hours=12)


def test_build_engine_sqlite():
    engine = build_engine("sqlite://")
    assert engine.url.get_backend_name() == "sqlite"


def test_unreachable_postgres_fails_fast():
    pytest.importorskip("psycopg2")
    with pytest.raises(RuntimeError, match="postgresql"):
        ShiftRepository("postgresql://user:pw@127.0.0.1:1/nope")


def test_unreachable_server_error_names_backend(monkeypatch):
    class _DownEngine:
        url = make_url("mysql://user:pw@db/turnos")

        def connect(self):
            raise OSError("connection refused")

    monkeypatch.setattr(repository, "build_engine", lambda url, echo=False: _DownEngine())
    with pytest.raises(RuntimeError, match=r"base de datos \(mysql\): connection refused"):
        ShiftRepository("mysql://user:pw@db/turnos")


def test_build_engine_postgres_requires_ssl():
    pytest.importorskip("psycopg2")
    assert build_engine("postgresql://u:p@db/turnos").url.query["sslmode"] == "require"
    assert build_engine("postgresql://u:p@db/turnos?sslmode=disable").url.query["sslmode"] == "disable"
