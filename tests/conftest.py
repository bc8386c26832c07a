import pytest

from repository import ShiftRepository


@pytest.fixture
def repo(tmp_path):
    return ShiftRepository(f"sqlite:///{(tmp_path / 'shifts.db').as_posix()}")
