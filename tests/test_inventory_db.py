import pytest
from sqlalchemy.exc import OperationalError

from core.inventory_db import SqlInventorySource


@pytest.fixture
def source():
    s = SqlInventorySource("sqlite://")
    yield s
    s.close()


def test_parameters_are_bound_positionally(source):
    rows = source.run_parameterized_query("SELECT :p1, :p2", ("O'Brien", 20))
    assert [tuple(r) for r in rows] == [("O'Brien", 20)]


def test_connection_is_reused(source):
    source.run_parameterized_query("SELECT 1", ())
    conn = source._conn
    source.run_parameterized_query("SELECT 2", ())
    assert source._conn is conn


def test_failed_query_drops_connection(source):
    source.run_parameterized_query("SELECT 1", ())
    with pytest.raises(OperationalError):
        source.run_parameterized_query("SELECT * FROM no_such_view", ())
    assert source._conn is None
    assert [tuple(r) for r in source.run_parameterized_query("SELECT 3", ())] == [(3,)]


def test_query_timeout_only_for_pymssql():
    assert SqlInventorySource("mssql+pymssql://sa:x@db:1433", query_timeout=5)._connect_args() == {
        "timeout": 5,
        "login_timeout": 5,
    }
    assert SqlInventorySource("sqlite://", query_timeout=5)._connect_args() == {}
