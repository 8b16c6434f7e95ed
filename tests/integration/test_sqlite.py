"""Integration tests: compose → execute → shape against in-memory SQLite.

Covers every modifier SQLite understands (everything but ``%va``), builder
merges with joins, grouping and limits, buffered and unbuffered cursors,
transactions, scripts and driver errors.
"""
from __future__ import annotations

import io

import pytest

import stitchql
from stitchql import ConnectionSettings, ExecutionFailedError, LoggingObserver, raw
from stitchql.session import Session
from tests.fixtures import load_ddl

TEAMS = [{"id": 1, "name": "core"}, {"id": 2, "name": "infra"}]
USERS = [
    {"team_id": 1, "name": "Ada", "score": 9.5, "note": None},
    {"team_id": 1, "name": "Grace", "score": 8.0, "note": "compiler"},
    {"team_id": 2, "name": "Linus", "score": 7.5, "note": None},
    {"team_id": 2, "name": "Barbara", "score": None, "note": "it's"},
]


@pytest.fixture()
def db():
    with stitchql.connect(ConnectionSettings(backend="sqlite", database=":memory:")) as session:
        assert session.run_script(load_ddl()) == 3
        session.query("INSERT INTO %t %v", "teams", TEAMS)
        session.query("INSERT INTO %t %v", "users", USERS)
        yield session


def _count(db: Session, table: str = "users") -> int:
    return db.query("SELECT COUNT(*) FROM %t", table).fetch_one()


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------


def test_multi_row_insert(db):
    assert _count(db) == 4
    assert _count(db, "teams") == 2


def test_insert_returns_last_insert_id(db):
    session = db.query("INSERT INTO users %v", {"team_id": 2, "name": "O'Brien", "score": 1})
    assert session.affected_rows() == 1
    new_id = session.last_insert_id()
    assert new_id == 5
    assert db.query("SELECT name FROM users WHERE id = %i", new_id).fetch_one() == "O'Brien"


def test_quotes_round_trip(db):
    row = db.query("SELECT * FROM users WHERE note = %s", "it's").fetch_row()
    assert row["name"] == "Barbara"
    assert row["score"] is None


def test_qualified_identifiers(db):
    names = db.query(
        "SELECT %t FROM %t ORDER BY %t", "users.name", "users", "users.id"
    ).fetch_col()
    assert names == ["Ada", "Grace", "Linus", "Barbara"]


def test_in_and_not_in(db):
    assert db.query("SELECT name FROM users WHERE id %in ORDER BY id", [1, 3]).fetch_col() == [
        "Ada",
        "Linus",
    ]
    assert db.query("SELECT name FROM users WHERE id %nin ORDER BY id", (1, 3)).fetch_col() == [
        "Grace",
        "Barbara",
    ]


def test_empty_sets(db):
    assert db.query("SELECT COUNT(*) FROM users WHERE 1 %in", []).fetch_one() == 0
    assert db.query("SELECT COUNT(*) FROM users WHERE note %nin", []).fetch_one() == 2


def test_update_assignments(db):
    result = db.query("UPDATE users SET %a WHERE team_id = %i", {"score": 5, "note": None}, 2)
    assert result.affected_rows() == 2
    rows = db.query("SELECT score, note FROM users WHERE team_id = %i", 2).fetch_all()
    assert rows == [{"score": 5.0, "note": None}, {"score": 5.0, "note": None}]


def test_raw_sql_values(db):
    db.query("INSERT INTO users %v", {"team_id": 1, "name": raw("'Ka' || 'ren'"), "score": None})
    assert db.query("SELECT COUNT(*) FROM users WHERE name = %s", "Karen").fetch_one() == 1


def test_numeric_casts(db):
    ids = db.query(
        "SELECT id FROM users WHERE score > %f AND id <= %i ORDER BY id", "7.9", "3.7"
    ).fetch_col()
    assert ids == [1, 2]


def test_null_argument(db):
    assert db.query("SELECT %s IS NULL", None).fetch_one() == 1


def test_percent_literal(db):
    names = db.query(
        "SELECT name FROM users WHERE name LIKE %s OR note LIKE '%%er'", "B%"
    ).fetch_col()
    assert sorted(names) == ["Barbara", "Grace"]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def test_builder_join_where_order_limit(db):
    qb = (
        db.builder()
        .select("u.name")
        .from_("users u")
        .join("JOIN teams t ON t.id = u.team_id")
        .where_and("t.name = %s", "core")
        .order_by("u.name DESC")
        .limit(0, 10)
    )
    assert db.query(qb).fetch_col() == ["Grace", "Ada"]


def test_builder_nested_groups(db):
    either = db.builder().where_or("name = %s", "Ada").where_or("name = %s", "Linus")
    qb = db.builder().select("id").from_("users").where_and("score > %i", 5).where_and(either)
    assert sorted(db.query(qb).fetch_col()) == [1, 3]


def test_builder_group_having(db):
    qb = (
        db.builder()
        .select("t.name AS team")
        .select("COUNT(*) AS n")
        .from_("users u")
        .join("JOIN teams t ON t.id = u.team_id")
        .group_by("t.name")
        .having_and("COUNT(*) >= %i", 2)
    )
    assert db.query(qb).fetch_pairs("team", "n") == {"core": 2, "infra": 2}


def test_builder_limit_offset(db):
    qb = db.builder().select("id").from_("users").order_by("id").limit(1, 2)
    assert db.query(qb).fetch_col() == [2, 3]


def test_builder_delete(db):
    qb = db.builder().from_("users").where_and("id = %i", 4)
    assert db.query("DELETE", qb).affected_rows() == 1
    assert _count(db) == 3


# ---------------------------------------------------------------------------
# Result shaping
# ---------------------------------------------------------------------------


def test_fetch_assoc_by_team(db):
    grouped = db.query("SELECT team_id, name FROM users ORDER BY id").fetch_assoc("team_id")
    assert {team: [row["name"] for row in rows] for team, rows in grouped.items()} == {
        1: ["Ada", "Grace"],
        2: ["Linus", "Barbara"],
    }


def test_buffered_cursor_rewinds(db):
    cursor = db.query("SELECT id FROM users ORDER BY id")
    assert cursor.num_rows() == 4
    assert cursor.fetch_col() == [1, 2, 3, 4]
    assert cursor.fetch_col() == [1, 2, 3, 4]


def test_unbuffered_cursor_is_forward_only(db):
    with db.unbuffered_query("SELECT id FROM users ORDER BY id") as cursor:
        assert not cursor.buffered
        assert cursor.fetch_col() == [1, 2, 3, 4]
        assert cursor.fetch_col() == []


def test_iterate_result(db):
    cursor = db.query("SELECT name FROM users WHERE team_id = %i ORDER BY id", 2)
    assert [row["name"] for row in cursor] == ["Linus", "Barbara"]


def test_empty_result(db):
    cursor = db.query("SELECT id, name FROM users WHERE 1 %in", [])
    assert cursor.columns == ["id", "name"]
    assert cursor.fetch_all() == []


# ---------------------------------------------------------------------------
# Transactions, scripts, errors
# ---------------------------------------------------------------------------


def test_transaction_commit(db):
    with db.transaction():
        db.query("INSERT INTO teams %v", {"id": 3, "name": "ops"})
    assert _count(db, "teams") == 3


def test_transaction_rollback(db):
    with pytest.raises(RuntimeError):
        with db.transaction():
            db.query("DELETE FROM users")
            assert _count(db) == 0
            raise RuntimeError("abort")
    assert _count(db) == 4


def test_run_script_from_stream(db):
    script = io.StringIO(
        "INSERT INTO teams (id, name) VALUES (3, 'ops');\n"
        "UPDATE teams\n"
        "   SET name = 'ops2'\n"
        " WHERE id = 3;\n"
    )
    assert db.run_script(script) == 2
    assert db.query("SELECT name FROM teams WHERE id = 3").fetch_one() == "ops2"


def test_run_script_two_statements_on_one_line(db):
    with pytest.raises(ExecutionFailedError):
        db.run_script("SELECT 1; SELECT 2;\n")


def test_execution_error(db):
    with pytest.raises(ExecutionFailedError) as exc_info:
        db.query("SELECT * FROM %t", "missing")
    assert exc_info.value.sql == "SELECT * FROM `missing`"
    assert "no such table" in str(exc_info.value)


def test_logging_observer(db, caplog):
    db.set_observer(LoggingObserver())
    with caplog.at_level("DEBUG", logger="stitchql.queries"):
        db.query("SELECT %i", 1)
    assert "Query ok" in caplog.text
    assert "SELECT 1" in caplog.text


def test_debug_query(db):
    out = io.StringIO()
    assert db.debug_query("SELECT %s AS v", "x", file=out).fetch_one("v") == "x"
    assert out.getvalue() == "SELECT 'x' AS v"
