"""Shared pytest fixtures for stitchQL unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

import stitchql
from stitchql.compile.compiler import ModifierCompiler
from stitchql.compile.escaper import Escaper
from stitchql.config import ConnectionSettings
from stitchql.result.cursor import ResultCursor
from stitchql.result.tables import BufferedResult, StreamingResult
from stitchql.session import Session
from tests.fixtures import SAMPLE_ROWS, RecordingExecutor


@pytest.fixture()
def compiler() -> ModifierCompiler:
    """Compiler over PyMySQL's default escaping primitive."""
    return ModifierCompiler(Escaper())


@pytest.fixture()
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture()
def session(executor: RecordingExecutor) -> Session:
    return Session(executor)


@pytest.fixture()
def buffered_cursor() -> ResultCursor:
    """Cursor over :data:`SAMPLE_ROWS`, fully buffered."""
    return ResultCursor(BufferedResult(SAMPLE_ROWS))


@pytest.fixture()
def streaming_cursor() -> ResultCursor:
    """Cursor over :data:`SAMPLE_ROWS`, forward-only."""
    return ResultCursor(StreamingResult(SAMPLE_ROWS, columns=list(SAMPLE_ROWS[0])))


@pytest.fixture()
def sqlite_session() -> Iterator[Session]:
    """A session on a fresh in-memory SQLite database."""
    with stitchql.connect(ConnectionSettings(backend="sqlite", database=":memory:")) as db:
        yield db
