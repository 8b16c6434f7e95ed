"""stitchQL execution layer: SQL text → tabular results."""
from stitchql.execute.base import ExecutionOutcome, Executor
from stitchql.execute.mysql import PyMySQLExecutor
from stitchql.execute.registry import ExecutorFactory
from stitchql.execute.sqlite import SQLiteExecutor

__all__ = [
    "ExecutionOutcome",
    "Executor",
    "ExecutorFactory",
    "PyMySQLExecutor",
    "SQLiteExecutor",
]
