"""Executor registry (Open/Closed Principle).

``ExecutorFactory`` maps backend names to :class:`~stitchql.execute.base.Executor`
implementations.  Register a new executor once; :func:`stitchql.connect`
looks it up by ``ConnectionSettings.backend``.

Usage::

    from stitchql.execute.registry import ExecutorFactory

    @ExecutorFactory.register("duckdb")
    class DuckDBExecutor(Executor):
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from stitchql.config import ConnectionSettings
from stitchql.errors import ConfigurationError
from stitchql.execute.base import Executor


class ExecutorFactory:
    """Registry mapping backend names to :class:`Executor` classes.

    Example::

        executor = ExecutorFactory.create(ConnectionSettings(backend="sqlite"))
    """

    _executors: ClassVar[dict[str, type[Executor]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[Executor]], type[Executor]]:
        """Decorator that registers an executor class under ``name``.

        Args:
            name: The backend name (e.g. ``"mysql"``).

        Returns:
            A decorator that registers and returns the executor class.
        """

        def decorator(executor_cls: type[Executor]) -> type[Executor]:
            cls._executors[name] = executor_cls
            return executor_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, executor_cls: type[Executor]) -> None:
        """Register an executor class without using the decorator form."""
        cls._executors[name] = executor_cls

    @classmethod
    def create(cls, settings: ConnectionSettings) -> Executor:
        """Open the executor registered for ``settings.backend``.

        Raises:
            ConfigurationError: If no executor is registered for the backend.
        """
        executor_cls = cls._executors.get(settings.backend)
        if executor_cls is None:
            raise ConfigurationError(
                f"Unsupported backend: '{settings.backend}'. "
                f"Registered backends: {cls.registered_backends()}.",
                details={"backend": settings.backend},
            )
        return executor_cls.from_settings(settings)

    @classmethod
    def registered_backends(cls) -> list[str]:
        """Return the sorted list of registered backend names."""
        return sorted(cls._executors)
