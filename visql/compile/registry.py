"""Dialect registry (Open/Closed Principle).

``DialectFactory`` maps a :class:`~visql.schema.datasource.DataSourceType`
to the :class:`~visql.compile.base.SQLDialect` class that serves it.  The
compiler, the parameter resolver and the connection manager look dialects
up here, so supporting a new engine means registering one class.

Usage::

    from visql.compile.registry import DialectFactory

    @DialectFactory.register(DataSourceType.POSTGRESQL)
    class PostgresDialect(SQLDialect):
        ...

    dialect = DialectFactory.create(DataSourceType.POSTGRESQL)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from visql.compile.base import SQLDialect
from visql.errors import CompilationError
from visql.schema.datasource import DataSourceType


class DialectFactory:
    """Registry mapping datasource types to :class:`SQLDialect` classes.

    Example::

        DialectFactory.register_class(DataSourceType.CLICKHOUSE, ClickHouseDialect)
        dialect = DialectFactory.create("CLICKHOUSE", supports_full_join=False)
    """

    _dialects: ClassVar[dict[DataSourceType, type[SQLDialect]]] = {}

    @classmethod
    def register(
        cls, source_type: DataSourceType
    ) -> Callable[[type[SQLDialect]], type[SQLDialect]]:
        """Decorator that registers a dialect class for ``source_type``.

        Args:
            source_type: The datasource type served by the dialect.

        Returns:
            A decorator that registers and returns the dialect class.
        """

        def decorator(dialect_cls: type[SQLDialect]) -> type[SQLDialect]:
            cls._dialects[DataSourceType(source_type)] = dialect_cls
            return dialect_cls

        return decorator

    @classmethod
    def register_class(
        cls, source_type: DataSourceType, dialect_cls: type[SQLDialect]
    ) -> None:
        """Register a dialect class without using the decorator form."""
        cls._dialects[DataSourceType(source_type)] = dialect_cls

    @classmethod
    def create(cls, source_type: DataSourceType | str, **options: Any) -> SQLDialect:
        """Instantiate the dialect registered for ``source_type``.

        Args:
            source_type: A :class:`DataSourceType` or its string value.
            **options: Keyword arguments forwarded to the dialect constructor
                (e.g. ``supports_full_join`` for ClickHouse).

        Returns:
            A fresh :class:`SQLDialect` instance.

        Raises:
            CompilationError: If no dialect is registered for ``source_type``.
        """
        try:
            key = DataSourceType(source_type)
        except ValueError:
            key = None
        dialect_cls = cls._dialects.get(key) if key is not None else None
        if dialect_cls is None:
            registered = cls.registered_types()
            raise CompilationError(
                f"Unsupported datasource type: '{source_type}'. "
                f"Registered types: {registered}."
            )
        return dialect_cls(**options)

    @classmethod
    def registered_types(cls) -> list[str]:
        """Return the sorted list of registered datasource type names."""
        return sorted(t.value for t in cls._dialects)
