"""Compilation context objects.

``CompilationContext`` carries the static configuration shared by every
sub-builder (currently just the dialect).  ``RuntimeContext`` accumulates
per-run state: the ``:name`` placeholders met while rendering.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from visql.compile.base import SQLDialect


@dataclass(frozen=True)
class CompilationContext:
    """Immutable context for a single compilation run.

    Attributes:
        dialect: Engine-specific SQL dialect.
    """

    dialect: SQLDialect


@dataclass
class RuntimeContext:
    """Collects parameter names in first-use order.

    A single instance is threaded through every sub-builder so a name used
    in both WHERE and HAVING is reported once.
    """

    _names: dict[str, None] = field(default_factory=dict)

    def add_parameter(self, name: str) -> None:
        self._names.setdefault(name, None)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(self._names)
