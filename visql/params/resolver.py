"""Named-parameter substitution.

Compiled SQL carries ``:name`` placeholders so a statement can be compiled
once and executed with many parameter sets.  ``ParameterResolver`` replaces
every placeholder with a dialect-formatted literal immediately before
execution.

Scanning rules:

- a placeholder is ``:`` followed by ``[A-Za-z_][A-Za-z0-9_]*``;
- a ``:`` directly preceded by another ``:`` does not start a placeholder,
  so PostgreSQL casts such as ``created_at::date`` survive;
- text inside string literals, quoted identifiers and comments is copied
  through untouched;
- substitution happens in a single pass, so a substituted value that
  itself contains ``:word`` is never rescanned.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from visql.compile.base import PARAMETER_NAME_PATTERN, SQLDialect
from visql.errors import MissingParameterError

logger = logging.getLogger(__name__)

_COMMENT_PATTERN = r"--[^\n]*|/\*.*?\*/"


class ParameterResolver:
    """Substitutes ``:name`` placeholders with dialect-formatted literals.

    Args:
        dialect: Dialect whose literal formatting and quoting rules apply.
    """

    def __init__(self, dialect: SQLDialect) -> None:
        self._dialect = dialect
        self._scanner = re.compile(
            rf"(?P<skip>{dialect.quoted_token_pattern}|{_COMMENT_PATTERN})"
            rf"|(?<!:):(?P<name>{PARAMETER_NAME_PATTERN})",
            re.DOTALL,
        )

    def extract_parameter_names(self, sql: str) -> list[str]:
        """Return placeholder names in first-use order, without duplicates."""
        if ":" not in sql:
            return []
        seen: dict[str, None] = {}
        for match in self._scanner.finditer(sql):
            name = match.group("name")
            if name is not None:
                seen.setdefault(name, None)
        return list(seen)

    def resolve(self, sql: str, parameters: Mapping[str, Any] | None = None) -> str:
        """Return ``sql`` with every placeholder replaced by a literal.

        Args:
            sql: SQL text containing ``:name`` placeholders.
            parameters: Values keyed by placeholder name.  Extra keys are
                ignored; a value of ``None`` renders ``NULL``.

        Returns:
            The substituted SQL, or ``sql`` itself when it has no placeholder.

        Raises:
            MissingParameterError: Listing every placeholder without a value.
            UnsupportedValueError: If a value cannot be rendered as a literal.
        """
        names = self.extract_parameter_names(sql)
        if not names:
            return sql

        parameters = parameters or {}
        missing = [name for name in names if name not in parameters]
        if missing:
            raise MissingParameterError(missing)

        fmt = self._dialect.format_literal

        def substitute(match: re.Match[str]) -> str:
            name = match.group("name")
            if name is None:
                return match.group(0)
            return fmt(parameters[name])

        resolved = self._scanner.sub(substitute, sql)
        logger.debug("Resolved %d parameter(s) for %s", len(names), self._dialect.dialect_name)
        return resolved
