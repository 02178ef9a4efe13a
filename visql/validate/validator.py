"""VisualQuery validation.

``QueryValidator`` collects every structural problem with a query instead of
stopping at the first one, so the builder UI can show them all at once.
The compiler never calls it; :class:`~visql.engine.QueryEngine` runs it
before executing and raises :class:`~visql.errors.QueryValidationError`
when the list is non-empty.

Checks
------
- the source table is named;
- at least one column is selected, each setting exactly one of
  ``column`` / ``expression``;
- every join names its table;
- aggregate consistency: once any column is marked ``aggregate``, each
  plain (non-aggregate, non-expression) column must appear in GROUP BY.
"""
from __future__ import annotations

from visql.errors import QueryValidationError
from visql.schema.visual_query import ColumnRef, SelectColumn, VisualQuery


class QueryValidator:
    """Validates a :class:`~visql.schema.visual_query.VisualQuery`."""

    def validate(self, query: VisualQuery) -> list[str]:
        """Return every validation message for ``query`` (empty when valid)."""
        errors: list[str] = []

        if not query.source.table.strip():
            errors.append("Source table is required")

        if not query.columns:
            errors.append("At least one column must be selected")
        for idx, col in enumerate(query.columns, start=1):
            if (col.column is None) == (col.expression is None):
                errors.append(
                    f"Column #{idx}: exactly one of 'column' or 'expression' must be set"
                )

        for idx, join in enumerate(query.joins, start=1):
            if not join.table.strip():
                errors.append(f"JOIN #{idx}: table name is required")

        errors.extend(self._check_aggregates(query))
        return errors

    def check(self, query: VisualQuery) -> None:
        """Raise :class:`QueryValidationError` if ``query`` has any problem."""
        errors = self.validate(query)
        if errors:
            raise QueryValidationError(errors)

    # ------------------------------------------------------------------
    # Aggregate consistency
    # ------------------------------------------------------------------

    def _check_aggregates(self, query: VisualQuery) -> list[str]:
        if not any(col.aggregate for col in query.columns):
            return []
        ungrouped = [
            col
            for col in query.columns
            if not col.aggregate
            and col.expression is None
            and col.column is not None
            and not _is_grouped(col, query.group_by)
        ]
        if not ungrouped:
            return []
        names = ", ".join(col.alias or col.column or "?" for col in ungrouped)
        return [f"Columns without aggregation must appear in GROUP BY: {names}"]


def _is_grouped(col: SelectColumn, group_by: tuple[ColumnRef, ...]) -> bool:
    # An unqualified reference on either side matches any table.
    return any(
        ref.column == col.column
        and (ref.table is None or col.table is None or ref.table == col.table)
        for ref in group_by
    )
