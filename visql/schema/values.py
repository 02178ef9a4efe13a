"""The closed value type shared by literals, parameters, and result cells.

``SqlValue`` is a recursive union ``None | bool | int | float | Decimal |
str | list[SqlValue]``.  Keeping it closed means every renderer
(:meth:`visql.compile.base.SQLDialect.format_literal`) can be exhaustive:
anything outside the union is rejected rather than stringified blindly.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Union  # noqa: F401 - referenced by the SqlValue alias
from uuid import UUID

from pydantic import FiniteFloat
from typing_extensions import TypeAliasType

#: Recursive literal value accepted inside a VisualQuery and in results.
SqlValue = TypeAliasType(
    "SqlValue",
    "Union[None, bool, int, FiniteFloat, Decimal, str, list[SqlValue]]",
)

#: Scalar Python types that render as a SQL string literal of their text form.
TEXTUAL_TYPES: tuple[type, ...] = (datetime, date, time, UUID)


def textual_form(value: Any) -> str:
    """Return the canonical text of a date/time/UUID value."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _json_ready(value: Any) -> Any:
    """Convert a nested driver value into JSON-serialisable structures."""
    if isinstance(value, Mapping):
        return {str(k): _json_ready(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_json_ready(v) for v in value]
    return to_cell_value(value)


def to_cell_value(value: Any) -> Any:
    """Normalise a driver-returned cell into a ``SqlValue``.

    Drivers hand back dates, UUIDs, bytes, tuples and engine-specific
    containers; the result model only carries the closed value type.
    Mappings (json/jsonb, ClickHouse ``Map``) become JSON text and
    non-finite numbers become their text form.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, Decimal):
        return value if value.is_finite() else str(value)
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, TEXTUAL_TYPES):
        return textual_form(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, Mapping):
        return json.dumps(_json_ready(value), default=str)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_cell_value(v) for v in value]
    return str(value)


__all__ = ["SqlValue", "TEXTUAL_TYPES", "textual_form", "to_cell_value"]
