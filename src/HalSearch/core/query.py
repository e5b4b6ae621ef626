"""Solr query compiler.

Compiles a structured search descriptor into a Solr `q` string.

Rules
- A mapping holds field terms and the reserved operators `$or`, `$and`, `$not`.
- Field terms are rendered as `field:value`. Values are used verbatim, so
  ranges (`[2010 TO 2020]`), wildcards and quoting are the caller's business.
- Field terms are joined with the operator of the current level
  (`AND` at the top).
- `$or` / `$and` compile their value with `OR` / `AND`, whatever the
  surrounding operator is.
- `$not` compiles its value with `OR` and becomes `NOT(...)`, kept in front of
  the other terms of its level.
- A list holds sibling conditions, each compiled with `AND`.

Examples
- {"a": 1}                         -> a:1
- {"a": 1, "b": 2}                 -> (a:1) AND (b:2)
- {"$or": [{"a": 1}, {"b": 2}]}    -> (a:1) OR (b:2)
- {"$not": {"a": 1}, "b": 2}       -> NOT(a:1) AND (b:2)
"""

from __future__ import annotations

from typing import Any, Mapping

from HalSearch.core.errors import DescriptorFormatError

MATCH_ALL = "*:*"

OP_OR = "$or"
OP_AND = "$and"
OP_NOT = "$not"


def build_query(search: Any, operator: str = "AND") -> str:
    """Compile a search descriptor into a Solr query string.

    Args:
        search: Mapping of field terms/operators, or a list of descriptors.
            ``None`` is treated as an empty mapping.
        operator: Operator joining the terms of this level (``AND``/``OR``).

    Returns:
        Query string, or ``""`` when the descriptor holds no constraint.

    Raises:
        DescriptorFormatError: If the descriptor or one of its values cannot be
            rendered as query text.
    """
    if search is None:
        search = {}

    parts: list[str] = []
    negation: str | None = None

    if isinstance(search, (list, tuple)):
        for subquery in search:
            part = build_query(subquery, "AND")
            if part:
                parts.append(part)
    elif isinstance(search, Mapping):
        for key, value in search.items():
            if not isinstance(key, str):
                raise DescriptorFormatError(f"field names must be strings, got {key!r}")
            if key == OP_OR:
                subquery = build_query(value, "OR")
                if subquery:
                    parts.append(subquery)
            elif key == OP_AND:
                subquery = build_query(value, "AND")
                if subquery:
                    parts.append(subquery)
            elif key == OP_NOT:
                subquery = build_query(value, "OR")
                if subquery:
                    negation = f"NOT({subquery})"
            else:
                parts.append(f"{key}:{render_value(value, key)}")
    else:
        raise DescriptorFormatError(
            f"search descriptor must be a mapping or a list, got {type(search).__name__}"
        )

    if not parts:
        return negation or ""

    if len(parts) > 1 or negation:
        query = f"{negation} {operator} (" if negation else "("
        query += f") {operator} (".join(parts)
        query += ")"
        return query

    return parts[0]


def to_query_string(search: Any) -> str:
    """Return the final `q` value for a search.

    Raw strings are passed through untouched; descriptors are compiled and an
    empty result is replaced by the match-all query.
    """
    if isinstance(search, str):
        return search
    return build_query(search, "AND") or MATCH_ALL


def render_value(value: Any, key: str) -> str:
    """Render a field value as query text.

    Only strings and numbers are accepted; booleans, ``None`` and containers
    are rejected instead of being coerced.

    Raises:
        DescriptorFormatError: If the value is not a string or a number.
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise DescriptorFormatError(
            f"value of field {key!r} must be a string or a number, got {type(value).__name__}"
        )
    return str(value)
