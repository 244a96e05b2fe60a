# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Compile designer query definitions into OData v4 query strings.

:func:`compile_query` is a pure function: it performs no metadata calls and no
validation. The entity set name is resolved by the caller, which appends the
returned ``?...`` suffix to ``{api}/{entitySetName}``.

Parameters are emitted in a fixed order: ``$count``, ``$select``, ``$expand``,
``$filter``, ``$orderby``, ``$top``, ``$skip``.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, Optional, Tuple
from urllib.parse import quote

from ..models.query import FilterOperator, QueryDefinition, QueryFilter

_ID_SUFFIX_RE = re.compile(r"id$", re.IGNORECASE)

# Left readable in the compiled suffix; everything else reserved is percent-encoded.
_SUFFIX_SAFE = " $,'()=/:@*;!"

_COMPARISON_OPERATORS = {
    FilterOperator.GREATER_THAN.value,
    FilterOperator.GREATER_OR_EQUAL.value,
    FilterOperator.LESS_THAN.value,
    FilterOperator.LESS_OR_EQUAL.value,
}
_STRING_FUNCTIONS = {
    FilterOperator.CONTAINS.value,
    FilterOperator.STARTS_WITH.value,
    FilterOperator.ENDS_WITH.value,
}


def _text(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def escape_odata_literal(value: str) -> str:
    """Escape single quotes for an OData string literal (by doubling them)."""
    return value.replace("'", "''")


def _quoted(value: Any) -> str:
    text = "" if value is None else str(value)
    return f"'{escape_odata_literal(text)}'"


def _bare(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def navigation_property(from_field: str) -> str:
    """
    Derive the ``$expand`` navigation property from a lookup attribute name.

    Strips one trailing ``id`` (any case): ``primarycontactid`` -> ``primarycontact``,
    ``ownerid`` -> ``owner``. Lookups whose navigation property is named differently
    (custom lookups not ending in ``id``, different casing) yield a name the service
    does not know, and the expansion comes back empty.

    :param from_field: Lookup attribute logical name.
    :type from_field: str
    :return: Navigation property name.
    :rtype: str
    """
    return _ID_SUFFIX_RE.sub("", from_field or "", count=1)


def render_filter(query_filter: QueryFilter) -> str:
    """
    Render one predicate.

    String values are quoted and escaped for ``eq``/``ne`` and always for the string
    functions. ``gt``/``ge``/``lt``/``le`` render the value bare (numbers, dates).
    Unknown operators fall back to the quoted ``eq`` form.
    """
    field = query_filter.field_name
    op = _text(query_filter.operator)
    value = query_filter.value

    if op in (FilterOperator.EQUALS.value, FilterOperator.NOT_EQUALS.value):
        literal = _quoted(value) if isinstance(value, str) else _bare(value)
        return f"{field} {op} {literal}"
    if op in _COMPARISON_OPERATORS:
        return f"{field} {op} {_bare(value)}"
    if op in _STRING_FUNCTIONS:
        return f"{op}({field},{_quoted(value)})"
    if op == FilterOperator.IS_NULL.value:
        return f"{field} eq null"
    if op == FilterOperator.IS_NOT_NULL.value:
        return f"{field} ne null"
    return f"{field} eq {_quoted(value)}"


def filter_clause(query: QueryDefinition) -> Optional[str]:
    """
    Combine the definition's filters into one ``$filter`` expression.

    Filters are joined left to right with no grouping. Each filter after the first is
    prefixed by its own logical operator (``and`` when unset); the first filter's
    operator is ignored.

    :return: Expression, or ``None`` when there are no filters.
    :rtype: str | None
    """
    if not query.filters:
        return None
    parts: List[str] = []
    for idx, f in enumerate(query.filters):
        expr = render_filter(f)
        if idx == 0:
            parts.append(expr)
        else:
            parts.append(f"{_text(f.logical_operator) or 'and'} {expr}")
    return " ".join(parts)


def _unique(names: List[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out


def build_query_options(
    query: QueryDefinition,
    page: int,
    page_size: int,
    count_only: bool,
) -> List[Tuple[str, str]]:
    """
    Build the ordered ``(option, value)`` pairs for a definition.

    :param query: Definition to compile.
    :type query: ~dataverse_query_designer.models.query.QueryDefinition
    :param page: 1-based page number.
    :type page: int
    :param page_size: Records per page.
    :type page_size: int
    :param count_only: Request the count only (``$top=0``, no ``$skip``).
    :type count_only: bool
    :return: Ordered OData system query options with unencoded values.
    :rtype: list[tuple[str, str]]
    """
    options: List[Tuple[str, str]] = [("$count", "true")]
    alias = query.alias

    main_fields = _unique([f.field_name for f in query.fields if f.entity_alias == alias])
    if main_fields:
        options.append(("$select", ",".join(main_fields)))

    expands: List[str] = []
    for join in query.joins or []:
        join_fields = _unique([f.field_name for f in query.fields if f.entity_alias == join.to_entity_alias])
        if not join_fields:
            continue
        expands.append(f"{navigation_property(join.from_field)}($select={','.join(join_fields)})")
    if expands:
        options.append(("$expand", ",".join(expands)))

    clause = filter_clause(query)
    if clause:
        options.append(("$filter", clause))

    if query.order_by:
        orders = [f"{s.field_name} {_text(s.direction) or 'asc'}" for s in query.order_by]
        options.append(("$orderby", ",".join(orders)))

    if count_only:
        options.append(("$top", "0"))
    else:
        options.append(("$top", str(page_size)))
        if page > 1:
            options.append(("$skip", str((page - 1) * page_size)))
    return options


def compile_query(query: QueryDefinition, page: int, page_size: int, count_only: bool = False) -> str:
    """
    Compile a definition into an OData query-string suffix beginning with ``?``.

    Option values are percent-encoded only where a character would otherwise
    end the parameter or the URL (``&``, ``#``, ``%``, ``+``, ``?``); spaces and
    OData punctuation stay readable. The request itself is sent from
    :func:`build_query_options`, so this string is what gets logged and attached
    to upstream errors.

    Example::

        compile_query(definition, page=2, page_size=50, count_only=False)
        # '?$count=true&$select=name,revenue&$top=50&$skip=50'
    """
    options = build_query_options(query, page, page_size, count_only)
    return "?" + "&".join(f"{k}={quote(v, safe=_SUFFIX_SAFE)}" for k, v in options)


__all__ = [
    "escape_odata_literal",
    "navigation_property",
    "render_filter",
    "filter_clause",
    "build_query_options",
    "compile_query",
]
