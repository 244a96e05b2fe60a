# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Map OData response records onto the designer's flat row model.

Dataverse records are dynamic string-keyed maps: selected columns, expanded
navigation properties (nested maps) and annotations such as
``name@OData.Community.Display.V1.FormattedValue``. Each mapped row holds exactly
one key per query field, ``"<entityAlias>.<fieldName>"``, whether or not the
record carried a value for it.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..common.constants import FORMATTED_VALUE_ANNOTATION
from ..core.results import QueryColumn
from ..models.query import QueryDefinition, QueryField
from .compiler import navigation_property


def formatted_value_key(field_name: str) -> str:
    return f"{field_name}{FORMATTED_VALUE_ANNOTATION}"


def formatted_value(record: Mapping[str, Any], field_name: str) -> Any:
    """Return the formatted-value annotation for ``field_name`` (None when absent)."""
    return record.get(formatted_value_key(field_name))


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _expanded(record: Mapping[str, Any], key: Optional[str]) -> Optional[Mapping[str, Any]]:
    if not key:
        return None
    nested = record.get(key)
    return nested if isinstance(nested, Mapping) else None


def build_columns(query: QueryDefinition) -> List[QueryColumn]:
    """One column per query field, in definition order."""
    return [
        QueryColumn(
            name=f.field_name,
            display_name=f.display_name or f.field_name,
            type="string",
            entity_alias=f.entity_alias,
        )
        for f in query.fields
    ]


def map_value(record: Mapping[str, Any], query_field: QueryField, query: QueryDefinition) -> Any:
    """
    Resolve one field's value from a raw record.

    Primary-alias fields prefer the formatted value over the raw value. Joined fields
    read the expanded map first (keyed by the join alias, then by the join's
    navigation property), then the top-level formatted value, then the top-level raw
    value. The first value that is not ``None`` wins.
    """
    name = query_field.field_name
    if query_field.entity_alias == query.alias:
        return _first_present(formatted_value(record, name), record.get(name))

    nested_values = []
    for key in _expansion_keys(query_field.entity_alias, query):
        nested = _expanded(record, key)
        if nested is not None:
            nested_values.append(nested.get(name))
    return _first_present(*nested_values, formatted_value(record, name), record.get(name))


def _expansion_keys(alias: str, query: QueryDefinition) -> List[str]:
    keys = [alias]
    for join in query.joins or []:
        if join.to_entity_alias == alias:
            nav = navigation_property(join.from_field)
            if nav and nav not in keys:
                keys.append(nav)
            break
    return keys


def map_rows(records: Iterable[Mapping[str, Any]], query: QueryDefinition) -> List[Dict[str, Any]]:
    """
    Transform raw OData records into row dictionaries.

    :param records: The ``value`` array of an OData response.
    :type records: Iterable[Mapping[str, Any]]
    :param query: Definition the records were fetched for.
    :type query: ~dataverse_query_designer.models.query.QueryDefinition
    :return: Rows keyed ``"<entityAlias>.<fieldName>"``; missing data maps to ``None``.
    :rtype: list[dict[str, Any]]
    """
    rows: List[Dict[str, Any]] = []
    for record in records:
        if not isinstance(record, Mapping):
            record = {}
        rows.append({f.key: map_value(record, f, query) for f in query.fields})
    return rows


__all__ = [
    "formatted_value_key",
    "formatted_value",
    "build_columns",
    "map_value",
    "map_rows",
]
