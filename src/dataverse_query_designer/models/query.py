# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Query definition models built by the visual query designer.

A :class:`QueryDefinition` names a primary entity, the fields to show (from the
primary entity or from joined entities), filters, sort orders and an optional
row limit. Definitions travel as camelCase JSON documents; :meth:`QueryDefinition.from_dict`
and :meth:`QueryDefinition.to_dict` convert between that document and the dataclasses
without adding or dropping keys, so a saved definition reloads byte-identical.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..common.constants import DEFAULT_PRIMARY_ALIAS


class FilterOperator(str, Enum):
    """Comparison operators available to designer filters."""

    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER_THAN = "gt"
    GREATER_OR_EQUAL = "ge"
    LESS_THAN = "lt"
    LESS_OR_EQUAL = "le"
    CONTAINS = "contains"
    STARTS_WITH = "startswith"
    ENDS_WITH = "endswith"
    IS_NULL = "null"
    IS_NOT_NULL = "notnull"


class LogicalOperator(str, Enum):
    AND = "and"
    OR = "or"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _put(out: Dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        out[key] = _enum_value(value)


@dataclass
class QueryField:
    """
    A column selected for display.

    :param entity_alias: Primary alias or the ``to_entity_alias`` of a join.
    :type entity_alias: str
    :param field_name: Attribute logical name.
    :type field_name: str
    :param display_name: Column header; defaults to ``field_name``.
    :type display_name: str | None
    :param aggregation: ``count``, ``sum``, ``avg``, ``min`` or ``max`` (carried, not compiled).
    :type aggregation: str | None
    """

    entity_alias: str
    field_name: str
    display_name: Optional[str] = None
    aggregation: Optional[str] = None

    @property
    def key(self) -> str:
        """Row key ``"<entity_alias>.<field_name>"``."""
        return f"{self.entity_alias}.{self.field_name}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryField":
        return cls(
            entity_alias=data["entityAlias"],
            field_name=data["fieldName"],
            display_name=data.get("displayName"),
            aggregation=data.get("aggregation"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"entityAlias": self.entity_alias, "fieldName": self.field_name}
        _put(out, "displayName", self.display_name)
        _put(out, "aggregation", self.aggregation)
        return out


@dataclass
class QueryJoin:
    """
    One navigation-property expansion from an already present alias.

    :param from_entity_alias: Alias of the source side.
    :type from_entity_alias: str
    :param from_field: Lookup attribute logical name on the source side (e.g. ``primarycontactid``).
    :type from_field: str
    :param to_entity: Logical name of the target entity.
    :type to_entity: str
    :param to_entity_alias: Alias of the target; unique across the definition's joins.
    :type to_entity_alias: str
    :param to_field: Key attribute on the target side.
    :type to_field: str
    :param join_type: ``inner`` or ``left``.
    :type join_type: str | None
    """

    from_entity_alias: str
    from_field: str
    to_entity: str
    to_entity_alias: str
    to_field: str
    join_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryJoin":
        return cls(
            from_entity_alias=data["fromEntityAlias"],
            from_field=data["fromField"],
            to_entity=data["toEntity"],
            to_entity_alias=data["toEntityAlias"],
            to_field=data["toField"],
            join_type=data.get("joinType"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "fromEntityAlias": self.from_entity_alias,
            "fromField": self.from_field,
            "toEntity": self.to_entity,
            "toEntityAlias": self.to_entity_alias,
            "toField": self.to_field,
        }
        _put(out, "joinType", self.join_type)
        return out


@dataclass
class QueryFilter:
    """
    One predicate in the left-to-right filter chain.

    ``logical_operator`` joins this filter to the previous one; it is ignored on the
    first filter. ``value`` must already carry its runtime type: strings are quoted,
    everything else is rendered bare.
    """

    entity_alias: str
    field_name: str
    operator: str
    value: Any = None
    logical_operator: Optional[str] = None
    _explicit_null: bool = field(default=False, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryFilter":
        return cls(
            entity_alias=data["entityAlias"],
            field_name=data["fieldName"],
            operator=data["operator"],
            value=data.get("value"),
            logical_operator=data.get("logicalOperator"),
            _explicit_null="value" in data and data["value"] is None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "entityAlias": self.entity_alias,
            "fieldName": self.field_name,
            "operator": _enum_value(self.operator),
        }
        if self.value is not None or self._explicit_null:
            out["value"] = self.value
        _put(out, "logicalOperator", self.logical_operator)
        return out


@dataclass
class QuerySort:
    entity_alias: str
    field_name: str
    direction: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuerySort":
        return cls(
            entity_alias=data["entityAlias"],
            field_name=data["fieldName"],
            direction=data.get("direction"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"entityAlias": self.entity_alias, "fieldName": self.field_name}
        _put(out, "direction", self.direction)
        return out


@dataclass
class QueryDefinition:
    """
    Root aggregate describing a designer query.

    :param environment_id: Environment the query runs against.
    :type environment_id: str
    :param primary_entity: Logical name of the primary entity.
    :type primary_entity: str
    :param fields: Columns to return, in display order.
    :type fields: list[QueryField]
    :param primary_entity_alias: Alias of the primary entity (default ``"main"``).
    :type primary_entity_alias: str | None
    :param joins: Navigation-property expansions.
    :type joins: list[QueryJoin] | None
    :param filters: Predicates, combined left to right without grouping.
    :type filters: list[QueryFilter] | None
    :param order_by: Sort orders, applied in list order.
    :type order_by: list[QuerySort] | None
    :param top: Row limit stored with the definition.
    :type top: int | None

    Example:
        Load a designer document and inspect it::

            definition = QueryDefinition.from_dict({
                "environmentId": "env-1",
                "primaryEntity": "account",
                "fields": [{"entityAlias": "main", "fieldName": "name"}],
            })
            print(definition.alias)  # "main"
    """

    environment_id: str
    primary_entity: str
    fields: List[QueryField] = field(default_factory=list)
    primary_entity_alias: Optional[str] = None
    joins: Optional[List[QueryJoin]] = None
    filters: Optional[List[QueryFilter]] = None
    order_by: Optional[List[QuerySort]] = None
    top: Optional[int] = None
    skip: Optional[int] = None

    @property
    def alias(self) -> str:
        """Effective primary alias."""
        return self.primary_entity_alias or DEFAULT_PRIMARY_ALIAS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryDefinition":
        """
        Build a definition from its camelCase JSON document.

        :param data: Document such as the one persisted for a saved query.
        :type data: dict[str, Any]
        :return: Parsed definition.
        :rtype: QueryDefinition
        :raises KeyError: If a required key is missing.
        :raises TypeError: If ``data`` or a nested item is not a mapping.
        """
        if not isinstance(data, dict):
            raise TypeError("query definition must be a dict")

        def _items(key: str, parser):
            raw = data.get(key)
            if raw is None:
                return None
            return [parser(item) for item in raw]

        return cls(
            environment_id=data.get("environmentId"),
            primary_entity=data.get("primaryEntity"),
            primary_entity_alias=data.get("primaryEntityAlias"),
            fields=_items("fields", QueryField.from_dict) or [],
            joins=_items("joins", QueryJoin.from_dict),
            filters=_items("filters", QueryFilter.from_dict),
            order_by=_items("orderBy", QuerySort.from_dict),
            top=data.get("top"),
            skip=data.get("skip"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the camelCase JSON document."""
        out: Dict[str, Any] = {}
        _put(out, "environmentId", self.environment_id)
        _put(out, "primaryEntity", self.primary_entity)
        _put(out, "primaryEntityAlias", self.primary_entity_alias)
        out["fields"] = [f.to_dict() for f in self.fields]
        if self.joins is not None:
            out["joins"] = [j.to_dict() for j in self.joins]
        if self.filters is not None:
            out["filters"] = [f.to_dict() for f in self.filters]
        if self.order_by is not None:
            out["orderBy"] = [s.to_dict() for s in self.order_by]
        _put(out, "top", self.top)
        _put(out, "skip", self.skip)
        return out


__all__ = [
    "FilterOperator",
    "LogicalOperator",
    "SortDirection",
    "QueryField",
    "QueryJoin",
    "QueryFilter",
    "QuerySort",
    "QueryDefinition",
]
