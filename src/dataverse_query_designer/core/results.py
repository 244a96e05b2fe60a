# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Result types for query designer executions.

A :class:`QueryResult` is the flat tabular view of one executed page: columns in
definition order, and rows keyed ``"<entityAlias>.<fieldName>"``. Results are
regenerated on every execution and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class QueryColumn:
    """
    Column description derived from a query field.

    :param name: Attribute logical name.
    :type name: :class:`str`
    :param display_name: Header shown to users.
    :type display_name: :class:`str`
    :param type: Column type. Always ``"string"``; attribute typing is not resolved.
    :type type: :class:`str`
    :param entity_alias: Alias the column belongs to.
    :type entity_alias: :class:`str`
    """

    name: str
    display_name: str
    type: str
    entity_alias: str

    @property
    def key(self) -> str:
        return f"{self.entity_alias}.{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "type": self.type,
            "entityAlias": self.entity_alias,
        }


@dataclass(frozen=True)
class QueryResult:
    """
    One page of an executed designer query.

    :param columns: Column descriptions in definition order.
    :type columns: :class:`list` of :class:`QueryColumn`
    :param rows: Row dictionaries keyed ``"<entityAlias>.<fieldName>"``.
    :type rows: :class:`list` of :class:`dict`
    :param page: 1-based page number that was requested.
    :type page: :class:`int`
    :param page_size: Page size that was requested.
    :type page_size: :class:`int`
    :param has_more: ``True`` when the page came back full. A last page holding exactly
        ``page_size`` rows also reports ``True``.
    :type has_more: :class:`bool`
    :param execution_time: Wall-clock milliseconds spent in the execution.
    :type execution_time: :class:`int`
    :param total_count: Server-side ``@odata.count`` when returned.
    :type total_count: :class:`int` | None

    Example:
        Render a page::

            result = client.query.execute(user_id, definition, page=2, page_size=25)
            headers = [c.display_name for c in result.columns]
            for row in result.rows:
                print([row[c.key] for c in result.columns])
    """

    columns: List[QueryColumn] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    page: int = 1
    page_size: int = 0
    has_more: bool = False
    execution_time: int = 0
    total_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation consumed by table renderers."""
        out: Dict[str, Any] = {
            "columns": [c.to_dict() for c in self.columns],
            "rows": [dict(r) for r in self.rows],
            "page": self.page,
            "pageSize": self.page_size,
            "hasMore": self.has_more,
            "executionTime": self.execution_time,
        }
        if self.total_count is not None:
            out["totalCount"] = self.total_count
        return out

    def to_dataframe(self) -> "pd.DataFrame":
        """
        Return the rows as a :class:`pandas.DataFrame`.

        Columns follow :attr:`columns` order and are labelled with each column's row key.
        """
        from ..utils._pandas import result_to_dataframe

        return result_to_dataframe(self)


__all__ = ["QueryColumn", "QueryResult"]
