# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Designer query execution and export namespace."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from ..common.constants import LOGGER_NAME, ODATA_COUNT_ANNOTATION
from ..core._error_codes import (
    VALIDATION_DUPLICATE_JOIN_ALIAS,
    VALIDATION_FIELDS_EMPTY,
    VALIDATION_MALFORMED_DEFINITION,
    VALIDATION_PAGE_OUT_OF_RANGE,
    VALIDATION_PAGE_SIZE_OUT_OF_RANGE,
    VALIDATION_PRIMARY_ENTITY_MISSING,
    VALIDATION_UNSUPPORTED_EXPORT_FORMAT,
)
from ..core.errors import ValidationError
from ..core.results import QueryResult
from ..data.compiler import build_query_options, compile_query, filter_clause
from ..data.mapper import build_columns, map_rows
from ..models.query import QueryDefinition
from ..utils._excel import write_csv, write_xlsx

if TYPE_CHECKING:
    from ..client import QueryDesignerClient

logger = logging.getLogger(f"{LOGGER_NAME}.query")

QueryLike = Union[QueryDefinition, Dict[str, Any]]

EXPORT_FORMATS = ("xlsx", "csv")


def _coerce(query: QueryLike) -> QueryDefinition:
    if isinstance(query, QueryDefinition):
        return query
    try:
        return QueryDefinition.from_dict(query)
    except (KeyError, TypeError) as exc:
        raise ValidationError(
            f"Malformed query definition: {exc}",
            subcode=VALIDATION_MALFORMED_DEFINITION,
        ) from exc


def _validate_definition(query: QueryDefinition) -> None:
    if not query.primary_entity or not str(query.primary_entity).strip():
        raise ValidationError("Primary entity is required", subcode=VALIDATION_PRIMARY_ENTITY_MISSING)
    if not query.fields:
        raise ValidationError("At least one field must be selected", subcode=VALIDATION_FIELDS_EMPTY)
    seen = set()
    for join in query.joins or []:
        if join.to_entity_alias in seen:
            raise ValidationError(
                f"Duplicate join alias '{join.to_entity_alias}'",
                subcode=VALIDATION_DUPLICATE_JOIN_ALIAS,
                details={"alias": join.to_entity_alias},
            )
        seen.add(join.to_entity_alias)


class QueryOperations:
    """
    Execute and export designer queries.

    Accessed via ``client.query``. Each call makes exactly one attempt against
    Dataverse; failures surface as
    :class:`~dataverse_query_designer.core.errors.UpstreamQueryError` with the
    compiled query attached.

    Example:
        Run the second page of a query::

            result = client.query.execute(user_id, definition, page=2, page_size=25)
            print(result.total_count, result.has_more)

        Download an Excel file::

            data = client.query.export_to_excel(user_id, definition)
            with open("results.xlsx", "wb") as fh:
                fh.write(data)
    """

    def __init__(self, client: "QueryDesignerClient") -> None:
        self._client = client

    def execute(
        self,
        user_id: str,
        query: QueryLike,
        page: int = 1,
        page_size: Optional[int] = None,
        count_only: bool = False,
    ) -> QueryResult:
        """
        Execute one page of a query definition.

        :param user_id: Requesting user; must own the query's environment.
        :type user_id: str
        :param query: Definition or its camelCase JSON document.
        :type query: ~dataverse_query_designer.models.query.QueryDefinition | dict
        :param page: 1-based page number.
        :type page: int
        :param page_size: Records per page; defaults to ``config.default_page_size``.
        :type page_size: int | None
        :param count_only: Only request ``@odata.count`` (``$top=0``).
        :type count_only: bool
        :return: The mapped page.
        :rtype: ~dataverse_query_designer.core.results.QueryResult

        :raises ValidationError: If the definition or paging arguments are invalid.
        :raises NotFoundError: If the environment is not owned by ``user_id``.
        :raises UpstreamAuthError: If the token exchange fails.
        :raises UpstreamQueryError: If a Dataverse request fails.
        """
        config = self._client._config
        if page_size is None:
            page_size = config.default_page_size
        q = _coerce(query)
        _validate_definition(q)
        if page < 1:
            raise ValidationError("page must be >= 1", subcode=VALIDATION_PAGE_OUT_OF_RANGE, details={"page": page})
        if page_size < 1 or page_size > config.max_page_size:
            raise ValidationError(
                f"page_size must be between 1 and {config.max_page_size}",
                subcode=VALIDATION_PAGE_SIZE_OUT_OF_RANGE,
                details={"page_size": page_size},
            )
        return self._run(user_id, q, page, page_size, count_only)

    def count(self, user_id: str, query: QueryLike) -> Optional[int]:
        """Return the server-side match count, or ``None`` if Dataverse did not report one."""
        return self.execute(user_id, query, count_only=True).total_count

    def export(self, user_id: str, query: QueryLike, format: str = "xlsx") -> bytes:
        """
        Export the first ``config.export_row_limit`` matching rows.

        :param format: ``"xlsx"`` or ``"csv"``.
        :type format: str
        :raises ValidationError: If ``format`` is not supported.
        """
        fmt = (format or "").lower()
        if fmt == "xlsx":
            return self.export_to_excel(user_id, query)
        if fmt == "csv":
            return self.export_to_csv(user_id, query)
        raise ValidationError(
            f"Unsupported export format '{format}'",
            subcode=VALIDATION_UNSUPPORTED_EXPORT_FORMAT,
            details={"supported": list(EXPORT_FORMATS)},
        )

    def export_to_excel(self, user_id: str, query: QueryLike) -> bytes:
        """
        Export to an ``.xlsx`` workbook.

        Only one page of ``config.export_row_limit`` rows is fetched; larger result
        sets are truncated.

        :raises ExportError: If the workbook cannot be written.
        """
        return write_xlsx(self._export_result(user_id, query))

    def export_to_csv(self, user_id: str, query: QueryLike) -> bytes:
        """Export to UTF-8 CSV, with the same row cap as :meth:`export_to_excel`."""
        return write_csv(self._export_result(user_id, query))

    # --------------------------- internals ------------------------------
    def _export_result(self, user_id: str, query: QueryLike) -> QueryResult:
        q = _coerce(query)
        _validate_definition(q)
        result = self._run(user_id, q, 1, self._client._config.export_row_limit, False)
        if result.has_more:
            logger.info("Export of %s truncated at %d rows", q.primary_entity, len(result.rows))
        return result

    def _run(self, user_id: str, q: QueryDefinition, page: int, page_size: int, count_only: bool) -> QueryResult:
        environment = self._client.environments.get(user_id, q.environment_id)
        started = time.perf_counter()
        with self._client._scoped_odata(environment) as od:
            entity_set = od._entity_set_name(q.primary_entity)
            options = build_query_options(q, page, page_size, count_only)
            compiled = compile_query(q, page, page_size, count_only)
            logger.debug("GET %s/%s%s", od.api, entity_set, compiled)
            body = od._execute_query(
                entity_set,
                options,
                page_size,
                error_details={"entity_set": entity_set, "query": compiled, "filter": filter_clause(q)},
            )
        records = body.get("value") or []
        rows = map_rows(records, q)
        total = body.get(ODATA_COUNT_ANNOTATION)
        elapsed_ms = int(round((time.perf_counter() - started) * 1000))
        return QueryResult(
            columns=build_columns(q),
            rows=rows,
            page=page,
            page_size=page_size,
            has_more=len(records) == page_size,
            execution_time=elapsed_ms,
            total_count=int(total) if total is not None else None,
        )


__all__ = ["QueryOperations"]
