# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Low-level Dataverse Web API client scoped to one environment.

One :class:`_ODataClient` is created per designer operation. It owns nothing but
the bearer token for that operation; connection pooling comes from an optional
shared :class:`requests.Session`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import requests

from ..common.constants import LOGGER_NAME, ODATA_HEADERS
from ..core._auth import _AuthManager
from ..core._error_codes import (
    METADATA_ENTITYSET_NAME_MISSING,
    UPSTREAM_NETWORK_ERROR,
    _http_subcode,
    _is_transient_status,
)
from ..core._http import _HttpClient
from ..core.config import DesignerConfig
from ..core.errors import MetadataError, UpstreamQueryError
from ..models.environment import Environment
from ._metadata import _MetadataOperationsMixin
from .compiler import escape_odata_literal

logger = logging.getLogger(f"{LOGGER_NAME}.odata")

Params = Union[Dict[str, Any], Sequence[Tuple[str, str]], None]

_BODY_EXCERPT_LIMIT = 500


class _ODataClient(_MetadataOperationsMixin):
    """Dataverse Web API client: metadata lookups and designer query execution."""

    @staticmethod
    def _escape_odata_quotes(value: str) -> str:
        """Escape single quotes for OData queries (by doubling them)."""
        return escape_odata_literal(value)

    def __init__(
        self,
        auth: _AuthManager,
        environment: Environment,
        config: Optional[DesignerConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.auth = auth
        self.environment = environment
        self.base_url = (environment.organization_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("organization_url is required.")
        self.config = config or DesignerConfig.from_env()
        self.api = f"{self.base_url}/api/data/{self.config.api_version}"
        self._http = _HttpClient(
            retries=self.config.http_retries,
            timeout=self.config.http_timeout,
            session=session,
        )
        self._token: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        """Build standard OData headers with bearer auth (token acquired once per client)."""
        if self._token is None:
            self._token = self.auth._acquire_token(self.environment).access_token
        return {"Authorization": f"Bearer {self._token}", **ODATA_HEADERS}

    def _request(
        self,
        method: str,
        url: str,
        *,
        error_details: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ):
        """
        Issue a request and raise :class:`UpstreamQueryError` on network failure or HTTP >= 400.

        :param error_details: Extra diagnostic values attached to a raised error.
        :type error_details: dict[str, Any] | None
        """
        try:
            r = self._http._request(method, url, **kwargs)
        except requests.exceptions.RequestException as exc:
            logger.warning("%s %s failed: %s", method.upper(), url, exc)
            raise UpstreamQueryError(
                f"Dataverse request failed: {exc}",
                None,
                subcode=UPSTREAM_NETWORK_ERROR,
                details=dict(error_details or {}),
            ) from exc
        status = getattr(r, "status_code", None)
        if status is not None and status >= 400:
            self._raise_http_error(r, error_details)
        return r

    def _raise_http_error(self, r, error_details: Optional[Dict[str, Any]] = None) -> None:
        status = r.status_code
        body: Any = None
        try:
            body = r.json() if getattr(r, "text", None) else None
        except ValueError:
            body = None
        service_code = None
        message = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            service_code = body["error"].get("code")
            message = body["error"].get("message")
        if not message:
            message = getattr(r, "reason", None) or f"HTTP {status}"
        excerpt = None
        text = getattr(r, "text", None)
        if isinstance(text, str) and text:
            excerpt = text[:_BODY_EXCERPT_LIMIT]
        headers = getattr(r, "headers", None) or {}
        details = dict(error_details or {})
        retry_after = headers.get("Retry-After")
        if retry_after is not None:
            try:
                details["retry_after"] = int(retry_after)
            except (TypeError, ValueError):
                details["retry_after"] = retry_after
        logger.warning("Dataverse returned %s: %s", status, message)
        raise UpstreamQueryError(
            message,
            status,
            is_transient=_is_transient_status(status),
            subcode=_http_subcode(status),
            service_error_code=service_code,
            correlation_id=headers.get("x-ms-correlation-request-id") or headers.get("x-ms-correlation-id"),
            request_id=headers.get("x-ms-service-request-id"),
            body_excerpt=excerpt,
            details=details,
        )

    def _get_json(
        self,
        url: str,
        *,
        params: Params = None,
        extra_headers: Optional[Dict[str, str]] = None,
        error_details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = self._headers()
        if extra_headers:
            headers.update(extra_headers)
        r = self._request("get", url, headers=headers, params=params, error_details=error_details)
        try:
            body = r.json() if r.text else {}
        except ValueError:
            body = {}
        return body if isinstance(body, dict) else {}

    # ---------------------- Entity set resolution -----------------------
    def _entity_set_name(self, logical: str) -> str:
        """
        Resolve the entity set name (plural) for a logical (singular) name.

        :raises MetadataError: If the metadata response carries no ``EntitySetName``.
        """
        if not logical:
            raise ValueError("logical name required")
        logical_esc = self._escape_odata_quotes(logical)
        url = f"{self.api}/EntityDefinitions(LogicalName='{logical_esc}')"
        body = self._get_json(url, params={"$select": "EntitySetName"}, error_details={"entity": logical})
        es = body.get("EntitySetName")
        if not es:
            raise MetadataError(
                f"Metadata response missing EntitySetName for logical '{logical}'.",
                subcode=METADATA_ENTITYSET_NAME_MISSING,
                details={"entity": logical},
            )
        return es

    # --------------------------- Query execution ------------------------
    def _execute_query(
        self,
        entity_set: str,
        options: List[Tuple[str, str]],
        page_size: int,
        *,
        error_details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        GET ``{api}/{entity_set}`` with compiled system query options.

        Requests every annotation (formatted values) and caps the server page at ``page_size``.
        """
        url = f"{self.api}/{entity_set}"
        prefer = {"Prefer": f'odata.include-annotations="*",odata.maxpagesize={int(page_size)}'}
        return self._get_json(url, params=list(options), extra_headers=prefer, error_details=error_details)

    def _who_am_i(self) -> Dict[str, Any]:
        return self._get_json(f"{self.api}/WhoAmI")
