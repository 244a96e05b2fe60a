# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exception hierarchy for the query designer.

All errors derive from :class:`DataverseError`, which carries a stable ``code``,
an optional ``subcode`` and a ``details`` mapping safe to surface to callers.
Tokens and client secrets are never placed in ``details``.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional


class DataverseError(Exception):
    """Base structured error for the query designer."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ValidationError(DataverseError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", subcode=subcode, details=details, source="client")


class NotFoundError(DataverseError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="not_found", subcode=subcode, status_code=404, details=details, source="client")


class MetadataError(DataverseError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="metadata_error", subcode=subcode, details=details, source="client")


class ExportError(DataverseError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="export_error", subcode=subcode, details=details, source="client")


class HttpError(DataverseError):
    """
    Error raised when a Dataverse (or identity) endpoint answers with a failure.

    :param message: Human readable message, typically the service error message.
    :param status_code: HTTP status returned by the service (``None`` for network failures).
    :param is_transient: Whether the status is one a caller may retry later.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int],
        is_transient: bool = False,
        subcode: Optional[str] = None,
        service_error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        request_id: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: str = "http_error",
    ) -> None:
        d = details or {}
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if correlation_id is not None:
            d["correlation_id"] = correlation_id
        if request_id is not None:
            d["request_id"] = request_id
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        super().__init__(
            message,
            code=code,
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server",
            is_transient=is_transient,
        )


class UpstreamAuthError(HttpError):
    """OAuth2 client-credentials exchange with the identity platform failed."""

    def __init__(self, message: str, status_code: Optional[int] = 401, **kwargs: Any) -> None:
        super().__init__(message, status_code, code="upstream_auth_error", **kwargs)


class UpstreamQueryError(HttpError):
    """
    A Dataverse Web API call failed.

    ``details`` carries the compiled OData query and its ``$filter`` clause so a
    malformed predicate or unknown column can be diagnosed from the error alone.
    """

    def __init__(self, message: str, status_code: Optional[int], **kwargs: Any) -> None:
        super().__init__(message, status_code, code="upstream_query_error", **kwargs)


__all__ = [
    "DataverseError",
    "ValidationError",
    "NotFoundError",
    "MetadataError",
    "ExportError",
    "HttpError",
    "UpstreamAuthError",
    "UpstreamQueryError",
]
