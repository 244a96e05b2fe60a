# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the query designer.

This module contains the foundational components including authentication,
configuration, HTTP client, result types and error handling.
"""

from .config import DesignerConfig
from .errors import (
    DataverseError,
    ExportError,
    HttpError,
    MetadataError,
    NotFoundError,
    UpstreamAuthError,
    UpstreamQueryError,
    ValidationError,
)
from .results import QueryColumn, QueryResult

__all__ = [
    "DesignerConfig",
    "DataverseError",
    "ExportError",
    "HttpError",
    "MetadataError",
    "NotFoundError",
    "UpstreamAuthError",
    "UpstreamQueryError",
    "ValidationError",
    "QueryColumn",
    "QueryResult",
]
