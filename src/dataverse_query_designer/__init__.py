# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Dataverse query designer: compile visual query definitions to OData, execute them
against Dataverse, and export the results.
"""

__version__ = "0.1.0"

from .client import QueryDesignerClient
from .core.config import DesignerConfig
from .core.errors import (
    DataverseError,
    ExportError,
    HttpError,
    MetadataError,
    NotFoundError,
    UpstreamAuthError,
    UpstreamQueryError,
    ValidationError,
)
from .core.results import QueryColumn, QueryResult
from .models.environment import Environment
from .models.query import QueryDefinition
from .models.saved_query import SavedQuery

__all__ = [
    "__version__",
    "QueryDesignerClient",
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
    "Environment",
    "QueryDefinition",
    "SavedQuery",
]
