# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer: OData compilation, row mapping, Web API client and repositories.
"""

from .compiler import build_query_options, compile_query, escape_odata_literal, navigation_property
from .mapper import build_columns, map_rows
from .repositories import (
    EnvironmentRepository,
    InMemoryEnvironmentRepository,
    InMemorySavedQueryRepository,
    SavedQueryRepository,
)

__all__ = [
    "build_query_options",
    "compile_query",
    "escape_odata_literal",
    "navigation_property",
    "build_columns",
    "map_rows",
    "EnvironmentRepository",
    "SavedQueryRepository",
    "InMemoryEnvironmentRepository",
    "InMemorySavedQueryRepository",
]
