# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models for the query designer.

- :mod:`~dataverse_query_designer.models.query`: query definitions built in the designer
- :mod:`~dataverse_query_designer.models.metadata`: entity, attribute and relationship snapshots
- :mod:`~dataverse_query_designer.models.environment`: registered Dataverse environments
- :mod:`~dataverse_query_designer.models.saved_query`: persisted query definitions
"""

from .environment import Environment
from .metadata import AttributeMetadata, EntityMetadata, OptionMetadata, RelationshipMetadata
from .query import (
    FilterOperator,
    LogicalOperator,
    QueryDefinition,
    QueryField,
    QueryFilter,
    QueryJoin,
    QuerySort,
    SortDirection,
)
from .saved_query import SavedQuery

__all__ = [
    "Environment",
    "AttributeMetadata",
    "EntityMetadata",
    "OptionMetadata",
    "RelationshipMetadata",
    "FilterOperator",
    "LogicalOperator",
    "QueryDefinition",
    "QueryField",
    "QueryFilter",
    "QueryJoin",
    "QuerySort",
    "SortDirection",
    "SavedQuery",
]
