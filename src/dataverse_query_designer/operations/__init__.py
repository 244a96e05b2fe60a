# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation namespace classes for the query designer.

This module contains the operation namespace classes that organize
related operations under intuitive namespaces:
- EnvironmentOperations: Ownership checks and connection tests
- MetadataOperations: Entity, attribute and relationship lookups
- QueryOperations: Query execution and export
- SavedQueryOperations: Saved query CRUD
"""

__all__ = []
