# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for query designer tests.

This module provides common test fixtures, mock objects, and configuration
that can be used across all test modules.
"""

import pytest

from dataverse_query_designer.core.config import DesignerConfig
from dataverse_query_designer.models.environment import Environment


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return DesignerConfig(http_retries=1, http_timeout=5)


@pytest.fixture
def sample_environment():
    """Environment owned by ``user-1``."""
    return Environment(
        id="env-1",
        user_id="user-1",
        name="Contoso Dev",
        organization_url="https://org.example.com/",
        client_id="client-id",
        client_secret="s3cr3t",
        tenant_id="tenant-id",
    )


@pytest.fixture
def sample_definition():
    """Designer document with a join, two filters and a sort."""
    return {
        "environmentId": "env-1",
        "primaryEntity": "account",
        "fields": [
            {"entityAlias": "main", "fieldName": "name", "displayName": "Account Name"},
            {"entityAlias": "main", "fieldName": "revenue"},
            {"entityAlias": "contact_1", "fieldName": "fullname", "displayName": "Primary Contact"},
        ],
        "joins": [
            {
                "fromEntityAlias": "main",
                "fromField": "primarycontactid",
                "toEntity": "contact",
                "toEntityAlias": "contact_1",
                "toField": "contactid",
            }
        ],
        "filters": [
            {"entityAlias": "main", "fieldName": "name", "operator": "contains", "value": "Contoso"},
            {"entityAlias": "main", "fieldName": "revenue", "operator": "gt", "value": 1000, "logicalOperator": "or"},
        ],
        "orderBy": [{"entityAlias": "main", "fieldName": "name", "direction": "desc"}],
    }
