# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from dataverse_query_designer.core.config import DesignerConfig
from dataverse_query_designer.core.errors import MetadataError, NotFoundError
from tests.unit.test_helpers import TestableDesignerClient


def test_entities():
    client = TestableDesignerClient([(200, {}, {"value": [{"LogicalName": "account", "EntitySetName": "accounts"}]})])
    entities = client.metadata.entities("user-1", "env-1")
    assert [e.entity_set_name for e in entities] == ["accounts"]


def test_attributes_single_worker():
    client = TestableDesignerClient(
        [
            (200, {}, {"value": [{"LogicalName": "primarycontactid", "AttributeType": "Lookup"}]}),
            (200, {}, {"Targets": ["contact"]}),
        ],
        config=DesignerConfig(metadata_max_workers=1),
    )
    attrs = client.metadata.attributes("user-1", "env-1", "account")
    assert attrs[0].targets == ["contact"]


def test_relationships_partial():
    client = TestableDesignerClient([(500, {}, "err"), (200, {}, {"value": []})])
    assert client.metadata.relationships("user-1", "env-1", "account") == []
    assert len(client.http.calls) == 2


def test_entity_set_name():
    client = TestableDesignerClient([(200, {}, {"EntitySetName": "contacts"})])
    assert client.metadata.entity_set_name("user-1", "env-1", "contact") == "contacts"


def test_entity_set_name_missing():
    client = TestableDesignerClient([(200, {}, {"EntitySetName": None})])
    with pytest.raises(MetadataError):
        client.metadata.entity_set_name("user-1", "env-1", "contact")


def test_ownership_enforced():
    client = TestableDesignerClient([])
    with pytest.raises(NotFoundError):
        client.metadata.entities("user-2", "env-1")
