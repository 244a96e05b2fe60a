# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from dataverse_query_designer.models.saved_query import SavedQuery


def test_trailing_slash_stripped_and_scope(sample_environment):
    assert sample_environment.organization_url == "https://org.example.com"
    assert sample_environment.scope == "https://org.example.com/.default"


def test_secret_never_exposed(sample_environment):
    assert "s3cr3t" not in repr(sample_environment)
    assert "client_secret" not in sample_environment.to_dict()


def test_saved_query_parses_definition(sample_definition):
    saved = SavedQuery(id="q1", user_id="user-1", environment_id="env-1", name="Q", definition=sample_definition)
    q = saved.query()
    assert q.primary_entity == "account"
    assert q.joins[0].to_entity_alias == "contact_1"
    d = saved.to_dict()
    assert d["definition"] == sample_definition
    assert "description" not in d
    assert d["createdAt"].endswith("+00:00")


def test_saved_query_copy_is_deep(sample_definition):
    saved = SavedQuery(id="q1", user_id="user-1", environment_id="env-1", name="Q", definition=sample_definition)
    clone = saved.copy()
    clone.definition["fields"].append({"entityAlias": "main", "fieldName": "x"})
    assert len(saved.definition["fields"]) == 3
