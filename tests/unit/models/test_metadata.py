# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from dataverse_query_designer.models.metadata import (
    AttributeMetadata,
    EntityMetadata,
    OptionMetadata,
    RelationshipMetadata,
)


def test_entity_from_api_response():
    e = EntityMetadata.from_api_response(
        {
            "LogicalName": "account",
            "DisplayName": {"UserLocalizedLabel": {"Label": "Account"}},
            "EntitySetName": "accounts",
            "PrimaryIdAttribute": "accountid",
            "PrimaryNameAttribute": "name",
            "IsCustomEntity": False,
        }
    )
    assert e.to_dict() == {
        "logicalName": "account",
        "displayName": "Account",
        "entitySetName": "accounts",
        "primaryIdAttribute": "accountid",
        "primaryNameAttribute": "name",
        "isCustomEntity": False,
    }


def test_entity_display_name_falls_back_to_logical_name():
    assert EntityMetadata.from_api_response({"LogicalName": "new_thing"}).display_name == "new_thing"


def test_attribute_required_levels():
    for level, expected in (("SystemRequired", True), ("ApplicationRequired", True), ("Recommended", False), ("None", False)):
        a = AttributeMetadata.from_api_response({"LogicalName": "x", "RequiredLevel": {"Value": level}})
        assert a.is_required is expected
    assert AttributeMetadata.from_api_response({"LogicalName": "x", "RequiredLevel": "SystemRequired"}).is_required


def test_attribute_to_dict_includes_targets_and_options_only_when_fetched():
    a = AttributeMetadata.from_api_response({"LogicalName": "industrycode", "AttributeType": "Picklist"})
    assert "options" not in a.to_dict()
    a.options = [OptionMetadata(1, "Accounting")]
    a.targets = []
    d = a.to_dict()
    assert d["options"] == [{"value": 1, "label": "Accounting"}]
    assert d["targets"] == []
    assert d["attributeType"] == "Picklist"


def test_option_label_falls_back_to_value():
    assert OptionMetadata.from_api_response({"Value": 100000001, "Label": {"UserLocalizedLabel": None}}).label == "100000001"


def test_relationship_to_dict():
    r = RelationshipMetadata.from_api_response(
        {
            "SchemaName": "account_primary_contact",
            "ReferencingEntity": "account",
            "ReferencingAttribute": "primarycontactid",
            "ReferencedEntity": "contact",
            "ReferencedAttribute": "contactid",
        },
        "ManyToOne",
    )
    assert r.to_dict()["relationshipType"] == "ManyToOne"
    assert r.to_dict()["referencingAttribute"] == "primarycontactid"
