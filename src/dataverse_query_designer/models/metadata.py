# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Metadata snapshots used by the query designer.

These classes are read-only views over the Dataverse metadata entity types
(``EntityMetadata``, ``AttributeMetadata``, ``RelationshipMetadataBase``) with just
the properties the designer needs to list tables, pick columns and build joins.

See: https://learn.microsoft.com/en-us/power-apps/developer/data-platform/webapi/reference/metadataentitytypes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..common.constants import REQUIRED_LEVELS


def _user_label(value: Any) -> Optional[str]:
    """Return ``UserLocalizedLabel.Label`` from a Label payload (or a plain string)."""
    if isinstance(value, dict):
        label_obj = value.get("UserLocalizedLabel")
        if isinstance(label_obj, dict):
            label = label_obj.get("Label")
            return label if label else None
        return None
    return value if value else None


@dataclass(frozen=True)
class EntityMetadata:
    """
    One queryable Dataverse table.

    :param logical_name: Table logical name, e.g. ``"account"``.
    :type logical_name: str
    :param display_name: Localized display name (falls back to the logical name).
    :type display_name: str
    :param entity_set_name: Collection name used in OData resource paths, e.g. ``"accounts"``.
    :type entity_set_name: str
    :param primary_id_attribute: Primary key column.
    :type primary_id_attribute: str
    :param primary_name_attribute: Primary name column.
    :type primary_name_attribute: str
    :param description: Localized description.
    :type description: str | None
    :param is_custom_entity: Whether the table is custom.
    :type is_custom_entity: bool
    """

    logical_name: str
    display_name: str
    entity_set_name: str
    primary_id_attribute: str
    primary_name_attribute: str
    description: Optional[str] = None
    is_custom_entity: bool = False

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "EntityMetadata":
        logical = response_data.get("LogicalName", "")
        return cls(
            logical_name=logical,
            display_name=_user_label(response_data.get("DisplayName")) or logical,
            entity_set_name=response_data.get("EntitySetName", ""),
            primary_id_attribute=response_data.get("PrimaryIdAttribute", ""),
            primary_name_attribute=response_data.get("PrimaryNameAttribute", ""),
            description=_user_label(response_data.get("Description")),
            is_custom_entity=bool(response_data.get("IsCustomEntity", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "logicalName": self.logical_name,
            "displayName": self.display_name,
            "entitySetName": self.entity_set_name,
            "primaryIdAttribute": self.primary_id_attribute,
            "primaryNameAttribute": self.primary_name_attribute,
            "isCustomEntity": self.is_custom_entity,
        }
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass(frozen=True)
class OptionMetadata:
    """A choice value and its label."""

    value: int
    label: str

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "OptionMetadata":
        value = response_data.get("Value")
        return cls(value=value, label=_user_label(response_data.get("Label")) or f"{value}")

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label}


@dataclass
class AttributeMetadata:
    """
    Column metadata for one entity.

    ``targets`` is filled for lookup-style attributes and ``options`` for choice-style
    attributes; both stay ``None`` when the extra metadata could not be fetched.
    """

    logical_name: str
    display_name: str
    attribute_type: str
    is_primary_id: bool = False
    is_primary_name: bool = False
    is_required: bool = False
    is_custom_attribute: bool = False
    description: Optional[str] = None
    targets: Optional[List[str]] = None
    options: Optional[List[OptionMetadata]] = None

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "AttributeMetadata":
        # RequiredLevel can be a managed property object or a bare value
        required_level = response_data.get("RequiredLevel", {})
        if isinstance(required_level, dict):
            required_value = required_level.get("Value")
        else:
            required_value = required_level

        logical = response_data.get("LogicalName", "")
        return cls(
            logical_name=logical,
            display_name=_user_label(response_data.get("DisplayName")) or logical,
            attribute_type=response_data.get("AttributeType", "Unknown"),
            is_primary_id=bool(response_data.get("IsPrimaryId") or False),
            is_primary_name=bool(response_data.get("IsPrimaryName") or False),
            is_required=required_value in REQUIRED_LEVELS,
            is_custom_attribute=bool(response_data.get("IsCustomAttribute") or False),
            description=_user_label(response_data.get("Description")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "logicalName": self.logical_name,
            "displayName": self.display_name,
            "attributeType": self.attribute_type,
            "isPrimaryId": self.is_primary_id,
            "isPrimaryName": self.is_primary_name,
            "isRequired": self.is_required,
            "isCustomAttribute": self.is_custom_attribute,
        }
        if self.description is not None:
            out["description"] = self.description
        if self.targets is not None:
            out["targets"] = list(self.targets)
        if self.options is not None:
            out["options"] = [o.to_dict() for o in self.options]
        return out


@dataclass(frozen=True)
class RelationshipMetadata:
    """
    A navigable foreign-key path between two entities.

    :param schema_name: Relationship schema name, e.g. ``"account_primary_contact"``.
    :type schema_name: str
    :param relationship_type: ``"OneToMany"`` or ``"ManyToOne"``.
    :type relationship_type: str
    :param referencing_entity: Entity holding the lookup (child).
    :type referencing_entity: str
    :param referencing_attribute: Lookup column on the referencing entity.
    :type referencing_attribute: str
    :param referenced_entity: Entity being pointed to (parent).
    :type referenced_entity: str
    :param referenced_attribute: Key column on the referenced entity.
    :type referenced_attribute: str
    """

    schema_name: str
    relationship_type: str
    referencing_entity: str
    referencing_attribute: str
    referenced_entity: str
    referenced_attribute: str

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any], relationship_type: str) -> "RelationshipMetadata":
        return cls(
            schema_name=response_data.get("SchemaName", ""),
            relationship_type=relationship_type,
            referencing_entity=response_data.get("ReferencingEntity", ""),
            referencing_attribute=response_data.get("ReferencingAttribute", ""),
            referenced_entity=response_data.get("ReferencedEntity", ""),
            referenced_attribute=response_data.get("ReferencedAttribute", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaName": self.schema_name,
            "relationshipType": self.relationship_type,
            "referencingEntity": self.referencing_entity,
            "referencingAttribute": self.referencing_attribute,
            "referencedEntity": self.referenced_entity,
            "referencedAttribute": self.referenced_attribute,
        }


__all__ = [
    "EntityMetadata",
    "OptionMetadata",
    "AttributeMetadata",
    "RelationshipMetadata",
]
