# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Entity, attribute and relationship metadata namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..models.metadata import AttributeMetadata, EntityMetadata, RelationshipMetadata

if TYPE_CHECKING:
    from ..client import QueryDesignerClient


class MetadataOperations:
    """
    Metadata lookups that feed the designer's table, column and join pickers.

    Accessed via ``client.metadata``. Nothing is cached; every call reads the
    environment's current metadata.

    Example::

        for entity in client.metadata.entities(user_id, environment_id):
            print(entity.logical_name, entity.entity_set_name)

        lookups = [
            a for a in client.metadata.attributes(user_id, environment_id, "contact")
            if a.targets
        ]
    """

    def __init__(self, client: "QueryDesignerClient") -> None:
        self._client = client

    def entities(self, user_id: str, environment_id: str) -> List[EntityMetadata]:
        """
        List the environment's entities that are valid for Advanced Find.

        :raises NotFoundError: If the environment is not owned by ``user_id``.
        :raises UpstreamQueryError: If the metadata request fails.
        """
        environment = self._client.environments.get(user_id, environment_id)
        with self._client._scoped_odata(environment) as od:
            return od._list_entities()

    def attributes(self, user_id: str, environment_id: str, entity: str) -> List[AttributeMetadata]:
        """
        List an entity's attributes with lookup targets and choice options.

        Target and option lookups that fail leave ``targets``/``options`` as ``None``.
        """
        environment = self._client.environments.get(user_id, environment_id)
        with self._client._scoped_odata(environment) as od:
            return od._list_attributes(entity)

    def relationships(self, user_id: str, environment_id: str, entity: str) -> List[RelationshipMetadata]:
        """List one-to-many then many-to-one relationships; a failed half is skipped."""
        environment = self._client.environments.get(user_id, environment_id)
        with self._client._scoped_odata(environment) as od:
            return od._list_relationships(entity)

    def entity_set_name(self, user_id: str, environment_id: str, entity: str) -> str:
        """
        Resolve the collection name used in resource paths, e.g. ``"accounts"``.

        :raises MetadataError: If Dataverse returns no entity set name.
        """
        environment = self._client.environments.get(user_id, environment_id)
        with self._client._scoped_odata(environment) as od:
            return od._entity_set_name(entity)


__all__ = ["MetadataOperations"]
