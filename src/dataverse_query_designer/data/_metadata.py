# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Entity, attribute and relationship metadata reads for the query designer.

This module provides mixin functionality over the ``EntityDefinitions`` metadata endpoints.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..common.constants import (
    LOGGER_NAME,
    LOOKUP_ATTRIBUTE_TYPES,
    PICKLIST_ATTRIBUTE_TYPES,
    RELATIONSHIP_MANY_TO_ONE,
    RELATIONSHIP_ONE_TO_MANY,
)
from ..core.errors import DataverseError
from ..models.metadata import (
    AttributeMetadata,
    EntityMetadata,
    OptionMetadata,
    RelationshipMetadata,
)

logger = logging.getLogger(f"{LOGGER_NAME}.metadata")

_ENTITY_SELECT = (
    "LogicalName,DisplayName,EntitySetName,PrimaryIdAttribute,"
    "PrimaryNameAttribute,Description,IsCustomEntity"
)
_ATTRIBUTE_SELECT = (
    "LogicalName,DisplayName,AttributeType,IsPrimaryId,IsPrimaryName,"
    "RequiredLevel,IsCustomAttribute,Description"
)
_RELATIONSHIP_SELECT = (
    "SchemaName,ReferencingEntity,ReferencingAttribute,ReferencedEntity,ReferencedAttribute"
)


class _MetadataOperationsMixin:
    """
    Mixin providing read-only metadata lookups.

    This mixin is designed to be used with _ODataClient and depends on:
    - self.api: The API base URL
    - self.config: The DesignerConfig (worker pool size)
    - self._get_json(): Method issuing an authenticated GET
    - self._escape_odata_quotes(): Literal escaper for key segments
    """

    def _entity_definition_url(self, logical: str) -> str:
        return f"{self.api}/EntityDefinitions(LogicalName='{self._escape_odata_quotes(logical)}')"

    def _list_entities(self) -> List[EntityMetadata]:
        """
        List entities that are valid for Advanced Find.

        :return: Entity metadata in service order.
        :rtype: ``list[EntityMetadata]``

        :raises UpstreamQueryError: If the Web API request fails.
        """
        params = {"$select": _ENTITY_SELECT, "$filter": "IsValidForAdvancedFind eq true"}
        body = self._get_json(f"{self.api}/EntityDefinitions", params=params)
        return [EntityMetadata.from_api_response(item) for item in body.get("value", []) if isinstance(item, dict)]

    def _list_attributes(self, logical: str) -> List[AttributeMetadata]:
        """
        List the attributes of one entity.

        Lookup-style attributes get their ``targets`` and choice-style attributes their
        ``options`` through per-attribute requests run on a bounded worker pool. A failed
        per-attribute request is logged and leaves the field as ``None``.

        :param logical: Entity logical name.
        :type logical: ``str``

        :return: Attribute metadata in service order.
        :rtype: ``list[AttributeMetadata]``

        :raises UpstreamQueryError: If the attribute listing itself fails.
        """
        url = f"{self._entity_definition_url(logical)}/Attributes"
        body = self._get_json(url, params={"$select": _ATTRIBUTE_SELECT}, error_details={"entity": logical})
        attributes = [
            AttributeMetadata.from_api_response(item) for item in body.get("value", []) if isinstance(item, dict)
        ]

        lookups = [a for a in attributes if a.attribute_type in LOOKUP_ATTRIBUTE_TYPES]
        picklists = [a for a in attributes if a.attribute_type in PICKLIST_ATTRIBUTE_TYPES]
        if not lookups and not picklists:
            return attributes

        workers = max(1, int(self.config.metadata_max_workers))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            target_futures = [(a, pool.submit(self._lookup_targets, logical, a.logical_name)) for a in lookups]
            option_futures = [
                (a, pool.submit(self._picklist_options, logical, a.logical_name, a.attribute_type)) for a in picklists
            ]
            for attribute, future in target_futures:
                attribute.targets = future.result()
            for attribute, future in option_futures:
                attribute.options = future.result()
        return attributes

    def _lookup_targets(self, logical: str, attribute: str) -> Optional[List[str]]:
        url = (
            f"{self._entity_definition_url(logical)}/Attributes(LogicalName='{self._escape_odata_quotes(attribute)}')"
            "/Microsoft.Dynamics.CRM.LookupAttributeMetadata"
        )
        try:
            body = self._get_json(url, params={"$select": "Targets"})
        except DataverseError as exc:
            logger.warning("Failed to fetch lookup targets for %s.%s: %s", logical, attribute, exc)
            return None
        targets = body.get("Targets")
        return list(targets) if isinstance(targets, list) else []

    def _picklist_options(self, logical: str, attribute: str, attribute_type: str) -> Optional[List[OptionMetadata]]:
        cast = PICKLIST_ATTRIBUTE_TYPES[attribute_type]
        url = (
            f"{self._entity_definition_url(logical)}/Attributes(LogicalName='{self._escape_odata_quotes(attribute)}')"
            f"/Microsoft.Dynamics.CRM.{cast}"
        )
        try:
            body = self._get_json(url, params={"$expand": "OptionSet($select=Options)"})
        except DataverseError as exc:
            logger.warning("Failed to fetch options for %s.%s: %s", logical, attribute, exc)
            return None
        option_set = body.get("OptionSet") or {}
        options = option_set.get("Options") if isinstance(option_set, dict) else None
        return [OptionMetadata.from_api_response(o) for o in options or [] if isinstance(o, dict)]

    def _list_relationships(self, logical: str) -> List[RelationshipMetadata]:
        """
        List one-to-many then many-to-one relationships of an entity.

        Each of the two requests is independent: a failure is logged and the other
        half is still returned.
        """
        relationships: List[RelationshipMetadata] = []
        for nav, relationship_type in (
            ("OneToManyRelationships", RELATIONSHIP_ONE_TO_MANY),
            ("ManyToOneRelationships", RELATIONSHIP_MANY_TO_ONE),
        ):
            url = f"{self._entity_definition_url(logical)}/{nav}"
            try:
                body = self._get_json(url, params={"$select": _RELATIONSHIP_SELECT})
            except DataverseError as exc:
                logger.warning("Failed to fetch %s for %s: %s", nav, logical, exc)
                continue
            relationships.extend(
                RelationshipMetadata.from_api_response(item, relationship_type)
                for item in body.get("value", [])
                if isinstance(item, dict)
            )
        return relationships
