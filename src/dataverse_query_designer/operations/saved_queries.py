# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Saved query CRUD namespace."""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from ..core._error_codes import (
    NOT_FOUND_SAVED_QUERY,
    VALIDATION_ENVIRONMENT_MISMATCH,
    VALIDATION_MALFORMED_DEFINITION,
)
from ..core.errors import NotFoundError, ValidationError
from ..models.query import QueryDefinition
from ..models.saved_query import SavedQuery

if TYPE_CHECKING:
    from ..client import QueryDesignerClient

DefinitionLike = Union[QueryDefinition, Dict[str, Any]]


def _document(definition: DefinitionLike) -> Dict[str, Any]:
    """Return the JSON document to persist, validating that it parses."""
    if isinstance(definition, QueryDefinition):
        return definition.to_dict()
    try:
        QueryDefinition.from_dict(definition)
    except (KeyError, TypeError) as exc:
        raise ValidationError(
            f"Malformed query definition: {exc}",
            subcode=VALIDATION_MALFORMED_DEFINITION,
        ) from exc
    return copy.deepcopy(definition)


def _scoped_document(definition: DefinitionLike, environment_id: str) -> Dict[str, Any]:
    document = _document(definition)
    if document.get("environmentId") != environment_id:
        raise ValidationError(
            "Query definition targets a different environment",
            subcode=VALIDATION_ENVIRONMENT_MISMATCH,
            details={"environment_id": environment_id, "definition_environment_id": document.get("environmentId")},
        )
    return document


class SavedQueryOperations:
    """
    CRUD over a user's saved queries.

    Accessed via ``client.saved_queries``. Every operation is scoped to the
    requesting user; a query owned by someone else is reported as not found.
    The definition document is stored exactly as given and returned unchanged.

    Example::

        saved = client.saved_queries.create(user_id, env_id, "Open deals", definition)
        result = client.query.execute(user_id, saved.query())
    """

    def __init__(self, client: "QueryDesignerClient") -> None:
        self._client = client

    @property
    def _repository(self):
        return self._client._saved_query_repository

    def create(
        self,
        user_id: str,
        environment_id: str,
        name: str,
        definition: DefinitionLike,
        description: Optional[str] = None,
    ) -> SavedQuery:
        """
        Save a named query definition.

        :raises NotFoundError: If the environment is not owned by ``user_id``.
        :raises ValidationError: If ``name`` is blank, ``definition`` is malformed, or
            its ``environmentId`` is not ``environment_id``.
        """
        self._client.environments.get(user_id, environment_id)
        if not name or not name.strip():
            raise ValidationError("Saved query name is required")
        document = _scoped_document(definition, environment_id)
        now = datetime.now(timezone.utc)
        saved = SavedQuery(
            id=str(uuid.uuid4()),
            user_id=user_id,
            environment_id=environment_id,
            name=name,
            description=description,
            definition=document,
            created_at=now,
            updated_at=now,
        )
        self._repository.add(saved)
        return saved.copy()

    def list(self, user_id: str) -> List[SavedQuery]:
        """Return the user's saved queries, most recently updated first."""
        return sorted(self._repository.list_by_user(user_id), key=lambda q: q.updated_at, reverse=True)

    def get(self, saved_query_id: str, user_id: str) -> SavedQuery:
        """:raises NotFoundError: If the query is missing or owned by another user."""
        saved = self._repository.get(saved_query_id)
        if saved is None or saved.user_id != user_id:
            raise NotFoundError(
                "Saved query not found",
                subcode=NOT_FOUND_SAVED_QUERY,
                details={"saved_query_id": saved_query_id},
            )
        return saved

    def update(
        self,
        saved_query_id: str,
        user_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        definition: Optional[DefinitionLike] = None,
    ) -> SavedQuery:
        """Update the given fields; ``None`` leaves a field unchanged."""
        saved = self.get(saved_query_id, user_id)
        if name is not None:
            if not name.strip():
                raise ValidationError("Saved query name is required")
            saved.name = name
        if description is not None:
            saved.description = description
        if definition is not None:
            saved.definition = _scoped_document(definition, saved.environment_id)
        saved.updated_at = datetime.now(timezone.utc)
        self._repository.save(saved)
        return saved.copy()

    def delete(self, saved_query_id: str, user_id: str) -> None:
        self.get(saved_query_id, user_id)
        self._repository.remove(saved_query_id)


__all__ = ["SavedQueryOperations"]
