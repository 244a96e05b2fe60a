# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .query import QueryDefinition


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SavedQuery:
    """
    A named query definition persisted for one user and environment.

    ``definition`` is the JSON document exactly as supplied by the designer; use
    :meth:`query` to get the parsed :class:`~dataverse_query_designer.models.query.QueryDefinition`.
    """

    id: str
    user_id: str
    environment_id: str
    name: str
    definition: Dict[str, Any]
    description: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def query(self) -> QueryDefinition:
        return QueryDefinition.from_dict(self.definition)

    def copy(self) -> "SavedQuery":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Response shape returned to the designer (owner id omitted)."""
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "environmentId": self.environment_id,
            "definition": copy.deepcopy(self.definition),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.description is not None:
            out["description"] = self.description
        return out


__all__ = ["SavedQuery"]
