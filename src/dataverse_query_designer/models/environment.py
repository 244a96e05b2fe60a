# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Dataverse environment registration owned by a designer user.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Environment:
    """
    A Dataverse environment a user has registered with app credentials.

    :param id: Environment identifier.
    :type id: str
    :param user_id: Identifier of the owning user.
    :type user_id: str
    :param name: Friendly name.
    :type name: str
    :param organization_url: Organization URL, e.g. ``"https://org.crm.dynamics.com"``.
    :type organization_url: str
    :param client_id: Application (client) ID of the app registration.
    :type client_id: str
    :param client_secret: Client secret of the app registration (already decrypted).
    :type client_secret: str
    :param tenant_id: Directory (tenant) ID.
    :type tenant_id: str
    :param description: Optional description.
    :type description: str | None
    :param status: ``"connected"``, ``"disconnected"`` or ``"error"``.
    :type status: str
    """

    id: str
    user_id: str
    name: str
    organization_url: str
    client_id: str
    client_secret: str = field(repr=False)
    tenant_id: str
    description: Optional[str] = None
    status: str = "disconnected"

    def __post_init__(self) -> None:
        self.organization_url = (self.organization_url or "").rstrip("/")

    @property
    def scope(self) -> str:
        """OAuth2 scope requested for this environment's Web API."""
        return f"{self.organization_url}/.default"

    def to_dict(self) -> Dict[str, Any]:
        """Public representation; the client secret is never included."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "organization_url": self.organization_url,
            "client_id": self.client_id,
            "tenant_id": self.tenant_id,
            "description": self.description,
            "status": self.status,
        }


__all__ = ["Environment"]
