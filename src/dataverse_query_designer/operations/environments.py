# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Environment registration, lookup and connection test namespace."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from urllib.parse import urlparse

from ..common.constants import LOGGER_NAME
from ..core._error_codes import (
    NOT_FOUND_ENVIRONMENT,
    VALIDATION_DUPLICATE_ENVIRONMENT_NAME,
    VALIDATION_ENVIRONMENT_FIELD_REQUIRED,
    VALIDATION_ENVIRONMENT_URL_INVALID,
)
from ..core.errors import DataverseError, NotFoundError, ValidationError
from ..models.environment import Environment

if TYPE_CHECKING:
    from ..client import QueryDesignerClient

logger = logging.getLogger(f"{LOGGER_NAME}.environments")

_REQUIRED_FIELDS = ("name", "organization_url", "client_id", "client_secret", "tenant_id")
# Changing any of these invalidates the last connection test.
_CONNECTION_FIELDS = ("organization_url", "client_id", "client_secret", "tenant_id")


def _validate_fields(values: Dict[str, Any]) -> None:
    for name, value in values.items():
        if name in _REQUIRED_FIELDS and (not isinstance(value, str) or not value.strip()):
            raise ValidationError(
                f"Environment field '{name}' is required",
                subcode=VALIDATION_ENVIRONMENT_FIELD_REQUIRED,
                details={"field": name},
            )
    url = values.get("organization_url")
    if url is not None:
        parsed = urlparse(url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(
                "Organization URL must be an absolute http(s) URL",
                subcode=VALIDATION_ENVIRONMENT_URL_INVALID,
                details={"organization_url": url},
            )


class EnvironmentOperations:
    """
    Environment operations scoped to the owning user.

    Accessed via ``client.environments``.

    Example::

        env = client.environments.create(
            user_id, "Contoso Dev", "https://contoso.crm.dynamics.com", client_id, client_secret, tenant_id
        )
        if client.environments.test_connection(user_id, env.id):
            print(f"{env.name} is reachable")
    """

    def __init__(self, client: "QueryDesignerClient") -> None:
        self._client = client

    @property
    def _repository(self):
        return self._client._environment_repository

    def _ensure_unique_name(self, user_id: str, name: str, exclude_id: Optional[str] = None) -> None:
        for existing in self._repository.list_by_user(user_id):
            if existing.name == name and existing.id != exclude_id:
                raise ValidationError(
                    "Environment with this name already exists",
                    subcode=VALIDATION_DUPLICATE_ENVIRONMENT_NAME,
                    details={"name": name},
                )

    def create(
        self,
        user_id: str,
        name: str,
        organization_url: str,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        description: Optional[str] = None,
    ) -> Environment:
        """
        Register an environment for ``user_id`` with its app-registration credentials.

        The new environment starts ``"disconnected"`` until :meth:`test_connection` runs.

        :raises ValidationError: If a required field is blank, the organization URL
            is not an absolute http(s) URL, or the user already has an environment
            with the same name.
        """
        _validate_fields(
            {
                "name": name,
                "organization_url": organization_url,
                "client_id": client_id,
                "client_secret": client_secret,
                "tenant_id": tenant_id,
            }
        )
        self._ensure_unique_name(user_id, name)
        environment = Environment(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            organization_url=organization_url.strip(),
            client_id=client_id,
            client_secret=client_secret,
            tenant_id=tenant_id,
            description=description,
        )
        self._repository.add(environment)
        logger.info("Registered environment %s for user %s", environment.id, user_id)
        return environment

    def get(self, user_id: str, environment_id: str) -> Environment:
        """
        Return an environment owned by ``user_id``.

        :raises NotFoundError: If the environment does not exist or belongs to another user.
        """
        environment = self._repository.get(environment_id)
        if environment is None or environment.user_id != user_id:
            raise NotFoundError(
                "Environment not found",
                subcode=NOT_FOUND_ENVIRONMENT,
                details={"environment_id": environment_id},
            )
        return environment

    def list(self, user_id: str) -> List[Environment]:
        return self._repository.list_by_user(user_id)

    def update(
        self,
        user_id: str,
        environment_id: str,
        *,
        name: Optional[str] = None,
        organization_url: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        tenant_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Environment:
        """
        Update the given fields; ``None`` leaves a field unchanged.

        Changing the organization URL or any credential resets ``status`` to
        ``"disconnected"``.

        :raises NotFoundError: If the environment is not owned by ``user_id``.
        :raises ValidationError: If a given field is blank or invalid, or the new
            name is already used by another of the user's environments.
        """
        environment = self.get(user_id, environment_id)
        changes = {
            key: value
            for key, value in (
                ("name", name),
                ("organization_url", organization_url),
                ("client_id", client_id),
                ("client_secret", client_secret),
                ("tenant_id", tenant_id),
                ("description", description),
            )
            if value is not None
        }
        _validate_fields(changes)
        if "name" in changes:
            self._ensure_unique_name(user_id, changes["name"], exclude_id=environment_id)
        if "organization_url" in changes:
            changes["organization_url"] = changes["organization_url"].strip()
        if any(key in changes for key in _CONNECTION_FIELDS):
            changes["status"] = "disconnected"
        updated = dataclasses.replace(environment, **changes)
        self._repository.save(updated)
        return updated

    def delete(self, user_id: str, environment_id: str) -> None:
        """:raises NotFoundError: If the environment is not owned by ``user_id``."""
        self.get(user_id, environment_id)
        self._repository.remove(environment_id)

    def test_connection(self, user_id: str, environment_id: str) -> bool:
        """
        Authenticate and call ``WhoAmI`` against the environment.

        The environment's ``status`` is updated to ``"connected"`` or ``"error"``.
        Upstream failures are reported as ``False``; ownership failures still raise.

        :raises NotFoundError: If the environment is not owned by ``user_id``.
        """
        environment = self.get(user_id, environment_id)
        try:
            with self._client._scoped_odata(environment) as od:
                od._who_am_i()
            connected = True
        except DataverseError as exc:
            logger.warning("Connection test failed for environment %s: %s", environment_id, exc.message)
            connected = False
        environment.status = "connected" if connected else "error"
        self._repository.save(environment)
        return connected


__all__ = ["EnvironmentOperations"]
