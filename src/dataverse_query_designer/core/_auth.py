# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Authentication helpers for Dataverse environments.

Performs the OAuth2 client-credentials exchange through Azure Identity using the
app registration stored on each :class:`~dataverse_query_designer.models.environment.Environment`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from azure.core.credentials import TokenCredential
from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.identity import ClientSecretCredential

from ..common.constants import LOGGER_NAME
from ..models.environment import Environment
from ._error_codes import UPSTREAM_AUTH_FAILED
from .errors import UpstreamAuthError

logger = logging.getLogger(f"{LOGGER_NAME}.auth")

CredentialFactory = Callable[[Environment], TokenCredential]


@dataclass
class _TokenPair:
    """
    Container for an OAuth2 access token and its associated resource scope.

    :param resource: The OAuth2 scope/resource for which the token was acquired.
    :type resource: :class:`str`
    :param access_token: The access token string.
    :type access_token: :class:`str`
    """

    resource: str
    access_token: str


def _client_secret_credential(environment: Environment) -> TokenCredential:
    return ClientSecretCredential(
        tenant_id=environment.tenant_id,
        client_id=environment.client_id,
        client_secret=environment.client_secret,
    )


class _AuthManager:
    """
    Azure Identity-based authentication manager for Dataverse environments.

    :param credential_factory: Builds a credential for an environment. Defaults to
        :class:`azure.identity.ClientSecretCredential` from the environment's app registration.
    :type credential_factory: Callable[[Environment], ~azure.core.credentials.TokenCredential] | None
    """

    def __init__(self, credential_factory: Optional[CredentialFactory] = None) -> None:
        self._credential_factory: CredentialFactory = credential_factory or _client_secret_credential

    def _acquire_token(self, environment: Environment) -> _TokenPair:
        """
        Acquire an access token for the environment's Web API.

        :param environment: Environment whose credentials are used.
        :type environment: ~dataverse_query_designer.models.environment.Environment
        :return: Token pair containing the scope and access token.
        :rtype: ~dataverse_query_designer.core._auth._TokenPair
        :raises ~dataverse_query_designer.core.errors.UpstreamAuthError: If the token exchange fails.
        """
        scope = environment.scope
        credential = self._credential_factory(environment)
        try:
            token = credential.get_token(scope)
        except ClientAuthenticationError as exc:
            logger.warning("Authentication failed for environment %s: %s", environment.id, exc.message)
            raise UpstreamAuthError(
                "Failed to authenticate with Dynamics 365",
                status_code=getattr(exc, "status_code", None) or 401,
                subcode=UPSTREAM_AUTH_FAILED,
                details={"environment_id": environment.id, "tenant_id": environment.tenant_id},
            ) from exc
        except AzureError as exc:
            logger.warning("Token request failed for environment %s: %s", environment.id, exc.message)
            raise UpstreamAuthError(
                "Failed to authenticate with Dynamics 365",
                status_code=None,
                subcode=UPSTREAM_AUTH_FAILED,
                details={"environment_id": environment.id, "tenant_id": environment.tenant_id},
            ) from exc
        finally:
            close = getattr(credential, "close", None)
            if callable(close):
                close()
        return _TokenPair(resource=scope, access_token=token.token)
