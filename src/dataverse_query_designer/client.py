# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import requests

from .core._auth import _AuthManager
from .core.config import DesignerConfig
from .data._odata import _ODataClient
from .data.repositories import EnvironmentRepository, SavedQueryRepository
from .models.environment import Environment
from .operations.environments import EnvironmentOperations
from .operations.metadata import MetadataOperations
from .operations.query import QueryOperations
from .operations.saved_queries import SavedQueryOperations


class QueryDesignerClient:
    """
    Entry point for the Dataverse query designer.

    The client wires its collaborators explicitly: environment and saved query
    repositories, configuration and the authentication manager are passed in (or
    defaulted) at construction and shared by every operation. It holds no
    per-request state; each operation authenticates against the environment it
    targets and talks to Dataverse through a short-lived internal
    :class:`~dataverse_query_designer.data._odata._ODataClient`.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager enables connection pooling across
        operations::

            with QueryDesignerClient(environments, saved_queries) as client:
                result = client.query.execute(user_id, definition)

    Namespaces:

        - ``client.environments``: ownership checks and connection tests
        - ``client.metadata``: entities, attributes, relationships
        - ``client.query``: execute, count and export designer queries
        - ``client.saved_queries``: saved query CRUD

    :param environments: Repository of registered environments.
    :type environments: ~dataverse_query_designer.data.repositories.EnvironmentRepository
    :param saved_queries: Repository of saved queries.
    :type saved_queries: ~dataverse_query_designer.data.repositories.SavedQueryRepository
    :param config: Optional configuration for timeouts, paging and export limits.
        If not provided, defaults are loaded from :meth:`~dataverse_query_designer.core.config.DesignerConfig.from_env`.
    :type config: ~dataverse_query_designer.core.config.DesignerConfig or None
    :param auth: Optional authentication manager. Defaults to client-secret credentials
        built from each environment's app registration.
    :type auth: ~dataverse_query_designer.core._auth._AuthManager or None

    Example::

        from dataverse_query_designer import QueryDesignerClient
        from dataverse_query_designer.data import InMemoryEnvironmentRepository, InMemorySavedQueryRepository

        environments = InMemoryEnvironmentRepository([env])
        with QueryDesignerClient(environments, InMemorySavedQueryRepository()) as client:
            entities = client.metadata.entities(user_id, env.id)
            result = client.query.execute(user_id, {
                "environmentId": env.id,
                "primaryEntity": "account",
                "fields": [{"entityAlias": "main", "fieldName": "name"}],
            })
    """

    def __init__(
        self,
        environments: EnvironmentRepository,
        saved_queries: SavedQueryRepository,
        config: Optional[DesignerConfig] = None,
        auth: Optional[_AuthManager] = None,
    ) -> None:
        self._environment_repository = environments
        self._saved_query_repository = saved_queries
        self._config = config or DesignerConfig.from_env()
        self.auth = auth or _AuthManager()
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False

        self.environments = EnvironmentOperations(self)
        self.metadata = MetadataOperations(self)
        self.query = QueryOperations(self)
        self.saved_queries = SavedQueryOperations(self)

    def __enter__(self) -> "QueryDesignerClient":
        """Open a pooled HTTP session reused by every operation inside the block."""
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Release the HTTP session, if the client opened one.

        Safe to call multiple times.
        """
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    @contextmanager
    def _scoped_odata(self, environment: Environment) -> Iterator[_ODataClient]:
        """Yield a low-level client bound to ``environment`` for one operation."""
        yield _ODataClient(self.auth, environment, self._config, session=self._session)


__all__ = ["QueryDesignerClient"]
