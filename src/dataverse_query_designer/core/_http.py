# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with explicit timeout handling and optional session support.

This module provides :class:`~dataverse_query_designer.core._http._HttpClient`, a
wrapper around the requests library that applies a default timeout to every call
and optionally reuses a :class:`requests.Session` for connection pooling.

Designer calls are user-triggered and synchronous, so a single attempt is made by
default. ``retries`` raises the attempt count for network errors only.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import requests


class _HttpClient:
    """
    HTTP client with configurable attempts, timeout handling, and optional session support.

    :param retries: Maximum number of attempts for network errors. Default is 1 (no retry).
    :type retries: :class:`int` | None
    :param backoff: Base delay in seconds between attempts. Default is 0.5.
    :type backoff: :class:`float` | None
    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: :class:`float` | None
    :param session: Optional requests.Session for connection pooling.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.max_attempts = max(1, retries) if retries is not None else 1
        self.base_delay = backoff if backoff is not None else 0.5
        self.default_timeout: Optional[float] = timeout
        self._session = session

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute an HTTP request with timeout management.

        Applies default timeouts based on HTTP method (120s for POST/DELETE, 30s for others)
        unless the caller or the configuration supplies one.

        :param method: HTTP method (GET, POST, etc.).
        :type method: :class:`str`
        :param url: Target URL for the request.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers, params, data.
        :return: HTTP response object.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If every attempt fails.
        """
        if "timeout" not in kwargs:
            if self.default_timeout is not None:
                kwargs["timeout"] = self.default_timeout
            else:
                m = (method or "").lower()
                kwargs["timeout"] = 120 if m in ("post", "delete") else 30

        for attempt in range(self.max_attempts):
            try:
                if self._session is not None:
                    return self._session.request(method, url, **kwargs)
                return requests.request(method, url, **kwargs)
            except requests.exceptions.RequestException:
                if attempt == self.max_attempts - 1:
                    raise
                time.sleep(self.base_delay * (2**attempt))
