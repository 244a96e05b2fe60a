# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ..common.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_PAGE_SIZE,
    EXPORT_ROW_LIMIT,
    MAX_PAGE_SIZE,
)

_ENV_PREFIX = "DATAVERSE_QD_"


@dataclass(frozen=True)
class DesignerConfig:
    """
    Configuration settings for query designer operations.

    :param api_version: Dataverse Web API version segment (default: ``"v9.2"``).
    :type api_version: str
    :param http_timeout: Request timeout in seconds (default: 30 for GET, 120 for POST).
    :type http_timeout: float or None
    :param http_retries: Maximum attempts per HTTP request (default: 1, no retry).
    :type http_retries: int or None
    :param default_page_size: Page size used when a caller does not pass one.
    :type default_page_size: int
    :param max_page_size: Largest page size accepted by ``execute``.
    :type max_page_size: int
    :param export_row_limit: Rows fetched for a spreadsheet export (single page).
    :type export_row_limit: int
    :param metadata_max_workers: Worker pool size for per-attribute metadata lookups.
    :type metadata_max_workers: int
    """

    api_version: str = DEFAULT_API_VERSION

    http_timeout: Optional[float] = None
    http_retries: Optional[int] = None

    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE
    export_row_limit: int = EXPORT_ROW_LIMIT
    metadata_max_workers: int = 4

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DesignerConfig":
        """
        Create a configuration instance from ``DATAVERSE_QD_*`` environment variables.

        Unset variables keep their defaults, e.g. ``DATAVERSE_QD_HTTP_TIMEOUT=45``.

        :param environ: Mapping to read instead of :data:`os.environ`.
        :return: Configuration instance.
        :rtype: DesignerConfig
        """
        env = os.environ if environ is None else environ

        def _get(name: str, convert, default):
            raw = env.get(_ENV_PREFIX + name)
            if raw is None or not str(raw).strip():
                return default
            try:
                return convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {_ENV_PREFIX}{name}: {raw!r}") from None

        return cls(
            api_version=_get("API_VERSION", str, DEFAULT_API_VERSION),
            http_timeout=_get("HTTP_TIMEOUT", float, None),
            http_retries=_get("HTTP_RETRIES", int, None),
            default_page_size=_get("DEFAULT_PAGE_SIZE", int, DEFAULT_PAGE_SIZE),
            max_page_size=_get("MAX_PAGE_SIZE", int, MAX_PAGE_SIZE),
            export_row_limit=_get("EXPORT_ROW_LIMIT", int, EXPORT_ROW_LIMIT),
            metadata_max_workers=_get("METADATA_MAX_WORKERS", int, 4),
        )
