# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from typing import Optional

from ..common.constants import TRANSIENT_STATUS_CODES

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_409 = "http_409"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

# Validation subcodes
VALIDATION_PRIMARY_ENTITY_MISSING = "validation_primary_entity_missing"
VALIDATION_FIELDS_EMPTY = "validation_fields_empty"
VALIDATION_PAGE_OUT_OF_RANGE = "validation_page_out_of_range"
VALIDATION_PAGE_SIZE_OUT_OF_RANGE = "validation_page_size_out_of_range"
VALIDATION_DUPLICATE_JOIN_ALIAS = "validation_duplicate_join_alias"
VALIDATION_MALFORMED_DEFINITION = "validation_malformed_definition"
VALIDATION_UNSUPPORTED_EXPORT_FORMAT = "validation_unsupported_export_format"
VALIDATION_ENVIRONMENT_MISMATCH = "validation_environment_mismatch"
VALIDATION_ENVIRONMENT_FIELD_REQUIRED = "validation_environment_field_required"
VALIDATION_ENVIRONMENT_URL_INVALID = "validation_environment_url_invalid"
VALIDATION_DUPLICATE_ENVIRONMENT_NAME = "validation_duplicate_environment_name"

# Not-found subcodes
NOT_FOUND_ENVIRONMENT = "not_found_environment"
NOT_FOUND_SAVED_QUERY = "not_found_saved_query"

# Metadata subcodes
METADATA_ENTITYSET_NAME_MISSING = "metadata_entityset_name_missing"

# Upstream subcodes
UPSTREAM_AUTH_FAILED = "upstream_auth_failed"
UPSTREAM_NETWORK_ERROR = "upstream_network_error"

# Export subcodes
EXPORT_WRITE_FAILED = "export_write_failed"


def _http_subcode(status: Optional[int]) -> Optional[str]:
    """Map an HTTP status to its ``http_<status>`` subcode (None when unknown)."""
    if status is None:
        return None
    return f"http_{status}"


def _is_transient_status(status: Optional[int]) -> bool:
    return status in TRANSIENT_STATUS_CODES
