# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the Dataverse Web API surface used by the query designer.

These constants define header values, annotation names and limits shared by the
metadata gateway, the OData compiler and the result mapper.
"""

LOGGER_NAME = "dataverse_query_designer"

DEFAULT_API_VERSION = "v9.2"

# Alias of the primary entity when a query definition does not name one
DEFAULT_PRIMARY_ALIAS = "main"

# OData annotation carrying the human-readable label of a coded/lookup value
FORMATTED_VALUE_ANNOTATION = "@OData.Community.Display.V1.FormattedValue"

ODATA_COUNT_ANNOTATION = "@odata.count"

ODATA_HEADERS = {
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
    "Accept": "application/json",
}

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 5000

# Exports fetch a single page of this size; larger result sets are truncated.
EXPORT_ROW_LIMIT = 5000

EXPORT_SHEET_NAME = "Query Results"
EXPORT_HEADER_FILL = "4472C4"
EXPORT_HEADER_FONT_COLOR = "FFFFFF"
EXPORT_COLUMN_WIDTH = 20

# Attribute types with extra metadata fetched per attribute
LOOKUP_ATTRIBUTE_TYPES = ("Lookup", "Customer", "Owner")
# Choice-style attribute type -> metadata type whose OptionSet holds the options
PICKLIST_ATTRIBUTE_TYPES = {
    "Picklist": "PicklistAttributeMetadata",
    "State": "StateAttributeMetadata",
    "Status": "StatusAttributeMetadata",
}

REQUIRED_LEVELS = ("ApplicationRequired", "SystemRequired")

RELATIONSHIP_ONE_TO_MANY = "OneToMany"
RELATIONSHIP_MANY_TO_ONE = "ManyToOne"

# Statuses flagged transient on errors; the designer never retries them itself
TRANSIENT_STATUS_CODES = frozenset({429, 502, 503, 504})
