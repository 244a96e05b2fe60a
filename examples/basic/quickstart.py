#!/usr/bin/env python3
# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Dataverse Query Designer - Quickstart

Registers one environment from app-registration settings, checks the connection,
runs a designer query with a join and a filter, and writes the results to Excel.

Prerequisites:
- dataverse-query-designer installed (``pip install -e .``)
- An app registration with an application user in the target environment

Environment variables:
    DATAVERSE_ORG_URL      e.g. https://yourorg.crm.dynamics.com
    AZURE_TENANT_ID
    AZURE_CLIENT_ID
    AZURE_CLIENT_SECRET

Usage:
    python examples/basic/quickstart.py
"""

import logging
import os
import sys

from dataverse_query_designer import DataverseError, QueryDesignerClient
from dataverse_query_designer.data import InMemoryEnvironmentRepository, InMemorySavedQueryRepository

USER_ID = "quickstart-user"


def _require(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        print(f"❌ Missing environment variable {name}")
        sys.exit(1)
    return value


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    with QueryDesignerClient(InMemoryEnvironmentRepository(), InMemorySavedQueryRepository()) as client:
        try:
            environment = client.environments.create(
                USER_ID,
                name="Quickstart",
                organization_url=_require("DATAVERSE_ORG_URL"),
                client_id=_require("AZURE_CLIENT_ID"),
                client_secret=_require("AZURE_CLIENT_SECRET"),
                tenant_id=_require("AZURE_TENANT_ID"),
            )
        except DataverseError as exc:
            print(f"❌ {exc.message} {exc.details}")
            sys.exit(1)

        print("🧪 Testing connection...")
        if not client.environments.test_connection(USER_ID, environment.id):
            print("❌ Could not connect. Check the app registration and application user.")
            sys.exit(1)
        print("✅ Connected")

        definition = {
            "environmentId": environment.id,
            "primaryEntity": "account",
            "fields": [
                {"entityAlias": "main", "fieldName": "name", "displayName": "Account"},
                {"entityAlias": "main", "fieldName": "statecode", "displayName": "Status"},
                {"entityAlias": "contact_1", "fieldName": "fullname", "displayName": "Primary Contact"},
            ],
            "joins": [
                {
                    "fromEntityAlias": "main",
                    "fromField": "primarycontactid",
                    "toEntity": "contact",
                    "toEntityAlias": "contact_1",
                    "toField": "contactid",
                }
            ],
            "filters": [{"entityAlias": "main", "fieldName": "statecode", "operator": "eq", "value": 0}],
            "orderBy": [{"entityAlias": "main", "fieldName": "name", "direction": "asc"}],
        }

        try:
            saved = client.saved_queries.create(USER_ID, environment.id, "Active accounts", definition)
            result = client.query.execute(USER_ID, saved.query(), page=1, page_size=10)
        except DataverseError as exc:
            print(f"❌ {exc.code}: {exc.message} {exc.details}")
            sys.exit(1)

        print(f"📊 {result.total_count} matching accounts ({result.execution_time} ms)")
        for row in result.rows:
            print("   ", [row[c.key] for c in result.columns])

        data = client.query.export_to_excel(USER_ID, definition)
        with open("active_accounts.xlsx", "wb") as fh:
            fh.write(data)
        print("💾 Wrote active_accounts.xlsx")


if __name__ == "__main__":
    main()
