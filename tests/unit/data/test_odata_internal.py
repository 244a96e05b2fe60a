# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import unittest
from unittest.mock import MagicMock, patch

import pytest
import requests

from dataverse_query_designer.core._error_codes import (
    HTTP_400,
    HTTP_404,
    HTTP_429,
    HTTP_500,
    METADATA_ENTITYSET_NAME_MISSING,
    UPSTREAM_NETWORK_ERROR,
)
from dataverse_query_designer.core.config import DesignerConfig
from dataverse_query_designer.core.errors import HttpError, MetadataError, UpstreamQueryError
from dataverse_query_designer.data._odata import _ODataClient
from tests.unit.test_helpers import DummyAuth, TestableClient, make_environment


class TestConstruction(unittest.TestCase):
    def test_api_url_uses_configured_version(self):
        od = _ODataClient(DummyAuth(), make_environment(org_url="https://org.example/"), DesignerConfig(api_version="v9.1"))
        self.assertEqual(od.api, "https://org.example/api/data/v9.1")

    def test_missing_org_url_raises(self):
        env = make_environment(org_url="")
        with self.assertRaises(ValueError):
            _ODataClient(DummyAuth(), env, DesignerConfig())

    def test_timeout_and_retries_flow_to_http_client(self):
        od = _ODataClient(DummyAuth(), make_environment(), DesignerConfig(http_timeout=12, http_retries=1))
        self.assertEqual(od._http.default_timeout, 12)
        self.assertEqual(od._http.max_attempts, 1)


@patch("time.sleep")
class TestConfiguredNetworkRetries(unittest.TestCase):
    def _client(self, session, retries):
        return _ODataClient(DummyAuth(), make_environment(), DesignerConfig(http_retries=retries), session=session)

    def test_transient_network_failure_is_retried(self, mock_sleep):
        session = MagicMock()
        session.request.side_effect = [
            requests.exceptions.ConnectionError("reset"),
            MagicMock(status_code=200, text="{}", json=lambda: {"UserId": "u"}),
        ]
        self._client(session, retries=2)._who_am_i()
        self.assertEqual(session.request.call_count, 2)
        mock_sleep.assert_called_once_with(0.5)

    def test_exhausted_retries_surface_network_error(self, mock_sleep):
        session = MagicMock()
        session.request.side_effect = requests.exceptions.Timeout("slow")
        with self.assertRaises(UpstreamQueryError) as ctx:
            self._client(session, retries=3)._who_am_i()
        self.assertEqual(ctx.exception.subcode, UPSTREAM_NETWORK_ERROR)
        self.assertEqual(session.request.call_count, 3)
        self.assertEqual(mock_sleep.call_count, 2)

class TestHeaders(unittest.TestCase):
    def test_bearer_and_odata_headers(self):
        od = TestableClient([(200, {}, {})])
        od._who_am_i()
        _, url, kwargs = od._http.calls[0]
        self.assertEqual(url, "https://org.example/api/data/v9.2/WhoAmI")
        headers = kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer test_token")
        self.assertEqual(headers["OData-MaxVersion"], "4.0")
        self.assertEqual(headers["OData-Version"], "4.0")
        self.assertEqual(headers["Accept"], "application/json")

    def test_token_acquired_once_per_client(self):
        od = TestableClient([(200, {}, {}), (200, {}, {})])
        od._who_am_i()
        od._who_am_i()
        self.assertEqual(od.auth.environments, ["env-1"])


class TestEntitySetName(unittest.TestCase):
    def test_resolves_entity_set(self):
        od = TestableClient([(200, {}, {"EntitySetName": "accounts"})])
        self.assertEqual(od._entity_set_name("account"), "accounts")
        _, url, kwargs = od._http.calls[0]
        self.assertEqual(url, "https://org.example/api/data/v9.2/EntityDefinitions(LogicalName='account')")
        self.assertEqual(kwargs["params"], {"$select": "EntitySetName"})

    def test_logical_name_is_escaped(self):
        od = TestableClient([(200, {}, {"EntitySetName": "x"})])
        od._entity_set_name("a'b")
        self.assertIn("LogicalName='a''b'", od._http.calls[0][1])

    def test_missing_entity_set_raises_metadata_error(self):
        od = TestableClient([(200, {}, {})])
        with self.assertRaises(MetadataError) as ctx:
            od._entity_set_name("ghost")
        self.assertEqual(ctx.exception.subcode, METADATA_ENTITYSET_NAME_MISSING)
        self.assertEqual(ctx.exception.details, {"entity": "ghost"})

    def test_unknown_entity_surfaces_upstream_error(self):
        od = TestableClient([(404, {}, {"error": {"code": "0x80060888", "message": "Entity not found"}})])
        with self.assertRaises(UpstreamQueryError) as ctx:
            od._entity_set_name("ghost")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.details["entity"], "ghost")


class TestExecuteQuery(unittest.TestCase):
    def test_prefer_header_and_params(self):
        od = TestableClient([(200, {}, {"value": [], "@odata.count": 0})])
        options = [("$count", "true"), ("$select", "name"), ("$top", "25")]
        body = od._execute_query("accounts", options, 25)
        self.assertEqual(body, {"value": [], "@odata.count": 0})
        method, url, kwargs = od._http.calls[0]
        self.assertEqual(method, "get")
        self.assertEqual(url, "https://org.example/api/data/v9.2/accounts")
        self.assertEqual(kwargs["params"], options)
        self.assertEqual(kwargs["headers"]["Prefer"], 'odata.include-annotations="*",odata.maxpagesize=25')

    def test_non_dict_body_becomes_empty(self):
        od = TestableClient([(200, {}, "not json")])
        self.assertEqual(od._execute_query("accounts", [], 10), {})


# --- HTTP error mapping ---


def test_http_404_subcode_and_service_code():
    c = TestableClient([(404, {"x-ms-correlation-request-id": "cid1"}, {"error": {"code": "0x800404", "message": "Not found"}})])
    with pytest.raises(HttpError) as ei:
        c._request("get", c.api + "/accounts(abc)")
    err = ei.value.to_dict()
    assert err["code"] == "upstream_query_error"
    assert err["subcode"] == HTTP_404
    assert err["message"] == "Not found"
    assert err["details"]["service_error_code"] == "0x800404"
    assert err["details"]["correlation_id"] == "cid1"


def test_http_429_transient_and_retry_after():
    c = TestableClient([(429, {"Retry-After": "7"}, {"error": {"message": "Throttle"}})])
    with pytest.raises(UpstreamQueryError) as ei:
        c._request("get", c.api + "/accounts")
    err = ei.value.to_dict()
    assert err["is_transient"] is True
    assert err["subcode"] == HTTP_429
    assert err["details"]["retry_after"] == 7


def test_http_500_body_excerpt_and_request_id():
    c = TestableClient([(500, {"x-ms-service-request-id": "req-9"}, "Internal failure XYZ stack truncated")])
    with pytest.raises(UpstreamQueryError) as ei:
        c._request("get", c.api + "/accounts")
    err = ei.value.to_dict()
    assert err["subcode"] == HTTP_500
    assert err["is_transient"] is False
    assert err["message"] == "HTTP 500"
    assert "XYZ stack" in err["details"]["body_excerpt"]
    assert err["details"]["request_id"] == "req-9"


def test_http_non_mapped_status_code_subcode_fallback():
    c = TestableClient([(418, {}, {"error": {"message": "Teapot"}})])
    with pytest.raises(HttpError) as ei:
        c._request("get", c.api + "/accounts")
    assert ei.value.subcode == "http_418"


def test_error_details_are_attached():
    c = TestableClient([(400, {}, {"error": {"message": "Could not find a property named 'nme'"}})])
    with pytest.raises(UpstreamQueryError) as ei:
        c._request("get", c.api + "/accounts", error_details={"filter": "nme eq 'x'"})
    assert ei.value.subcode == HTTP_400
    assert ei.value.details["filter"] == "nme eq 'x'"
    assert "test_token" not in str(ei.value.to_dict())


def test_network_error_becomes_upstream_query_error():
    c = TestableClient([])
    c._http = MagicMock()
    c._http._request.side_effect = requests.exceptions.ConnectionError("boom")
    with pytest.raises(UpstreamQueryError) as ei:
        c._request("get", c.api + "/accounts", error_details={"query": "?$top=1"})
    assert ei.value.status_code is None
    assert ei.value.subcode == UPSTREAM_NETWORK_ERROR
    assert ei.value.details == {"query": "?$top=1"}
