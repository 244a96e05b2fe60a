# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import unittest
from unittest.mock import MagicMock, patch

from azure.core.credentials import AccessToken, TokenCredential
from azure.core.exceptions import ClientAuthenticationError, ServiceRequestError

from dataverse_query_designer.core._auth import _AuthManager, _client_secret_credential
from dataverse_query_designer.core._error_codes import UPSTREAM_AUTH_FAILED
from dataverse_query_designer.core.errors import UpstreamAuthError
from tests.unit.test_helpers import make_environment


class TestAuthManager(unittest.TestCase):
    def setUp(self):
        self.env = make_environment(org_url="https://org.example/")
        self.credential = MagicMock(spec=TokenCredential)
        self.credential.get_token.return_value = AccessToken("tok", 0)
        self.manager = _AuthManager(lambda env: self.credential)

    def test_acquires_token_for_org_scope(self):
        pair = self.manager._acquire_token(self.env)
        self.assertEqual(pair.resource, "https://org.example/.default")
        self.assertEqual(pair.access_token, "tok")
        self.credential.get_token.assert_called_once_with("https://org.example/.default")

    def test_authentication_failure_maps_to_upstream_auth_error(self):
        self.credential.get_token.side_effect = ClientAuthenticationError(message="AADSTS7000215: Invalid client secret")
        with self.assertRaises(UpstreamAuthError) as ctx:
            self.manager._acquire_token(self.env)
        err = ctx.exception
        self.assertEqual(err.code, "upstream_auth_error")
        self.assertEqual(err.subcode, UPSTREAM_AUTH_FAILED)
        self.assertEqual(err.status_code, 401)
        self.assertEqual(err.details, {"environment_id": "env-1", "tenant_id": "tenant-id"})
        self.assertNotIn("s3cr3t", str(err.to_dict()))

    def test_network_failure_maps_to_upstream_auth_error(self):
        self.credential.get_token.side_effect = ServiceRequestError("connection refused")
        with self.assertRaises(UpstreamAuthError) as ctx:
            self.manager._acquire_token(self.env)
        self.assertIsNone(ctx.exception.status_code)

    def test_credential_closed_after_use(self):
        self.credential.close = MagicMock()
        self.manager._acquire_token(self.env)
        self.credential.close.assert_called_once()

    @patch("dataverse_query_designer.core._auth.ClientSecretCredential")
    def test_default_factory_uses_environment_app_registration(self, mock_cls):
        _client_secret_credential(self.env)
        mock_cls.assert_called_once_with(tenant_id="tenant-id", client_id="client-id", client_secret="s3cr3t")
