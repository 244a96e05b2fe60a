# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from unittest.mock import Mock, patch

import pytest
import requests

from dataverse_query_designer.core._http import _HttpClient


class TestHttpClient:
    """Timeout and attempt handling in _HttpClient."""

    def test_default_configuration(self):
        client = _HttpClient()
        assert client.max_attempts == 1
        assert client.base_delay == 0.5
        assert client.default_timeout is None

    @patch("requests.request")
    def test_get_uses_30_second_default_timeout(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        _HttpClient()._request("get", "https://test.example.com")
        assert mock_request.call_args.kwargs["timeout"] == 30

    @patch("requests.request")
    def test_post_uses_120_second_default_timeout(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        _HttpClient()._request("post", "https://test.example.com")
        assert mock_request.call_args.kwargs["timeout"] == 120

    @patch("requests.request")
    def test_configured_timeout_wins(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        _HttpClient(timeout=7)._request("get", "https://test.example.com")
        assert mock_request.call_args.kwargs["timeout"] == 7

    @patch("requests.request")
    def test_explicit_timeout_argument_wins(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        _HttpClient(timeout=7)._request("get", "https://test.example.com", timeout=2)
        assert mock_request.call_args.kwargs["timeout"] == 2

    @patch("requests.request")
    @patch("time.sleep")
    def test_single_attempt_by_default(self, mock_sleep, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("Network error")
        with pytest.raises(requests.exceptions.ConnectionError):
            _HttpClient()._request("get", "https://test.example.com")
        assert mock_request.call_count == 1
        mock_sleep.assert_not_called()

    @patch("requests.request")
    def test_error_status_is_returned_not_retried(self, mock_request):
        mock_request.return_value = Mock(status_code=503, headers={})
        response = _HttpClient(retries=3)._request("get", "https://test.example.com")
        assert response.status_code == 503
        assert mock_request.call_count == 1

    @patch("requests.request")
    @patch("time.sleep")
    def test_network_error_retry_when_enabled(self, mock_sleep, mock_request):
        mock_request.side_effect = [
            requests.exceptions.ConnectionError("Network error"),
            requests.exceptions.ConnectionError("Network error"),
            Mock(status_code=200),
        ]
        response = _HttpClient(retries=3)._request("get", "https://test.example.com")
        assert response.status_code == 200
        assert mock_request.call_count == 3
        mock_sleep.assert_any_call(0.5)
        mock_sleep.assert_any_call(1.0)

    def test_session_is_used_when_given(self):
        session = Mock()
        session.request.return_value = Mock(status_code=200)
        with patch("requests.request") as mock_request:
            _HttpClient(session=session)._request("get", "https://test.example.com")
        session.request.assert_called_once()
        mock_request.assert_not_called()
