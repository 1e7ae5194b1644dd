"""Unit tests for the requests error classifier."""

from unittest.mock import MagicMock

import pytest
import requests

from infrastructure.operations.classifiers import classify_http_error
from infrastructure.operations.status import OperationStatus


def _http_error(status_code, headers=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.headers = headers or {}
    return requests.HTTPError(f"{status_code} error", response=response)


@pytest.mark.unit
class TestClassifyHttpError:
    def test_timeout_is_transient(self):
        result = classify_http_error(requests.Timeout("read timed out"))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "TIMEOUT"

    def test_connect_timeout_is_timeout(self):
        result = classify_http_error(requests.ConnectTimeout("connect timed out"))

        assert result.error_code == "TIMEOUT"

    def test_connection_error_is_transient(self):
        result = classify_http_error(requests.ConnectionError("refused"))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "CONNECTION_ERROR"

    def test_rate_limited_uses_retry_after_header(self):
        result = classify_http_error(_http_error(429, {"Retry-After": "12"}))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "RATE_LIMITED"
        assert result.retry_after == 12

    def test_rate_limited_defaults_retry_after(self):
        result = classify_http_error(_http_error(429, {"Retry-After": "soon"}))

        assert result.retry_after == 60

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_rejected_credentials_are_unauthorized(self, status_code):
        result = classify_http_error(_http_error(status_code))

        assert result.status == OperationStatus.UNAUTHORIZED
        assert result.error_code == "UNAUTHORIZED"

    def test_not_found(self):
        result = classify_http_error(_http_error(404))

        assert result.status == OperationStatus.NOT_FOUND

    def test_server_error_is_transient(self):
        result = classify_http_error(_http_error(503))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "SERVER_ERROR"

    def test_bad_request_is_permanent(self):
        result = classify_http_error(_http_error(400))

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "HTTP_ERROR"
        assert "400" in result.message
