"""Tests for the ARM REST client."""

import subprocess
from unittest.mock import MagicMock, patch

import httpx
import pytest

from azreconcile.arm import (
    ArmAuthError,
    ArmClient,
    ArmClientError,
    ArmConflictError,
    ArmForbiddenError,
    ArmNotFoundError,
    ArmThrottledError,
    ArmTimeoutError,
    LongRunningOperation,
)
from azreconcile.config import Settings

PATH = "/subscriptions/sub-123/resourceGroups/acme-rg/providers/Microsoft.Network/routeTables/rt1"


def make_response(status_code, json=None, headers=None, method="GET"):
    """Build a real httpx response for a mocked transport."""
    return httpx.Response(
        status_code,
        json=json,
        headers=headers,
        request=httpx.Request(method, f"https://management.azure.com{PATH}"),
    )


@pytest.fixture
def client():
    """Create a test client."""
    client = ArmClient("test-token", "sub-123")
    yield client
    client.close()


class TestArmClientInit:
    """Tests for ArmClient initialization."""

    def test_init_with_token(self):
        """Client initializes with token and default endpoint."""
        client = ArmClient("test-token", "sub-123")
        assert client.token == "test-token"
        assert client.subscription_id == "sub-123"
        assert client.base_url == "management.azure.com"
        assert client._client.headers["Authorization"] == "Bearer test-token"
        client.close()

    def test_init_with_sovereign_endpoint(self):
        """Client targets a custom Resource Manager host."""
        client = ArmClient("test-token", "sub-123", base_url="management.chinacloudapi.cn")
        assert client._client.base_url.host == "management.chinacloudapi.cn"
        client.close()

    def test_context_manager(self):
        """Client works as context manager."""
        with ArmClient("test-token", "sub-123") as client:
            assert client.token == "test-token"


class TestArmClientFromEnvironment:
    """Tests for ArmClient.from_environment."""

    def test_requires_subscription(self):
        """A subscription ID is mandatory."""
        settings = Settings(subscription_id=None, access_token="tok")
        with pytest.raises(ArmAuthError, match="ARM_SUBSCRIPTION_ID"):
            ArmClient.from_environment(settings)

    def test_uses_access_token(self):
        """ARM_ACCESS_TOKEN wins over every other method."""
        settings = Settings(
            subscription_id="sub-123",
            access_token="env-token",
            tenant_id="t",
            client_id="c",
            client_secret="s",
            poll_interval=2.5,
        )
        with patch("azreconcile.arm.client.httpx.post") as mock_post:
            client = ArmClient.from_environment(settings)

        mock_post.assert_not_called()
        assert client.token == "env-token"
        assert client.poll_interval == 2.5
        client.close()

    def test_uses_service_principal(self):
        """Client credentials are exchanged for a token."""
        settings = Settings(
            subscription_id="sub-123",
            access_token=None,
            tenant_id="tenant-1",
            client_id="app-1",
            client_secret="shh",
        )
        token_response = httpx.Response(
            200,
            json={"access_token": "sp-token"},
            request=httpx.Request("POST", "https://login.microsoftonline.com"),
        )
        with patch("azreconcile.arm.client.httpx.post", return_value=token_response) as mock_post:
            client = ArmClient.from_environment(settings)

        assert client.token == "sp-token"
        url = mock_post.call_args.args[0]
        assert url == "https://login.microsoftonline.com/tenant-1/oauth2/v2.0/token"
        data = mock_post.call_args.kwargs["data"]
        assert data["grant_type"] == "client_credentials"
        assert data["scope"] == "https://management.azure.com/.default"
        client.close()

    def test_service_principal_rejected(self):
        """A failed client-credentials exchange raises ArmAuthError."""
        settings = Settings(
            subscription_id="sub-123",
            access_token=None,
            tenant_id="tenant-1",
            client_id="app-1",
            client_secret="wrong",
        )
        token_response = httpx.Response(
            401,
            text="invalid_client",
            request=httpx.Request("POST", "https://login.microsoftonline.com"),
        )
        with (
            patch("azreconcile.arm.client.httpx.post", return_value=token_response),
            pytest.raises(ArmAuthError, match="Service principal authentication failed"),
        ):
            ArmClient.from_environment(settings)

    def test_uses_azure_cli(self):
        """The az CLI token is used when nothing else is configured."""
        settings = Settings(
            subscription_id="sub-123",
            access_token=None,
            tenant_id=None,
            client_id=None,
            client_secret=None,
        )
        mock_result = MagicMock()
        mock_result.stdout = "cli-token\n"
        with patch("subprocess.run", return_value=mock_result) as mock_run:
            client = ArmClient.from_environment(settings)

        assert client.token == "cli-token"
        assert "get-access-token" in mock_run.call_args.args[0]
        client.close()

    def test_raises_when_no_token(self):
        """ArmAuthError is raised when no credentials are available."""
        settings = Settings(
            subscription_id="sub-123",
            access_token=None,
            tenant_id=None,
            client_id=None,
            client_secret=None,
        )
        with (
            patch("subprocess.run", side_effect=FileNotFoundError()),
            pytest.raises(ArmAuthError) as exc_info,
        ):
            ArmClient.from_environment(settings)
        assert "No Azure credentials found" in str(exc_info.value)

    def test_raises_when_cli_not_logged_in(self):
        """A failing az CLI call is treated as no token."""
        settings = Settings(
            subscription_id="sub-123",
            access_token=None,
            tenant_id=None,
            client_id=None,
            client_secret=None,
        )
        with (
            patch("subprocess.run", side_effect=subprocess.CalledProcessError(1, "az")),
            pytest.raises(ArmAuthError),
        ):
            ArmClient.from_environment(settings)


class TestArmClientRequest:
    """Tests for ArmClient.request and the verb helpers."""

    def test_get_returns_body(self, client):
        """get returns the decoded JSON body."""
        response = make_response(200, json={"id": PATH, "name": "rt1"})

        with patch.object(client._client, "request", return_value=response) as mock_request:
            result = client.get(PATH, "2018-04-01")

        assert result == {"id": PATH, "name": "rt1"}
        assert mock_request.call_args.args == ("GET", PATH)
        assert mock_request.call_args.kwargs["params"] == {"api-version": "2018-04-01"}

    def test_put_sends_body_and_timeout(self, client):
        """put sends the JSON body and a per-request timeout."""
        response = make_response(200, json={"name": "rt1"}, method="PUT")

        with patch.object(client._client, "request", return_value=response) as mock_request:
            client.put(PATH, "2018-04-01", {"name": "rt1"}, timeout=60.0)

        assert mock_request.call_args.kwargs["json"] == {"name": "rt1"}
        assert mock_request.call_args.kwargs["timeout"] == 60.0

    def test_no_timeout_kwarg_by_default(self, client):
        """The client-wide timeout applies unless one is given."""
        response = make_response(200, json={})

        with patch.object(client._client, "request", return_value=response) as mock_request:
            client.get(PATH, "2018-04-01")

        assert "timeout" not in mock_request.call_args.kwargs

    def test_post_empty_body(self, client):
        """An empty response body decodes to an empty dict."""
        response = httpx.Response(200, request=httpx.Request("POST", "https://x"))

        with patch.object(client._client, "request", return_value=response):
            assert client.post(f"{PATH}/listKeys", "2017-04-01") == {}

    def test_absolute_polling_url_without_api_version(self, client):
        """Polling URLs are requested without adding an api-version."""
        response = make_response(200, json={"status": "Succeeded"})

        with patch.object(client._client, "request", return_value=response) as mock_request:
            client.request("GET", "https://management.azure.com/operations/op-1")

        assert mock_request.call_args.kwargs["params"] is None

    @pytest.mark.parametrize(
        "status_code,exc_type",
        [
            (401, ArmAuthError),
            (403, ArmForbiddenError),
            (404, ArmNotFoundError),
            (409, ArmConflictError),
            (429, ArmThrottledError),
            (500, ArmClientError),
        ],
    )
    def test_status_code_mapping(self, client, status_code, exc_type):
        """Error statuses raise the matching exception."""
        response = make_response(status_code, json={"error": {"code": "Oops", "message": "bad"}})

        with (
            patch.object(client._client, "request", return_value=response),
            pytest.raises(exc_type) as exc_info,
        ):
            client.get(PATH, "2018-04-01")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.code == "Oops"

    def test_not_found_message_includes_arm_message(self, client):
        """The ARM error message is carried into the exception."""
        response = make_response(
            404,
            json={"error": {"code": "ResourceNotFound", "message": "rt1 was not found"}},
        )

        with (
            patch.object(client._client, "request", return_value=response),
            pytest.raises(ArmNotFoundError) as exc_info,
        ):
            client.get(PATH, "2018-04-01")

        assert "rt1 was not found" in str(exc_info.value)

    def test_non_json_error_body(self, client):
        """A plain-text error body is used as the message."""
        response = httpx.Response(
            502, text="Bad Gateway", request=httpx.Request("GET", "https://x")
        )

        with (
            patch.object(client._client, "request", return_value=response),
            pytest.raises(ArmClientError) as exc_info,
        ):
            client.get(PATH, "2018-04-01")

        assert "Bad Gateway" in str(exc_info.value)
        assert exc_info.value.code is None

    def test_transport_timeout(self, client):
        """Transport timeouts raise ArmTimeoutError."""
        with (
            patch.object(client._client, "request", side_effect=httpx.ReadTimeout("slow")),
            pytest.raises(ArmTimeoutError),
        ):
            client.get(PATH, "2018-04-01")

    def test_transport_error(self, client):
        """Connection failures raise ArmClientError."""
        with (
            patch.object(client._client, "request", side_effect=httpx.ConnectError("refused")),
            pytest.raises(ArmClientError, match="Request failed"),
        ):
            client.get(PATH, "2018-04-01")

    def test_begin_put_returns_operation(self, client):
        """begin_put wraps the response in a LongRunningOperation."""
        response = make_response(
            201, json={"properties": {"provisioningState": "Succeeded"}}, method="PUT"
        )

        with patch.object(client._client, "request", return_value=response):
            operation = client.begin_put(PATH, "2018-04-01", {"name": "rt1"})

        assert isinstance(operation, LongRunningOperation)
        assert operation.done is True
        assert operation.status_code == 201

    def test_begin_delete_not_found(self, client):
        """begin_delete propagates a 404 so callers can treat it as gone."""
        response = make_response(404, json={"error": {"code": "NotFound", "message": "gone"}})

        with (
            patch.object(client._client, "request", return_value=response),
            pytest.raises(ArmNotFoundError),
        ):
            client.begin_delete(PATH, "2018-04-01")
