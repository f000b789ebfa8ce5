"""Azure Resource Manager REST API client."""

from __future__ import annotations

import logging
import subprocess
import time
from typing import TYPE_CHECKING, Any

import httpx

from .errors import (
    ArmAuthError,
    ArmClientError,
    ArmConflictError,
    ArmForbiddenError,
    ArmNotFoundError,
    ArmThrottledError,
    ArmTimeoutError,
)
from .polling import LongRunningOperation

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


class ArmClient:
    """Azure Resource Manager REST API client.

    Provides a thin wrapper around the ARM REST API with:
    - Bearer token authentication (env var, service principal or az CLI)
    - Sovereign cloud support via custom base_url
    - Status-code to exception mapping
    - Long-running operation handles for PUT and DELETE
    """

    def __init__(
        self,
        token: str,
        subscription_id: str,
        base_url: str = "management.azure.com",
        poll_interval: float = 10.0,
    ):
        """Initialize the ARM client.

        Args:
            token: ARM bearer token
            subscription_id: Subscription that new resources are created in
            base_url: Resource Manager host (default: management.azure.com)
            poll_interval: Seconds between polls of long-running operations
        """
        self.token = token
        self.subscription_id = subscription_id
        self.base_url = base_url
        self.poll_interval = poll_interval
        self._client = httpx.Client(
            base_url=f"https://{base_url}",
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=30.0,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ArmClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @classmethod
    def from_environment(cls, settings: Settings) -> ArmClient:
        """Create a client from settings, a service principal or the az CLI.

        Tries in order:
        1. ARM_ACCESS_TOKEN
        2. Service principal client credentials (ARM_TENANT_ID, ARM_CLIENT_ID,
           ARM_CLIENT_SECRET)
        3. az account get-access-token (if az CLI is installed and logged in)

        Args:
            settings: Application settings

        Returns:
            Configured ArmClient

        Raises:
            ArmAuthError: If no subscription or no token is available
        """
        if not settings.subscription_id:
            logger.error("No subscription ID configured")
            raise ArmAuthError(
                "No subscription ID configured. Set the ARM_SUBSCRIPTION_ID environment variable."
            )

        kwargs = {
            "subscription_id": settings.subscription_id,
            "base_url": settings.endpoint,
            "poll_interval": settings.poll_interval,
        }

        if settings.access_token:
            logger.debug("Using token from ARM_ACCESS_TOKEN")
            return cls(settings.access_token, **kwargs)

        if settings.tenant_id and settings.client_id and settings.client_secret:
            logger.debug("Using service principal %s", settings.client_id)
            return cls(_token_from_service_principal(settings), **kwargs)

        token = _token_from_azure_cli(settings.endpoint)
        if token:
            logger.debug("Using token from az CLI")
            return cls(token, **kwargs)

        logger.error("No ARM token found")
        raise ArmAuthError(
            "No Azure credentials found. Either:\n"
            "  - Set ARM_ACCESS_TOKEN\n"
            "  - Set ARM_TENANT_ID, ARM_CLIENT_ID and ARM_CLIENT_SECRET\n"
            "  - Run 'az login' to authenticate with the Azure CLI"
        )

    def request(
        self,
        method: str,
        url: str,
        api_version: str | None = None,
        body: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a request and map error responses to exceptions.

        Args:
            method: HTTP method
            url: Path relative to the endpoint, or an absolute polling URL
            api_version: Value of the api-version query parameter
            body: JSON request body
            timeout: Overrides the client request timeout, in seconds

        Returns:
            The successful response

        Raises:
            ArmAuthError: 401
            ArmForbiddenError: 403
            ArmNotFoundError: 404
            ArmConflictError: 409
            ArmThrottledError: 429
            ArmTimeoutError: The request timed out
            ArmClientError: Other errors
        """
        params = {"api-version": api_version} if api_version else None
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout

        start_time = time.monotonic()
        try:
            response = self._client.request(method, url, params=params, json=body, **kwargs)
        except httpx.TimeoutException as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("ARM %s %s timed out after %.0fms", method, url, elapsed_ms)
            raise ArmTimeoutError(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("ARM %s %s failed after %.0fms: %s", method, url, elapsed_ms, e)
            raise ArmClientError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        status = response.status_code

        if status < 400:
            logger.info("ARM %s %s: %d (%.0fms)", method, url, status, elapsed_ms)
            return response

        code, message = _parse_error(response)
        logger.error(
            "ARM %s %s: HTTP %d %s (%.0fms)", method, url, status, code or "", elapsed_ms
        )

        if status == 401:
            raise ArmAuthError(
                f"Authentication failed: {message}. Check your Azure credentials.",
                status,
                code,
            )
        if status == 403:
            raise ArmForbiddenError(f"Permission denied: {message}", status, code)
        if status == 404:
            raise ArmNotFoundError(f"Resource not found: {message}", status, code)
        if status == 409:
            raise ArmConflictError(f"Conflict: {message}", status, code)
        if status == 429:
            raise ArmThrottledError(
                "ARM request rate limit exceeded. Try again later.", status, code
            )
        raise ArmClientError(f"HTTP {status}: {message}", status, code)

    def get(self, path: str, api_version: str) -> dict[str, Any]:
        """GET a resource and return its JSON body."""
        return _json_body(self.request("GET", path, api_version))

    def put(
        self,
        path: str,
        api_version: str,
        body: dict[str, Any],
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """PUT a resource whose create/update completes synchronously."""
        logger.debug("PUT %s body=%s", path, body)
        return _json_body(self.request("PUT", path, api_version, body, timeout))

    def post(
        self, path: str, api_version: str, body: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """POST an action (e.g. listKeys) and return its JSON body."""
        return _json_body(self.request("POST", path, api_version, body))

    def delete(self, path: str, api_version: str, timeout: float | None = None) -> None:
        """DELETE a resource whose deletion completes synchronously."""
        self.request("DELETE", path, api_version, timeout=timeout)

    def begin_put(
        self, path: str, api_version: str, body: dict[str, Any]
    ) -> LongRunningOperation:
        """Start a long-running create/update and return a handle to wait on."""
        logger.debug("PUT %s body=%s", path, body)
        response = self.request("PUT", path, api_version, body)
        return LongRunningOperation(self, "PUT", path, api_version, response)

    def begin_delete(self, path: str, api_version: str) -> LongRunningOperation:
        """Start a long-running delete and return a handle to wait on."""
        response = self.request("DELETE", path, api_version)
        return LongRunningOperation(self, "DELETE", path, api_version, response)


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, treating an empty body as {}."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError as e:
        raise ArmClientError(f"Invalid JSON response: {e}", response.status_code) from e
    return data if isinstance(data, dict) else {}


def _parse_error(response: httpx.Response) -> tuple[str | None, str]:
    """Extract (code, message) from an ARM error body."""
    try:
        data = response.json()
    except ValueError:
        return None, response.text or f"HTTP {response.status_code}"

    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return None, response.text
    return error.get("code"), error.get("message", response.text)


def _token_from_service_principal(settings: Settings) -> str:
    """Acquire a token with the OAuth2 client-credentials grant."""
    url = f"https://{settings.authority_host}/{settings.tenant_id}/oauth2/v2.0/token"
    try:
        response = httpx.post(
            url,
            data={
                "grant_type": "client_credentials",
                "client_id": settings.client_id,
                "client_secret": settings.client_secret,
                "scope": f"https://{settings.endpoint}/.default",
            },
            timeout=30.0,
        )
    except httpx.RequestError as e:
        raise ArmAuthError(f"Token request failed: {e}") from e

    if response.status_code != 200:
        logger.error("Token request for %s: HTTP %d", settings.client_id, response.status_code)
        raise ArmAuthError(
            f"Service principal authentication failed (HTTP {response.status_code}): "
            f"{response.text}",
            response.status_code,
        )

    token = response.json().get("access_token")
    if not token:
        raise ArmAuthError("Token response did not contain an access_token")
    return token


def _token_from_azure_cli(endpoint: str) -> str | None:
    """Read a token from the az CLI, or None if it is unavailable."""
    try:
        result = subprocess.run(
            [
                "az",
                "account",
                "get-access-token",
                "--resource",
                f"https://{endpoint}/",
                "--query",
                "accessToken",
                "--output",
                "tsv",
            ],
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        logger.debug("az CLI not available or not logged in")
        return None
    return result.stdout.strip() or None
