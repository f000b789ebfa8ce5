"""Long-running operation polling for ARM PUT and DELETE requests.

ARM reports asynchronous work in one of three ways:

- an ``Azure-AsyncOperation`` header pointing at an operation status resource
  whose ``status`` eventually becomes Succeeded, Failed or Canceled
- a ``Location`` header that answers 202 until the work is done
- (PUT only) a resource body whose ``properties.provisioningState`` is not yet
  terminal

An initial 200/204 response without any of these is already complete.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_delay,
    wait_exponential,
)

from .errors import (
    ArmAuthError,
    ArmClientError,
    ArmOperationFailedError,
    ArmThrottledError,
    ArmTimeoutError,
)

if TYPE_CHECKING:
    from .client import ArmClient

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
FAILED_STATES = ("failed", "canceled")

# Floor for the delay between polls, whatever Retry-After or the settings say
MIN_POLL_DELAY = 1.0
# Ceiling for the backoff between retries of a failed status request
MAX_RETRY_DELAY = 30.0


class LongRunningOperation:
    """Handle to an in-flight ARM operation."""

    def __init__(
        self,
        client: ArmClient,
        method: str,
        path: str,
        api_version: str,
        response: httpx.Response,
    ) -> None:
        self._client = client
        self.method = method
        self.path = path
        self.api_version = api_version
        self.status_code = response.status_code

        self._async_url = response.headers.get("Azure-AsyncOperation")
        self._location_url = response.headers.get("Location")
        self._retry_after = _retry_after(response)
        self._result = _json_or_empty(response)
        self.done = False

        if self._async_url or self._location_url:
            return
        if response.status_code == 202:
            # Accepted without a polling URL: nothing we can follow.
            self.done = True
            return

        state = _provisioning_state(self._result)
        if method == "PUT" and state and state not in (SUCCEEDED, *FAILED_STATES):
            return
        if state in FAILED_STATES:
            raise ArmOperationFailedError(
                f"{method} {path} finished with provisioning state {state!r}",
                response.status_code,
            )
        self.done = True

    @property
    def result(self) -> dict[str, Any]:
        """Final resource body (empty for deletes)."""
        return self._result

    def wait(self, timeout: float, cancel: threading.Event | None = None) -> dict[str, Any]:
        """Block until the operation reaches a terminal state.

        Args:
            timeout: Seconds to wait before giving up
            cancel: Optional event; setting it aborts the wait

        Returns:
            The final resource body ({} for deletes)

        Raises:
            ArmOperationFailedError: The operation ended Failed or Canceled
            ArmTimeoutError: The deadline passed or cancel was set
            ArmClientError: A status request failed with a non-transient error,
                or kept failing until the deadline
        """
        deadline = time.monotonic() + timeout
        while not self.done:
            self._sleep(deadline, cancel)
            self._poll_with_retry(deadline, cancel)
        return self._result

    def _sleep(self, deadline: float, cancel: threading.Event | None) -> None:
        interval = self._retry_after
        if interval is None:
            interval = self._client.poll_interval
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ArmTimeoutError(f"Timed out waiting for {self.method} {self.path}")

        self._pause(min(max(interval, MIN_POLL_DELAY), remaining), cancel)

        if time.monotonic() >= deadline:
            raise ArmTimeoutError(f"Timed out waiting for {self.method} {self.path}")

    def _pause(self, delay: float, cancel: threading.Event | None) -> None:
        if cancel is not None:
            if cancel.wait(delay):
                raise ArmTimeoutError(f"Cancelled while waiting for {self.method} {self.path}")
        else:
            time.sleep(delay)

    def _poll_with_retry(self, deadline: float, cancel: threading.Event | None) -> None:
        """Poll once, retrying throttled, 5xx and transport failures until the deadline."""
        retrying = Retrying(
            stop=stop_after_delay(max(deadline - time.monotonic(), 0.0)),
            wait=wait_exponential(multiplier=1, min=MIN_POLL_DELAY, max=MAX_RETRY_DELAY),
            retry=retry_if_exception(is_transient_error),
            sleep=lambda seconds: self._pause(seconds, cancel),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        retrying(self._poll)

    def _poll(self) -> None:
        if self._async_url:
            self._poll_async_operation()
        elif self._location_url:
            self._poll_location()
        else:
            self._poll_provisioning_state()

    def _poll_async_operation(self) -> None:
        response = self._client.request("GET", self._async_url)
        self._retry_after = _retry_after(response)
        body = _json_or_empty(response)
        status = str(body.get("status", "")).lower()
        logger.debug("%s %s: operation status %s", self.method, self.path, status or "unknown")

        if status in FAILED_STATES:
            error = body.get("error") or {}
            raise ArmOperationFailedError(
                f"{self.method} {self.path} finished with status {body.get('status')!r}: "
                f"{error.get('message', 'no error details')}",
                response.status_code,
                error.get("code"),
            )
        if status == SUCCEEDED:
            self._finish()

    def _poll_location(self) -> None:
        response = self._client.request("GET", self._location_url)
        self._retry_after = _retry_after(response)
        logger.debug("%s %s: location status %d", self.method, self.path, response.status_code)
        if response.status_code != 202:
            self._finish()

    def _poll_provisioning_state(self) -> None:
        self._result = self._client.get(self.path, self.api_version)
        state = _provisioning_state(self._result)
        logger.debug("%s %s: provisioning state %s", self.method, self.path, state)
        if state in FAILED_STATES:
            raise ArmOperationFailedError(
                f"{self.method} {self.path} finished with provisioning state {state!r}"
            )
        if state in (None, SUCCEEDED):
            self.done = True

    def _finish(self) -> None:
        if self.method == "PUT":
            self._result = self._client.get(self.path, self.api_version)
        else:
            self._result = {}
        self.done = True


def is_transient_error(error: BaseException) -> bool:
    """Whether a failed status request is worth repeating."""
    if isinstance(error, ArmOperationFailedError | ArmAuthError):
        return False
    if isinstance(error, ArmThrottledError | ArmTimeoutError):
        return True
    if isinstance(error, ArmClientError):
        status = error.status_code
        return status is None or status == 408 or status >= 500
    return False


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _provisioning_state(body: dict[str, Any]) -> str | None:
    state = (body.get("properties") or {}).get("provisioningState")
    return state.lower() if isinstance(state, str) else None


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
