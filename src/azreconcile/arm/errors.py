"""Exceptions raised by the Azure Resource Manager client."""


class ArmClientError(Exception):
    """Base exception for ARM client errors.

    Attributes:
        status_code: HTTP status of the failed response, if any
        code: ARM error code from the response body (e.g. "InvalidResourceName")
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class ArmAuthError(ArmClientError):
    """Authentication failed or no credentials are available."""

    pass


class ArmForbiddenError(ArmClientError):
    """Permission denied."""

    pass


class ArmNotFoundError(ArmClientError):
    """Resource not found."""

    pass


class ArmConflictError(ArmClientError):
    """Request conflicts with the current state of the resource."""

    pass


class ArmThrottledError(ArmClientError):
    """Too many requests."""

    pass


class ArmOperationFailedError(ArmClientError):
    """A long-running operation finished in the Failed or Canceled state."""

    pass


class ArmTimeoutError(ArmClientError):
    """Waiting for a long-running operation exceeded its deadline or was cancelled."""

    pass
