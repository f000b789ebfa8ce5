"""Azure Resource Manager API access."""

from .client import ArmClient
from .errors import (
    ArmAuthError,
    ArmClientError,
    ArmConflictError,
    ArmForbiddenError,
    ArmNotFoundError,
    ArmOperationFailedError,
    ArmThrottledError,
    ArmTimeoutError,
)
from .polling import LongRunningOperation

__all__ = [
    "ArmAuthError",
    "ArmClient",
    "ArmClientError",
    "ArmConflictError",
    "ArmForbiddenError",
    "ArmNotFoundError",
    "ArmOperationFailedError",
    "ArmThrottledError",
    "ArmTimeoutError",
    "LongRunningOperation",
]
