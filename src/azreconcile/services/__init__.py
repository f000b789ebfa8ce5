"""Service layer."""

from .desired_state import DesiredState, DesiredStateError, load_desired_state, parse_desired_state

__all__ = [
    "DesiredState",
    "DesiredStateError",
    "load_desired_state",
    "parse_desired_state",
]
