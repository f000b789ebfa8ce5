"""Colorful CLI output helpers."""

import sys

import yaml
from pydantic import BaseModel

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RED = "\033[31m"
RESET = "\033[0m"
CHECK = "\u2713"  # ✓
BULLET = "\u2022"  # •
CROSS = "\u2717"  # ✗

MASK = "(sensitive value)"

# State fields never printed unless explicitly requested
SECRET_FIELDS = (
    "primary_key",
    "primary_connection_string",
    "secondary_key",
    "secondary_connection_string",
)


def _supports_color() -> bool:
    """Check if terminal supports color output."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _colorize(text: str, color: str) -> str:
    """Apply color to text if terminal supports it."""
    if _supports_color():
        return f"{color}{text}{RESET}"
    return text


def success(message: str) -> None:
    """Print success message with green checkmark."""
    check = _colorize(CHECK, GREEN)
    print(f"{check} {message}")


def info(message: str) -> None:
    """Print info message with yellow bullet."""
    bullet = _colorize(BULLET, YELLOW)
    print(f"{bullet} {message}")


def header(message: str) -> None:
    """Print header message in blue."""
    print(_colorize(message, BLUE))


def error(message: str) -> None:
    """Print error message with red cross to stderr."""
    cross = _colorize(CROSS, RED)
    print(f"{cross} {message}", file=sys.stderr)


def format_state(state: BaseModel, show_secrets: bool = False) -> str:
    """Render resource state as YAML, masking secrets unless asked not to."""
    data = state.model_dump(mode="json")
    if not show_secrets:
        for key in SECRET_FIELDS:
            if data.get(key) is not None:
                data[key] = MASK
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def print_state(state: BaseModel, show_secrets: bool = False) -> None:
    """Print resource state as YAML."""
    print(format_state(state, show_secrets), end="")
