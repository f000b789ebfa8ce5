"""Field helpers shared by all resource models."""

import re
from typing import Any

MAX_TAGS = 15
MAX_TAG_KEY_LENGTH = 512
MAX_TAG_VALUE_LENGTH = 256

MAX_RESOURCE_GROUP_NAME_LENGTH = 90
RESOURCE_GROUP_NAME_PATTERN = re.compile(r"^[-\w._()]+$")


def normalize_location(value: str) -> str:
    """Normalize an Azure location (e.g. "West US" -> "westus")."""
    return value.replace(" ", "").lower()


def validate_resource_group_name(value: str) -> str:
    """Validate a resource group name against ARM naming rules."""
    if not value:
        raise ValueError("resource_group_name cannot be empty")
    if len(value) > MAX_RESOURCE_GROUP_NAME_LENGTH:
        raise ValueError(
            f"resource_group_name may not exceed {MAX_RESOURCE_GROUP_NAME_LENGTH} characters"
        )
    if value.endswith("."):
        raise ValueError("resource_group_name cannot end with a period")
    if not RESOURCE_GROUP_NAME_PATTERN.match(value):
        raise ValueError(
            "resource_group_name may only contain alphanumeric characters, dash, "
            "underscores, parentheses and periods"
        )
    return value


def validate_tags(tags: dict[str, Any]) -> dict[str, str]:
    """Validate tag count and lengths, coercing values to strings."""
    if len(tags) > MAX_TAGS:
        raise ValueError(f"a maximum of {MAX_TAGS} tags can be applied to each ARM resource")

    result: dict[str, str] = {}
    for key, value in tags.items():
        if len(key) > MAX_TAG_KEY_LENGTH:
            raise ValueError(f"the maximum length for a tag key is {MAX_TAG_KEY_LENGTH} characters")
        text = "" if value is None else str(value)
        if len(text) > MAX_TAG_VALUE_LENGTH:
            raise ValueError(
                f"the maximum length for a tag value is {MAX_TAG_VALUE_LENGTH} characters"
            )
        result[key] = text
    return result


def expand_tags(tags: dict[str, Any]) -> dict[str, str]:
    """Convert desired-state tags into the ARM request shape."""
    return {key: "" if value is None else str(value) for key, value in tags.items()}


def flatten_tags(tags: dict[str, str] | None) -> dict[str, str]:
    """Convert ARM response tags into state, treating absent tags as empty."""
    if not tags:
        return {}
    return dict(tags)
