"""Parsing of Azure Resource Manager resource identifiers.

ARM ids are hierarchical key/value paths:
    /subscriptions/{sub}/resourceGroups/{rg}/providers/{namespace}/{type}/{name}[/{type}/{name}...]

Examples:
    /subscriptions/0000/resourceGroups/acme/providers/Microsoft.Network/routeTables/rt1
    .../providers/Microsoft.ServiceBus/namespaces/ns1/topics/t1/authorizationRules/rule1
"""

from dataclasses import dataclass, field


@dataclass
class ResourceId:
    """Parsed components of an ARM resource id."""

    subscription_id: str
    resource_group: str
    provider: str | None = None
    path: dict[str, str] = field(default_factory=dict)

    def require(self, key: str) -> str:
        """Get a path segment value, raising ValueError if it is missing."""
        value = self.path.get(key)
        if not value:
            raise ValueError(f"Resource ID is missing the {key!r} segment")
        return value


def parse_resource_id(resource_id: str) -> ResourceId:
    """Parse an ARM resource id into its components.

    Args:
        resource_id: The id to parse

    Returns:
        ResourceId with subscription, resource group, provider and the
        remaining key/value segments in ``path``

    Raises:
        ValueError: If the id is malformed or lacks a subscription or
            resource group

    Examples:
        >>> rid = parse_resource_id("/subscriptions/s/resourceGroups/g/providers/P/routeTables/rt")
        >>> rid.resource_group, rid.path["routeTables"]
        ('g', 'rt')
    """
    trimmed = resource_id.strip("/")
    if not trimmed:
        raise ValueError("Resource ID cannot be empty")

    components = trimmed.split("/")
    if len(components) % 2 != 0:
        raise ValueError(f"The number of path segments is not divisible by 2 in {resource_id!r}")

    segments: dict[str, str] = {}
    for key, value in zip(components[::2], components[1::2], strict=True):
        if not key or not value:
            raise ValueError(f"Key/value cannot be empty strings in {resource_id!r}")
        segments[key] = value

    subscription_id = segments.pop("subscriptions", None)
    if not subscription_id:
        raise ValueError(f"No subscription ID found in {resource_id!r}")

    resource_group = segments.pop("resourceGroups", None) or segments.pop("resourcegroups", None)
    if not resource_group:
        raise ValueError(f"No resource group name found in {resource_id!r}")

    provider = segments.pop("providers", None)

    return ResourceId(
        subscription_id=subscription_id,
        resource_group=resource_group,
        provider=provider,
        path=segments,
    )
