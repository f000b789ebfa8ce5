"""Route table desired and observed state."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .common import normalize_location, validate_resource_group_name, validate_tags
from .timeouts import Timeouts


class NextHopType(str, Enum):
    """Where packets matching a route are sent."""

    VIRTUAL_NETWORK_GATEWAY = "VirtualNetworkGateway"
    VNET_LOCAL = "VnetLocal"
    INTERNET = "Internet"
    VIRTUAL_APPLIANCE = "VirtualAppliance"
    NONE = "None"

    @classmethod
    def parse(cls, value: str) -> "NextHopType":
        """Look up a next hop type ignoring case."""
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Invalid next_hop_type {value!r}. Must be one of: {valid}")


class RouteConfig(BaseModel):
    """A single route entry."""

    name: str = Field(..., min_length=1)
    address_prefix: str = Field(..., min_length=1)
    next_hop_type: NextHopType
    next_hop_in_ip_address: str | None = None  # Only meaningful for VirtualAppliance

    model_config = {"extra": "forbid"}

    @field_validator("next_hop_type", mode="before")
    @classmethod
    def validate_next_hop_type(cls, v: Any) -> Any:
        """Accept next hop types in any casing."""
        if isinstance(v, str):
            return NextHopType.parse(v)
        return v

    @field_validator("next_hop_in_ip_address", mode="before")
    @classmethod
    def empty_ip_is_absent(cls, v: Any) -> Any:
        """Treat an empty next hop IP as not set."""
        if v == "":
            return None
        return v


class RouteTableConfig(BaseModel):
    """Desired state of a route table."""

    name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    resource_group_name: str
    routes: list[RouteConfig] = Field(default_factory=list)
    disable_bgp_route_propagation: bool = False
    tags: dict[str, str] = Field(default_factory=dict)
    timeouts: Timeouts = Field(default_factory=Timeouts)

    model_config = {"extra": "forbid"}

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str) -> str:
        """Store locations in normalized form."""
        return normalize_location(v)

    @field_validator("resource_group_name")
    @classmethod
    def validate_resource_group(cls, v: str) -> str:
        """Validate the resource group name."""
        return validate_resource_group_name(v)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tag_values(cls, v: Any) -> Any:
        """Validate tag limits and coerce values to strings."""
        if isinstance(v, dict):
            return validate_tags(v)
        return v


class RouteTableState(BaseModel):
    """Observed state of a route table."""

    id: str
    name: str
    resource_group_name: str
    location: str | None = None
    routes: list[RouteConfig] = Field(default_factory=list)
    disable_bgp_route_propagation: bool = False
    subnets: list[str] = Field(default_factory=list)  # Read-only, attached subnet IDs
    tags: dict[str, str] = Field(default_factory=dict)
