"""Data models."""

from .authorization_rule import (
    AccessRights,
    TopicAuthorizationRuleConfig,
    TopicAuthorizationRuleState,
)
from .resource_id import ResourceId, parse_resource_id
from .route_table import NextHopType, RouteConfig, RouteTableConfig, RouteTableState
from .timeouts import Timeouts

__all__ = [
    "AccessRights",
    "NextHopType",
    "ResourceId",
    "RouteConfig",
    "RouteTableConfig",
    "RouteTableState",
    "Timeouts",
    "TopicAuthorizationRuleConfig",
    "TopicAuthorizationRuleState",
    "parse_resource_id",
]
