"""Resource handlers, one per reconcilable resource kind."""

from .errors import ImportAsExistsError, ResourceError, ResourceTimeoutError
from .protocol import ResourceHandler
from .route_table import RouteTableHandler
from .servicebus_topic_authorization_rule import TopicAuthorizationRuleHandler

# Resource type name -> handler class
RESOURCE_HANDLERS: dict[str, type[RouteTableHandler] | type[TopicAuthorizationRuleHandler]] = {
    RouteTableHandler.resource_type: RouteTableHandler,
    TopicAuthorizationRuleHandler.resource_type: TopicAuthorizationRuleHandler,
}

__all__ = [
    "RESOURCE_HANDLERS",
    "ImportAsExistsError",
    "ResourceError",
    "ResourceHandler",
    "ResourceTimeoutError",
    "RouteTableHandler",
    "TopicAuthorizationRuleHandler",
]
