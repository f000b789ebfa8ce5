"""Service Bus topic authorization rule handler (azurerm_servicebus_topic_authorization_rule)."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, ClassVar

from ..arm import ArmClientError, ArmNotFoundError, ArmTimeoutError
from ..models import (
    ResourceId,
    Timeouts,
    TopicAuthorizationRuleConfig,
    TopicAuthorizationRuleState,
    parse_resource_id,
)
from ..models.authorization_rule import flags_from_rights
from .errors import ImportAsExistsError, ResourceError, ResourceTimeoutError

if TYPE_CHECKING:
    from ..arm import ArmClient

logger = logging.getLogger(__name__)

API_VERSION = "2017-04-01"
PROVIDER = "Microsoft.ServiceBus"


def authorization_rule_path(
    subscription_id: str,
    resource_group: str,
    namespace_name: str,
    topic_name: str,
    name: str,
) -> str:
    """ARM path of a topic authorization rule."""
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/{PROVIDER}/namespaces/{namespace_name}"
        f"/topics/{topic_name}/authorizationRules/{name}"
    )


class TopicAuthorizationRuleHandler:
    """Creates, reads, updates and deletes authorization rules on Service Bus topics.

    Create/update and delete complete synchronously on this API. Each call is
    bounded by the matching timeout, and a set cancel event stops the handler
    before it issues a mutating request.
    """

    resource_type: ClassVar[str] = "azurerm_servicebus_topic_authorization_rule"
    config_model: ClassVar[type[TopicAuthorizationRuleConfig]] = TopicAuthorizationRuleConfig

    def __init__(self, client: ArmClient, cancel: threading.Event | None = None) -> None:
        self._client = client
        self._cancel = cancel

    def create(self, desired: TopicAuthorizationRuleConfig) -> TopicAuthorizationRuleState:
        """Create an authorization rule, failing if one already exists."""
        return self.create_or_update(desired, is_new=True)

    def update(self, desired: TopicAuthorizationRuleConfig) -> TopicAuthorizationRuleState:
        """Update an authorization rule's rights in place."""
        return self.create_or_update(desired, is_new=False)

    def create_or_update(
        self, desired: TopicAuthorizationRuleConfig, is_new: bool
    ) -> TopicAuthorizationRuleState:
        """Converge an authorization rule to the desired state."""
        logger.info(
            "Preparing arguments for ServiceBus Topic Authorization Rule %r creation", desired.name
        )

        name = desired.name
        namespace = desired.namespace_name
        topic = desired.topic_name
        group = desired.resource_group_name
        path = authorization_rule_path(
            self._client.subscription_id, group, namespace, topic, name
        )

        if is_new:
            # First check if there's one in this subscription requiring import
            try:
                existing = self._client.get(path, API_VERSION)
            except ArmNotFoundError:
                existing = {}
            except ArmClientError as e:
                raise ResourceError(
                    f"Error checking for the existence of Service Bus Topic Rule {name!r} "
                    f"(Namespace {namespace!r} / Resource Group {group!r}): {e}"
                ) from e
            if existing.get("id"):
                raise ImportAsExistsError(self.resource_type, existing["id"])

        self._check_cancelled(name)
        try:
            self._client.put(
                path,
                API_VERSION,
                expand_authorization_rule(desired),
                timeout=desired.timeouts.for_create_update(is_new),
            )
        except ArmTimeoutError as e:
            raise ResourceTimeoutError(
                f"Timed out creating/updating ServiceBus Topic Authorization Rule {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e
        except ArmClientError as e:
            raise ResourceError(
                f"Error creating/updating ServiceBus Topic Authorization Rule {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e

        try:
            read = self._client.get(path, API_VERSION)
        except ArmClientError as e:
            raise ResourceError(
                f"Error retrieving ServiceBus Topic Authorization Rule {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e
        resource_id = read.get("id")
        if not resource_id:
            raise ResourceError(
                f"Cannot read ServiceBus Topic Authorization Rule {name!r} "
                f"(resource group {group!r}) ID"
            )

        state = self.read(resource_id)
        if state is None:
            raise ResourceError(
                f"ServiceBus Topic Authorization Rule {name!r} (Resource Group {group!r}) "
                "was not found after creation"
            )
        return state

    def read(self, resource_id: str) -> TopicAuthorizationRuleState | None:
        """Fetch a rule and its keys, returning None if the rule no longer exists."""
        rid, namespace, topic, name = _parse_id(resource_id)
        group = rid.resource_group
        path = authorization_rule_path(rid.subscription_id, group, namespace, topic, name)

        try:
            resp = self._client.get(path, API_VERSION)
        except ArmNotFoundError:
            logger.info(
                "ServiceBus Topic Authorization Rule %r was not found - removing from state", name
            )
            return None
        except ArmClientError as e:
            raise ResourceError(
                f"Error making Read request on Azure ServiceBus Topic Authorization Rule "
                f"{name!r}: {e}"
            ) from e

        listen, send, manage = flags_from_rights(
            (resp.get("properties") or {}).get("rights") or []
        )

        try:
            keys = self._client.post(f"{path}/listKeys", API_VERSION)
        except ArmClientError as e:
            raise ResourceError(
                f"Error making Read request on Azure ServiceBus Topic Authorization Rule "
                f"List Keys {name!r}: {e}"
            ) from e

        return TopicAuthorizationRuleState(
            id=resource_id,
            name=name,
            namespace_name=namespace,
            topic_name=topic,
            resource_group_name=group,
            listen=listen,
            send=send,
            manage=manage,
            primary_key=keys.get("primaryKey"),
            primary_connection_string=keys.get("primaryConnectionString"),
            secondary_key=keys.get("secondaryKey"),
            secondary_connection_string=keys.get("secondaryConnectionString"),
        )

    def delete(self, resource_id: str, timeouts: Timeouts | None = None) -> None:
        """Delete a rule; an already-deleted rule is not an error."""
        rid, namespace, topic, name = _parse_id(resource_id)
        group = rid.resource_group
        path = authorization_rule_path(rid.subscription_id, group, namespace, topic, name)

        self._check_cancelled(name)
        try:
            self._client.delete(path, API_VERSION, timeout=(timeouts or Timeouts()).delete)
        except ArmNotFoundError:
            logger.info("ServiceBus Topic Authorization Rule %r already deleted", name)
        except ArmTimeoutError as e:
            raise ResourceTimeoutError(
                f"Timed out deleting ServiceBus Topic Authorization Rule {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e
        except ArmClientError as e:
            raise ResourceError(
                f"Error issuing Azure ARM delete request of ServiceBus Topic Authorization "
                f"Rule {name!r} (Resource Group {group!r}): {e}"
            ) from e

    def import_(self, resource_id: str) -> TopicAuthorizationRuleState:
        """Read an existing rule by ID for adoption."""
        state = self.read(resource_id)
        if state is None:
            raise ResourceError(f"Cannot import non-existent remote object {resource_id!r}")
        return state

    def _check_cancelled(self, name: str) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise ResourceTimeoutError(
                f"Cancelled before modifying ServiceBus Topic Authorization Rule {name!r}"
            )


def _parse_id(resource_id: str) -> tuple[ResourceId, str, str, str]:
    """Parse a rule ID into its components plus namespace, topic and rule name."""
    try:
        rid = parse_resource_id(resource_id)
        return (
            rid,
            rid.require("namespaces"),
            rid.require("topics"),
            rid.require("authorizationRules"),
        )
    except ValueError as e:
        raise ResourceError(
            f"Error parsing ServiceBus Topic Authorization Rule ID: {e}"
        ) from e


def expand_authorization_rule(desired: TopicAuthorizationRuleConfig) -> dict[str, Any]:
    """Build the ARM request body for an authorization rule."""
    return {
        "name": desired.name,
        "properties": {
            "rights": [right.value for right in desired.rights],
        },
    }
