"""Route table handler (azurerm_route_table)."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import ValidationError

from ..arm import ArmClientError, ArmNotFoundError, ArmTimeoutError
from ..models import (
    ResourceId,
    RouteConfig,
    RouteTableConfig,
    RouteTableState,
    Timeouts,
    parse_resource_id,
)
from ..models.common import expand_tags, flatten_tags, normalize_location
from .errors import ImportAsExistsError, ResourceError, ResourceTimeoutError

if TYPE_CHECKING:
    from ..arm import ArmClient

logger = logging.getLogger(__name__)

API_VERSION = "2018-04-01"
PROVIDER = "Microsoft.Network"


def route_table_path(subscription_id: str, resource_group: str, name: str) -> str:
    """ARM path of a route table."""
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/{PROVIDER}/routeTables/{name}"
    )


class RouteTableHandler:
    """Creates, reads, updates and deletes Azure route tables."""

    resource_type: ClassVar[str] = "azurerm_route_table"
    config_model: ClassVar[type[RouteTableConfig]] = RouteTableConfig

    def __init__(self, client: ArmClient, cancel: threading.Event | None = None) -> None:
        """
        Initialize the handler.

        Args:
            client: Authenticated ARM client
            cancel: Optional event that aborts waits on long-running operations
        """
        self._client = client
        self._cancel = cancel

    def create(self, desired: RouteTableConfig) -> RouteTableState:
        """Create a route table, failing if one already exists."""
        return self.create_or_update(desired, is_new=True)

    def update(self, desired: RouteTableConfig) -> RouteTableState:
        """Update a route table in place."""
        return self.create_or_update(desired, is_new=False)

    def create_or_update(self, desired: RouteTableConfig, is_new: bool) -> RouteTableState:
        """Converge a route table to the desired state."""
        logger.info("Preparing arguments for Route Table %r creation", desired.name)

        name = desired.name
        group = desired.resource_group_name
        path = route_table_path(self._client.subscription_id, group, name)

        if is_new:
            # First check if there's one in this subscription requiring import
            try:
                existing = self._client.get(path, API_VERSION)
            except ArmNotFoundError:
                existing = {}
            except ArmClientError as e:
                raise ResourceError(
                    f"Error checking for the existence of Route Table {name!r} "
                    f"(Resource Group {group!r}): {e}"
                ) from e
            if existing.get("id"):
                raise ImportAsExistsError(self.resource_type, existing["id"])

        try:
            operation = self._client.begin_put(path, API_VERSION, expand_route_table(desired))
        except ArmClientError as e:
            raise ResourceError(
                f"Error Creating/Updating Route Table {name!r} (Resource Group {group!r}): {e}"
            ) from e

        try:
            operation.wait(desired.timeouts.for_create_update(is_new), self._cancel)
        except ArmTimeoutError as e:
            raise ResourceTimeoutError(
                f"Error waiting for completion of Route Table {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e
        except ArmClientError as e:
            raise ResourceError(
                f"Error waiting for completion of Route Table {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e

        try:
            read = self._client.get(path, API_VERSION)
        except ArmClientError as e:
            raise ResourceError(
                f"Error retrieving Route Table {name!r} (Resource Group {group!r}): {e}"
            ) from e
        resource_id = read.get("id")
        if not resource_id:
            raise ResourceError(f"Cannot read Route Table {name!r} (resource group {group!r}) ID")

        state = self.read(resource_id)
        if state is None:
            raise ResourceError(
                f"Route Table {name!r} (Resource Group {group!r}) was not found after creation"
            )
        return state

    def read(self, resource_id: str) -> RouteTableState | None:
        """Fetch a route table, returning None if it no longer exists."""
        rid, name = _parse_id(resource_id)
        group = rid.resource_group
        path = route_table_path(rid.subscription_id, group, name)

        try:
            resp = self._client.get(path, API_VERSION)
        except ArmNotFoundError:
            logger.info("Route Table %r was not found - removing from state", name)
            return None
        except ArmClientError as e:
            raise ResourceError(
                f"Error making Read request on Azure Route Table {name!r}: {e}"
            ) from e

        props = resp.get("properties") or {}
        location = resp.get("location")

        try:
            return RouteTableState(
                id=resource_id,
                name=name,
                resource_group_name=group,
                location=normalize_location(location) if location else None,
                routes=flatten_route_table_routes(props.get("routes")),
                disable_bgp_route_propagation=bool(props.get("disableBgpRoutePropagation", False)),
                subnets=flatten_route_table_subnets(props.get("subnets")),
                tags=flatten_tags(resp.get("tags")),
            )
        except (ValidationError, KeyError) as e:
            raise ResourceError(
                f"Error reading Azure Route Table {name!r}: unexpected response: {e}"
            ) from e

    def delete(self, resource_id: str, timeouts: Timeouts | None = None) -> None:
        """Delete a route table; an already-deleted table is not an error."""
        rid, name = _parse_id(resource_id)
        group = rid.resource_group
        path = route_table_path(rid.subscription_id, group, name)
        timeout = (timeouts or Timeouts()).delete

        try:
            operation = self._client.begin_delete(path, API_VERSION)
        except ArmNotFoundError:
            logger.info("Route Table %r already deleted", name)
            return
        except ArmClientError as e:
            raise ResourceError(
                f"Error deleting Route Table {name!r} (Resource Group {group!r}): {e}"
            ) from e

        try:
            operation.wait(timeout, self._cancel)
        except ArmTimeoutError as e:
            raise ResourceTimeoutError(
                f"Error waiting for deletion of Route Table {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e
        except ArmNotFoundError:
            return
        except ArmClientError as e:
            raise ResourceError(
                f"Error waiting for deletion of Route Table {name!r} "
                f"(Resource Group {group!r}): {e}"
            ) from e

    def import_(self, resource_id: str) -> RouteTableState:
        """Read an existing route table by ID for adoption."""
        state = self.read(resource_id)
        if state is None:
            raise ResourceError(f"Cannot import non-existent remote object {resource_id!r}")
        return state


def _parse_id(resource_id: str) -> tuple[ResourceId, str]:
    """Parse a route table ID into its components and the table name."""
    try:
        rid = parse_resource_id(resource_id)
        return rid, rid.require("routeTables")
    except ValueError as e:
        raise ResourceError(f"Error parsing Route Table ID: {e}") from e


def expand_route_table(desired: RouteTableConfig) -> dict[str, Any]:
    """Build the ARM request body for a route table."""
    return {
        "name": desired.name,
        "location": normalize_location(desired.location),
        "properties": {
            "routes": expand_route_table_routes(desired.routes),
            "disableBgpRoutePropagation": desired.disable_bgp_route_propagation,
        },
        "tags": expand_tags(desired.tags),
    }


def expand_route_table_routes(routes: list[RouteConfig]) -> list[dict[str, Any]]:
    """Convert route configs into ARM route objects.

    The next hop IP is only sent when set.
    """
    result = []
    for route in routes:
        properties: dict[str, Any] = {
            "addressPrefix": route.address_prefix,
            "nextHopType": route.next_hop_type.value,
        }
        if route.next_hop_in_ip_address:
            properties["nextHopIpAddress"] = route.next_hop_in_ip_address

        result.append({"name": route.name, "properties": properties})
    return result


def flatten_route_table_routes(routes: list[dict[str, Any]] | None) -> list[RouteConfig]:
    """Convert ARM route objects back into route configs."""
    result = []
    for route in routes or []:
        props = route.get("properties") or {}
        result.append(
            RouteConfig(
                name=route["name"],
                address_prefix=props.get("addressPrefix"),
                next_hop_type=props.get("nextHopType"),
                next_hop_in_ip_address=props.get("nextHopIpAddress"),
            )
        )
    return result


def flatten_route_table_subnets(subnets: list[dict[str, Any]] | None) -> list[str]:
    """Collect the IDs of subnets attached to a route table."""
    return [subnet["id"] for subnet in subnets or [] if subnet.get("id")]
