"""Handler protocol for reconcilable resource kinds."""

from typing import ClassVar, Protocol, TypeVar

from pydantic import BaseModel

from ..models import Timeouts

ConfigT = TypeVar("ConfigT", bound=BaseModel, contravariant=True)
StateT = TypeVar("StateT", bound=BaseModel, covariant=True)


class ResourceHandler(Protocol[ConfigT, StateT]):
    """Interface for resource kinds driven by a reconciliation engine.

    This protocol defines the contract that every resource handler must
    follow, so any engine (or the bundled CLI) can drive it:
    - create / update converge the remote resource to a desired state
    - read refreshes local state from the remote resource
    - delete removes the remote resource

    Resource IDs are full ARM ids; handlers parse their composite keys
    (resource group, parent names, resource name) out of them.
    """

    resource_type: ClassVar[str]
    config_model: ClassVar[type[BaseModel]]

    def create(self, desired: ConfigT) -> StateT:
        """Create a new resource.

        Args:
            desired: The desired state.

        Returns:
            The observed state after creation.

        Raises:
            ImportAsExistsError: If the resource already exists remotely.
            ResourceError: If any API call fails.
            ResourceTimeoutError: If the create does not finish in time.
        """
        ...

    def read(self, resource_id: str) -> StateT | None:
        """Refresh the state of a resource.

        Args:
            resource_id: The ARM resource id.

        Returns:
            The observed state, or None if the resource no longer exists.
        """
        ...

    def update(self, desired: ConfigT) -> StateT:
        """Update an existing resource to the desired state.

        Uses the same request as create, without the existence check.
        """
        ...

    def delete(self, resource_id: str, timeouts: Timeouts | None = None) -> None:
        """Delete a resource by ID.

        Args:
            resource_id: The ARM resource id.
            timeouts: Overrides the default delete timeout.

        Note:
            Does not raise an error if the resource doesn't exist.
        """
        ...

    def import_(self, resource_id: str) -> StateT:
        """Read an existing resource so it can be adopted.

        Raises:
            ResourceError: If the resource does not exist.
        """
        ...
