"""Errors reported by resource handlers to their caller."""


class ResourceError(Exception):
    """A create, read, update or delete call failed.

    The message names the operation and resource; the underlying
    ArmClientError (if any) is chained as ``__cause__``.
    """

    pass


class ImportAsExistsError(ResourceError):
    """The resource being created already exists and must be imported instead."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"A resource with the ID {resource_id!r} already exists - to be managed via "
            "this provider this resource needs to be imported into the State. Please see "
            f"the resource documentation for {resource_type!r} for more information."
        )


class ResourceTimeoutError(ResourceError):
    """Waiting for a long-running operation timed out or was cancelled."""

    pass
