"""CLI commands that drive resource handlers against Azure."""

import logging
from pathlib import Path

from ..arm import ArmAuthError, ArmClient, ArmClientError
from ..config import Settings
from ..handlers import RESOURCE_HANDLERS, ImportAsExistsError, ResourceError
from ..models import Timeouts
from ..services import DesiredStateError, load_desired_state
from .output import error, header, info, print_state, success

logger = logging.getLogger(__name__)


def _connect(settings: Settings) -> ArmClient | None:
    """Authenticate with Azure, reporting failures to the user."""
    header("Authenticating with Azure...")
    try:
        return ArmClient.from_environment(settings)
    except ArmAuthError as e:
        error(f"Azure authentication failed: {e}")
        info(
            "Set ARM_SUBSCRIPTION_ID and either ARM_ACCESS_TOKEN, a service principal, "
            "or run 'az login'"
        )
        return None
    except ArmClientError as e:
        error(f"Azure client error: {e}")
        return None


def _check_resource_type(resource_type: str) -> bool:
    if resource_type in RESOURCE_HANDLERS:
        return True
    error(f"Unknown resource type '{resource_type}'")
    info(f"Supported types: {', '.join(sorted(RESOURCE_HANDLERS))}")
    return False


def run_apply(
    path: Path,
    settings: Settings,
    is_new: bool,
    show_secrets: bool = False,
) -> int:
    """Create or update a resource from a desired-state file.

    Args:
        path: Desired-state YAML file
        settings: Application settings
        is_new: True to create (with an existence check), False to update
        show_secrets: Print keys and connection strings in clear text

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        desired = load_desired_state(path)
    except DesiredStateError as e:
        error(str(e))
        return 1

    client = _connect(settings)
    if client is None:
        return 1

    verb = "Creating" if is_new else "Updating"
    with client:
        handler = RESOURCE_HANDLERS[desired.resource_type](client)
        header(f"{verb} {desired.resource_type} {desired.config.name!r}...")
        try:
            if is_new:
                state = handler.create(desired.config)
            else:
                state = handler.update(desired.config)
        except ImportAsExistsError as e:
            error(str(e))
            info(f"Run 'azreconcile import {e.resource_type} {e.resource_id}' to adopt it")
            return 1
        except ResourceError as e:
            error(str(e))
            return 1
        except KeyboardInterrupt:
            error("Interrupted; the remote operation may still be running")
            return 1

    success(f"{'Created' if is_new else 'Updated'}: {state.id}")
    print_state(state, show_secrets)
    return 0


def run_read(
    resource_type: str,
    resource_id: str,
    settings: Settings,
    show_secrets: bool = False,
    require: bool = False,
) -> int:
    """Read a resource by ID and print its state.

    Args:
        resource_type: Registered resource type name
        resource_id: ARM resource ID
        settings: Application settings
        show_secrets: Print keys and connection strings in clear text
        require: Treat a missing resource as an error (import semantics)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not _check_resource_type(resource_type):
        return 1

    client = _connect(settings)
    if client is None:
        return 1

    with client:
        handler = RESOURCE_HANDLERS[resource_type](client)
        try:
            state = handler.import_(resource_id) if require else handler.read(resource_id)
        except ResourceError as e:
            error(str(e))
            return 1

    if state is None:
        info(f"{resource_type} {resource_id} no longer exists")
        return 0

    success(f"{'Imported' if require else 'Read'}: {state.id}")
    print_state(state, show_secrets)
    return 0


def run_delete(
    resource_type: str,
    resource_id: str,
    settings: Settings,
    timeout: float | None = None,
) -> int:
    """Delete a resource by ID.

    Args:
        timeout: Seconds to wait for the delete; the handler default when None

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not _check_resource_type(resource_type):
        return 1

    client = _connect(settings)
    if client is None:
        return 1

    with client:
        handler = RESOURCE_HANDLERS[resource_type](client)
        header(f"Deleting {resource_type} {resource_id}...")
        try:
            handler.delete(resource_id, Timeouts(delete=timeout) if timeout else None)
        except ResourceError as e:
            error(str(e))
            return 1
        except KeyboardInterrupt:
            error("Interrupted; the remote operation may still be running")
            return 1

    success(f"Deleted: {resource_id}")
    return 0
