"""Loading of desired-state YAML documents."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from ..handlers import RESOURCE_HANDLERS

logger = logging.getLogger(__name__)


class DesiredStateError(Exception):
    """A desired-state file could not be loaded."""

    pass


@dataclass
class DesiredState:
    """A validated desired-state document."""

    resource_type: str
    config: BaseModel
    path: Path | None = None


def load_desired_state(path: Path) -> DesiredState:
    """Load and validate a desired-state YAML file.

    The document holds a ``type`` key naming the resource type and the
    resource's attributes alongside it::

        type: azurerm_route_table
        name: rt1
        location: westus
        resource_group_name: acme
        routes:
          - name: r1
            address_prefix: 10.0.0.0/16
            next_hop_type: VnetLocal

    Args:
        path: Path to the YAML file

    Returns:
        The validated desired state

    Raises:
        DesiredStateError: If the file is missing, unparseable, empty, names an
            unknown type, or fails validation
    """
    if not path.exists():
        raise DesiredStateError(f"Desired state file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DesiredStateError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise DesiredStateError(f"{path} is empty")

    state = parse_desired_state(data)
    state.path = path
    logger.info("Loaded %s desired state from %s", state.resource_type, path)
    return state


def parse_desired_state(data: Any) -> DesiredState:
    """Validate an already-parsed desired-state document."""
    if not isinstance(data, dict):
        raise DesiredStateError("Desired state must be a mapping")

    attributes = dict(data)
    resource_type = attributes.pop("type", None)
    if not resource_type:
        raise DesiredStateError("Desired state is missing the 'type' key")

    handler_cls = RESOURCE_HANDLERS.get(resource_type)
    if handler_cls is None:
        raise DesiredStateError(
            f"Unknown resource type '{resource_type}'. "
            f"Must be one of: {', '.join(sorted(RESOURCE_HANDLERS))}"
        )

    try:
        config = handler_cls.config_model(**attributes)
    except ValidationError as e:
        raise DesiredStateError(f"Invalid {resource_type}: {e}") from e

    return DesiredState(resource_type=resource_type, config=config)
