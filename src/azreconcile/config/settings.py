"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings.

    Every field can be supplied through an ``ARM_``-prefixed environment
    variable (e.g. ``ARM_SUBSCRIPTION_ID``).
    """

    subscription_id: str | None = Field(
        default=None,
        description="Azure subscription that resources are created in",
    )

    tenant_id: str | None = Field(
        default=None,
        description="Azure AD tenant used for service principal authentication",
    )

    client_id: str | None = Field(
        default=None,
        description="Service principal application (client) ID",
    )

    client_secret: str | None = Field(
        default=None,
        description="Service principal client secret",
        repr=False,
    )

    access_token: str | None = Field(
        default=None,
        description="Pre-acquired ARM bearer token (skips all other auth methods)",
        repr=False,
    )

    endpoint: str = Field(
        default="management.azure.com",
        description="Resource Manager host (override for sovereign clouds)",
    )

    authority_host: str = Field(
        default="login.microsoftonline.com",
        description="Azure AD authority host",
    )

    poll_interval: float = Field(
        default=10.0,
        ge=0,
        description="Seconds between polls of a long-running operation",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "ARM_",
    }
