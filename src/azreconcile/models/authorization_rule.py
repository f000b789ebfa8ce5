"""Service Bus topic authorization rule desired and observed state."""

import re
from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from .common import validate_resource_group_name
from .timeouts import Timeouts

RULE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][-._a-zA-Z0-9]{0,48}([a-zA-Z0-9])?$")
NAMESPACE_NAME_PATTERN = re.compile(r"^[a-zA-Z][-a-zA-Z0-9]{4,48}[a-zA-Z0-9]$")
TOPIC_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]([-._~a-zA-Z0-9]{0,258}[a-zA-Z0-9])?$")


class AccessRights(str, Enum):
    """Rights a shared access authorization rule can grant."""

    LISTEN = "Listen"
    SEND = "Send"
    MANAGE = "Manage"


class TopicAuthorizationRuleConfig(BaseModel):
    """Desired state of an authorization rule on a Service Bus topic."""

    name: str
    namespace_name: str
    topic_name: str
    resource_group_name: str
    listen: bool = False
    send: bool = False
    manage: bool = False
    timeouts: Timeouts = Field(default_factory=Timeouts)

    model_config = {"extra": "forbid"}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the rule name against Service Bus naming rules."""
        if not RULE_NAME_PATTERN.match(v):
            raise ValueError(
                "The name can contain only letters, numbers, periods, hyphens and "
                "underscores. The name must start and end with a letter or number and "
                "be less than 50 characters long."
            )
        return v

    @field_validator("namespace_name")
    @classmethod
    def validate_namespace_name(cls, v: str) -> str:
        """Validate the namespace name against Service Bus naming rules."""
        if not NAMESPACE_NAME_PATTERN.match(v):
            raise ValueError(
                "The namespace can contain only letters, numbers, and hyphens. The "
                "namespace must start with a letter, and it must end with a letter or "
                "number and be between 6 and 50 characters long."
            )
        return v

    @field_validator("topic_name")
    @classmethod
    def validate_topic_name(cls, v: str) -> str:
        """Validate the topic name against Service Bus naming rules."""
        if not TOPIC_NAME_PATTERN.match(v):
            raise ValueError(
                "The topic name can contain only letters, numbers, periods, hyphens, "
                "tildes and underscores. The topic must start and end with a letter or "
                "number and be less than 260 characters long."
            )
        return v

    @field_validator("resource_group_name")
    @classmethod
    def validate_resource_group(cls, v: str) -> str:
        """Validate the resource group name."""
        return validate_resource_group_name(v)

    @model_validator(mode="after")
    def validate_rights(self) -> "TopicAuthorizationRuleConfig":
        """Require at least one right, and Listen + Send whenever Manage is granted."""
        if not (self.listen or self.send or self.manage):
            raise ValueError("One of the `listen`, `send` or `manage` properties needs to be set")
        if self.manage and not (self.listen and self.send):
            raise ValueError("if `manage` is set both `listen` and `send` must be set to true too")
        return self

    @property
    def rights(self) -> list[AccessRights]:
        """Granted rights in Listen, Send, Manage order."""
        return rights_from_flags(self.listen, self.send, self.manage)

    @classmethod
    def from_rights(
        cls,
        rights: Iterable[AccessRights | str],
        **fields: object,
    ) -> "TopicAuthorizationRuleConfig":
        """Build a config from a collection of rights instead of three flags."""
        listen, send, manage = flags_from_rights(rights)
        return cls(listen=listen, send=send, manage=manage, **fields)


class TopicAuthorizationRuleState(BaseModel):
    """Observed state of a topic authorization rule, including its keys."""

    id: str
    name: str
    namespace_name: str
    topic_name: str
    resource_group_name: str
    listen: bool = False
    send: bool = False
    manage: bool = False

    primary_key: str | None = Field(default=None, repr=False)
    primary_connection_string: str | None = Field(default=None, repr=False)
    secondary_key: str | None = Field(default=None, repr=False)
    secondary_connection_string: str | None = Field(default=None, repr=False)

    @property
    def rights(self) -> list[AccessRights]:
        """Granted rights in Listen, Send, Manage order."""
        return rights_from_flags(self.listen, self.send, self.manage)


def rights_from_flags(listen: bool, send: bool, manage: bool) -> list[AccessRights]:
    """Convert the three right flags into the ARM rights list."""
    rights = []
    if listen:
        rights.append(AccessRights.LISTEN)
    if send:
        rights.append(AccessRights.SEND)
    if manage:
        rights.append(AccessRights.MANAGE)
    return rights


def flags_from_rights(rights: Iterable[AccessRights | str]) -> tuple[bool, bool, bool]:
    """Convert an ARM rights list into (listen, send, manage).

    Unknown rights are ignored; matching ignores case.
    """
    granted = {str(getattr(r, "value", r)).lower() for r in rights}
    return (
        AccessRights.LISTEN.value.lower() in granted,
        AccessRights.SEND.value.lower() in granted,
        AccessRights.MANAGE.value.lower() in granted,
    )
