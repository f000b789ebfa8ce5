"""Tests for ARM resource ID parsing."""

import pytest

from azreconcile.models import ResourceId, parse_resource_id

ROUTE_TABLE_ID = (
    "/subscriptions/sub-123/resourceGroups/acme-rg"
    "/providers/Microsoft.Network/routeTables/rt1"
)
RULE_ID = (
    "/subscriptions/sub-123/resourceGroups/acme-rg/providers/Microsoft.ServiceBus"
    "/namespaces/acme-bus/topics/orders/authorizationRules/reader"
)


class TestParseResourceId:
    """Tests for parse_resource_id."""

    def test_parses_route_table_id(self):
        """Route table IDs expose subscription, group, provider and name."""
        rid = parse_resource_id(ROUTE_TABLE_ID)

        assert rid.subscription_id == "sub-123"
        assert rid.resource_group == "acme-rg"
        assert rid.provider == "Microsoft.Network"
        assert rid.path == {"routeTables": "rt1"}

    def test_parses_nested_authorization_rule_id(self):
        """Nested IDs keep every parent segment in path."""
        rid = parse_resource_id(RULE_ID)

        assert rid.path == {
            "namespaces": "acme-bus",
            "topics": "orders",
            "authorizationRules": "reader",
        }

    def test_lowercase_resource_groups_key(self):
        """The lower-case resourcegroups key is accepted."""
        rid = parse_resource_id("/subscriptions/s/resourcegroups/g/providers/P/things/t")
        assert rid.resource_group == "g"

    def test_trailing_slash_ignored(self):
        """A trailing slash does not change the result."""
        assert parse_resource_id(ROUTE_TABLE_ID + "/") == parse_resource_id(ROUTE_TABLE_ID)

    def test_odd_segment_count_rejected(self):
        """IDs with an unpaired segment are rejected."""
        with pytest.raises(ValueError, match="not divisible by 2"):
            parse_resource_id("/subscriptions/s/resourceGroups")

    def test_empty_id_rejected(self):
        """Empty IDs are rejected."""
        with pytest.raises(ValueError, match="cannot be empty"):
            parse_resource_id("")

    def test_missing_subscription_rejected(self):
        """IDs without a subscription are rejected."""
        with pytest.raises(ValueError, match="No subscription ID"):
            parse_resource_id("/resourceGroups/g/providers/P/things/t")

    def test_missing_resource_group_rejected(self):
        """IDs without a resource group are rejected."""
        with pytest.raises(ValueError, match="No resource group"):
            parse_resource_id("/subscriptions/s/providers/P/things/t")

    def test_empty_segment_rejected(self):
        """Empty keys (double slashes) are rejected."""
        with pytest.raises(ValueError, match="cannot be empty strings"):
            parse_resource_id("/subscriptions/s/resourceGroups/g//x")


class TestResourceIdRequire:
    """Tests for ResourceId.require."""

    def test_returns_present_segment(self):
        """require returns the value of a present segment."""
        rid = ResourceId(subscription_id="s", resource_group="g", path={"topics": "t"})
        assert rid.require("topics") == "t"

    def test_raises_for_missing_segment(self):
        """require names the missing segment."""
        rid = ResourceId(subscription_id="s", resource_group="g")
        with pytest.raises(ValueError, match="'routeTables'"):
            rid.require("routeTables")
