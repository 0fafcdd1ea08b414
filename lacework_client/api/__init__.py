"""Typed wrappers for the v2 resources.

Example:
    >>> rule = client.v2.alert_rules.get("ACME_1234")
    >>> rule.filters.severity
    [1, 2]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lacework_client.api.alert_channels import AlertChannel, AlertChannelsService
from lacework_client.api.alert_rules import (
    AlertRule,
    AlertRuleFilter,
    AlertRuleSeverity,
    AlertRulesService,
)
from lacework_client.api.base import CrudService, ListResponse, Response
from lacework_client.api.resource_groups import (
    RESOURCE_GROUP_TYPES,
    ResourceGroup,
    ResourceGroupsService,
)

if TYPE_CHECKING:
    from lacework_client.http.client import Client


class V2Services:
    """All v2 services bound to one client."""

    def __init__(self, client: Client) -> None:
        self.alert_rules = AlertRulesService(client)
        self.alert_channels = AlertChannelsService(client)
        self.resource_groups = ResourceGroupsService(client)


__all__ = [
    "RESOURCE_GROUP_TYPES",
    "AlertChannel",
    "AlertChannelsService",
    "AlertRule",
    "AlertRuleFilter",
    "AlertRuleSeverity",
    "AlertRulesService",
    "CrudService",
    "ListResponse",
    "ResourceGroup",
    "ResourceGroupsService",
    "Response",
    "V2Services",
]
