"""Alert rules: which events are routed to which alert channels."""

from __future__ import annotations

from enum import IntEnum

from pydantic import Field

from lacework_client.api.base import CrudService, ResourceModel


class AlertRuleSeverity(IntEnum):
    CRITICAL = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4
    INFO = 5

    @classmethod
    def from_names(cls, names: list[str]) -> list[AlertRuleSeverity]:
        """Map severity names (case-insensitive) to their API values.

        Raises:
            ValueError: On an unknown severity name.
        """
        try:
            return [cls[name.strip().upper()] for name in names]
        except KeyError as e:
            raise ValueError(f"unknown alert rule severity: {e.args[0]}") from e


class AlertRuleFilter(ResourceModel):
    name: str
    enabled: int = 1
    description: str | None = None
    severity: list[int] = []
    resource_groups: list[str] = Field(default=[], alias="resourceGroups")
    event_category: list[str] = Field(default=[], alias="eventCategory")
    created_or_updated_time: str | None = Field(default=None, alias="createdOrUpdatedTime")
    created_or_updated_by: str | None = Field(default=None, alias="createdOrUpdatedBy")


class AlertRule(ResourceModel):
    mc_guid: str | None = Field(default=None, alias="mcGuid")
    type: str = "Event"
    channels: list[str] = Field(default=[], alias="intgGuidList")
    filters: AlertRuleFilter


class AlertRulesService(CrudService[AlertRule]):
    resource = "AlertRules"
    model = AlertRule
    read_only = frozenset({"mc_guid"})
