"""Alert channels: destinations (email, Slack, webhooks...) for alerts."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from lacework_client.api.base import CrudService, ResourceModel


class AlertChannel(ResourceModel):
    intg_guid: str | None = Field(default=None, alias="intgGuid")
    name: str
    type: str
    enabled: int = 1
    is_org: int | None = Field(default=None, alias="isOrg")
    state: dict[str, Any] | None = None
    data: dict[str, Any] = {}
    created_or_updated_time: str | None = Field(default=None, alias="createdOrUpdatedTime")
    created_or_updated_by: str | None = Field(default=None, alias="createdOrUpdatedBy")


class AlertChannelsService(CrudService[AlertChannel]):
    resource = "AlertChannels"
    model = AlertChannel
    read_only = frozenset(
        {"intg_guid", "is_org", "state", "created_or_updated_time", "created_or_updated_by"}
    )

    def test(self, guid: str) -> None:
        """Ask the API to send a test alert through the channel."""
        self._client.request_decoder("POST", f"{self._item_path(guid)}/test")
