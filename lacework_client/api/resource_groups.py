"""Resource groups: named sets of cloud resources that alert rules scope to."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from lacework_client.api.base import CrudService, ResourceModel

RESOURCE_GROUP_TYPES = ("AWS", "AZURE", "CONTAINER", "GCP", "LW_ACCOUNT", "MACHINE")


class ResourceGroup(ResourceModel):
    resource_guid: str | None = Field(default=None, alias="resourceGuid")
    resource_name: str = Field(alias="resourceName")
    resource_type: str = Field(alias="resourceType")
    enabled: int = 1
    is_default: int | None = Field(default=None, alias="isDefault")
    props: dict[str, Any] = {}


class ResourceGroupsService(CrudService[ResourceGroup]):
    resource = "ResourceGroups"
    model = ResourceGroup
    read_only = frozenset({"resource_guid", "is_default"})
