"""Shared plumbing for v2 resource services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from lacework_client.errors import RequestConstructionError

if TYPE_CHECKING:
    from lacework_client.http.client import Client

T = TypeVar("T", bound=BaseModel)


class ResourceModel(BaseModel):
    """Base for API resources: camelCase on the wire, unknown fields kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Response(BaseModel, Generic[T]):
    """``{"data": {...}}`` envelope around a single resource."""

    data: T


class ListResponse(BaseModel, Generic[T]):
    """``{"data": [...]}`` envelope around a resource list."""

    model_config = ConfigDict(extra="allow")

    data: list[T] = []


class CrudService(Generic[T]):
    """List/get/create/update/delete for one v2 resource collection.

    Subclasses set ``resource`` (the collection path), ``model`` and the
    server-managed fields that must not be sent back on update.
    """

    resource: ClassVar[str]
    model: ClassVar[type[BaseModel]]
    read_only: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, client: Client) -> None:
        self._client = client

    def _item_path(self, guid: str) -> str:
        if not guid:
            raise RequestConstructionError(f"specify a guid for {self.resource}")
        return f"{self.resource}/{guid}"

    def list(self) -> list[T]:
        response = self._client.request_decoder(
            "GET", self.resource, model=ListResponse[self.model]  # type: ignore[name-defined]
        )
        return response.data

    def get(self, guid: str) -> T:
        response = self._client.request_decoder(
            "GET", self._item_path(guid), model=Response[self.model]  # type: ignore[name-defined]
        )
        return response.data

    def create(self, item: T) -> T:
        response = self._client.request_encoder_decoder(
            "POST", self.resource, self._payload(item), Response[self.model]  # type: ignore[name-defined]
        )
        return response.data

    def update(self, guid: str, item: T) -> T:
        response = self._client.request_encoder_decoder(
            "PATCH", self._item_path(guid), self._payload(item), Response[self.model]  # type: ignore[name-defined]
        )
        return response.data

    def delete(self, guid: str) -> None:
        self._client.request_decoder("DELETE", self._item_path(guid))

    def _payload(self, item: T) -> dict[str, Any]:
        return item.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude=set(self.read_only),
        )
