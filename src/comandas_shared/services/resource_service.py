"""
Generic CRUD client for one backend collection.
"""

from __future__ import annotations

from typing import Any, ClassVar

from comandas_shared.api_client import ApiClient


def unwrap_list(data: Any, *keys: str) -> list[dict[str, Any]]:
    """
    Return the list carried by a backend response.

    The backend answers either with a bare list or with an envelope such as
    {"data": [...]} or {"roles": [...]}.
    """
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in (*keys, "data", "content", "items"):
            value = data.get(key)
            if isinstance(value, list):
                return value
    return []


def unwrap_item(data: Any) -> dict[str, Any] | None:
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        return data["data"]
    return data if isinstance(data, dict) else None


class ResourceService:
    """
    CRUD verbs mapped to `{resource}` and `{resource}/{id}`.

    Subclasses set `resource` and `model` and add the extra endpoints their
    collection supports.
    """

    resource: ClassVar[str]
    model: ClassVar[type]

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def path(self, *parts: Any) -> str:
        return "/".join([self.resource, *(str(part) for part in parts)])

    def _to_model(self, data: Any):
        item = unwrap_item(data)
        return self.model.from_backend(item) if item is not None else None

    def _to_models(self, data: Any) -> list:
        return [self.model.from_backend(item) for item in unwrap_list(data, self.resource)]

    def get_all(self) -> list:
        return self._to_models(self.api.get(self.path()))

    def get_by_id(self, entity_id: int):
        return self._to_model(self.api.get(self.path(entity_id)))

    def create(self, payload: dict[str, Any]):
        return self._to_model(self.api.post(self.path(), payload))

    def update(self, entity_id: int, payload: dict[str, Any]):
        return self._to_model(self.api.put(self.path(entity_id), payload))

    def delete(self, entity_id: int) -> None:
        self.api.delete(self.path(entity_id))
