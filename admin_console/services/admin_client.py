from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from admin_console.core.config import Settings
from admin_console.schemas.common import EntityBase, ListPage, MutationResult, PaginationMeta
from admin_console.schemas.kyc import KycDocument
from admin_console.schemas.properties import Property
from admin_console.schemas.subscriptions import Subscription
from admin_console.schemas.users import User

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class AdminServiceError(Exception):
    """Base error for requests the admin service rejected or never answered."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AdminServiceUnavailableError(AdminServiceError):
    """Raised on transport failures, timeouts and 5xx responses."""


class AdminServiceNotFoundError(AdminServiceError):
    """Raised when the requested entity does not exist."""


class AdminServiceConflictError(AdminServiceError):
    """Raised when the service refuses a transition from the entity's current state."""


class AdminServiceForbiddenError(AdminServiceError):
    """Raised when the console token is missing or lacks permissions."""


class AdminServiceValidationError(AdminServiceError):
    """Raised when the service rejects the request payload."""


@dataclass(slots=True, frozen=True)
class Resource:
    path: str
    items_key: str
    model: type[EntityBase]
    detail_key: str | None = None


RESOURCES: dict[str, Resource] = {
    "properties": Resource(path="properties", items_key="properties", model=Property),
    "subscriptions": Resource(path="subscriptions", items_key="subscriptions", model=Subscription),
    "users": Resource(path="users", items_key="users", model=User, detail_key="user"),
    "kyc": Resource(path="moderation/kyc", items_key="documents", model=KycDocument),
}


def get_resource(collection: str) -> Resource:
    try:
        return RESOURCES[collection]
    except KeyError as exc:
        raise LookupError(f"unknown collection: {collection}") from exc


def extract_error_message(error: BaseException | None, fallback: str = GENERIC_ERROR_MESSAGE) -> str:
    if isinstance(error, AdminServiceError) and error.message:
        return error.message
    if error is not None and str(error):
        return str(error)
    return fallback


class AdminClient:
    def __init__(
        self,
        base_url: str,
        *,
        prefix: str = "/admin/dashboard",
        token: str | None = None,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
        self.timeout_seconds = timeout_seconds
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, *, client: httpx.AsyncClient | None = None) -> AdminClient:
        return cls(
            settings.api_base_url,
            prefix=settings.api_prefix,
            token=settings.api_token,
            timeout_seconds=settings.request_timeout_seconds,
            client=client,
        )

    async def list(self, collection: str, params: dict[str, Any]) -> ListPage[Any]:
        resource = get_resource(collection)
        body = await self._request("GET", resource.path, params=params)
        data = _unwrap(body)

        if isinstance(data, list):
            raw_items: Any = data
            raw_pagination = None
            summary = None
        else:
            raw_items = data.get(resource.items_key)
            if raw_items is None:
                raw_items = data.get("items", [])
            raw_pagination = data.get("pagination")
            summary = data.get("summary")

        items = [resource.model.model_validate(item) for item in raw_items or []]
        if isinstance(raw_pagination, dict):
            return ListPage(
                items=items,
                pagination=PaginationMeta.model_validate(raw_pagination),
                summary=summary,
            )

        page = int(params.get("page", 1))
        page_size = int(params.get("limit", len(items) or 1))
        return ListPage(
            items=items,
            pagination=PaginationMeta.approximate(page=page, page_size=page_size, item_count=len(items)),
            pagination_approximated=True,
            summary=summary,
        )

    async def get(self, collection: str, entity_id: str) -> EntityBase:
        resource = get_resource(collection)
        body = await self._request("GET", f"{resource.path}/{entity_id}")
        data = _unwrap(body)
        if resource.detail_key and isinstance(data, dict) and isinstance(data.get(resource.detail_key), dict):
            data = data[resource.detail_key]
        return resource.model.model_validate(data)

    async def overview(self) -> dict[str, Any]:
        """Counts of KYC documents and listings waiting for moderation."""
        body = await self._request("GET", "moderation/overview")
        data = _unwrap(body)
        return data if isinstance(data, dict) else {}

    async def mutate(
        self,
        collection: str,
        entity_id: str,
        *,
        method: str,
        path_suffix: str,
        payload: dict[str, Any],
    ) -> MutationResult:
        resource = get_resource(collection)
        path = f"{resource.path}/{entity_id}"
        if path_suffix:
            path = f"{path}/{path_suffix}"
        body = await self._request(method, path, json=payload)
        if not isinstance(body, dict):
            return MutationResult(success=True)
        data = body.get("data")
        return MutationResult(
            success=True,
            message=_body_message(body),
            data=data if isinstance(data, dict) else None,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{self.prefix}/{path}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, params=params, json=json, headers=self.headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.request(method, url, params=params, json=json, headers=self.headers)
        except httpx.TimeoutException as exc:
            raise AdminServiceUnavailableError(f"Request timed out after {self.timeout_seconds:g}s") from exc
        except httpx.HTTPError as exc:
            raise AdminServiceUnavailableError(str(exc) or "Admin service is unreachable") from exc

        logger.debug("admin request method=%s path=%s status=%s", method, path, response.status_code)
        body = _json_or_none(response)

        if response.is_error:
            message = _body_message(body) or f"Request failed with status code {response.status_code}"
            raise _error_for_status(response.status_code, message)
        if isinstance(body, dict) and body.get("success") is False:
            message = _body_message(body) or GENERIC_ERROR_MESSAGE
            raise AdminServiceError(message, status_code=response.status_code)
        return body


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and "data" in body:
        return body["data"] if body["data"] is not None else {}
    return body if body is not None else {}


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _body_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for key in ("message", "detail"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _error_for_status(status_code: int, message: str) -> AdminServiceError:
    if status_code in {401, 403}:
        return AdminServiceForbiddenError(message, status_code=status_code)
    if status_code == 404:
        return AdminServiceNotFoundError(message, status_code=status_code)
    if status_code == 409:
        return AdminServiceConflictError(message, status_code=status_code)
    if status_code in {400, 422}:
        return AdminServiceValidationError(message, status_code=status_code)
    if status_code >= 500:
        return AdminServiceUnavailableError(message, status_code=status_code)
    return AdminServiceError(message, status_code=status_code)
