"""
HTTP client for the remote restaurant REST API.

Every resource service goes through `ApiClient`, which attaches the stored
bearer token and turns transport and HTTP failures into `ApiError`.
"""

from __future__ import annotations

from collections.abc import Callable
from http import HTTPStatus
from typing import Any

import requests

from comandas_shared.logging_config import get_logger

logger = get_logger(__name__)

# Status used for failures where no HTTP response was received
NETWORK_ERROR_STATUS = 0


class ApiError(Exception):
    """Raised when the remote API cannot be reached or answers with an error."""

    def __init__(
        self,
        message: str,
        status: int = NETWORK_ERROR_STATUS,
        payload: Any = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload
        self.url = url

    @property
    def is_network_error(self) -> bool:
        return self.status == NETWORK_ERROR_STATUS

    @property
    def is_unauthorized(self) -> bool:
        return self.status == HTTPStatus.UNAUTHORIZED

    @property
    def is_forbidden(self) -> bool:
        return self.status == HTTPStatus.FORBIDDEN

    @property
    def is_not_found(self) -> bool:
        return self.status == HTTPStatus.NOT_FOUND

    @property
    def is_validation_error(self) -> bool:
        return self.status == HTTPStatus.BAD_REQUEST

    @property
    def backend_message(self) -> str | None:
        """Message provided by the backend body, if any."""
        return extract_backend_message(self.payload)

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


def as_http_status(code: int, default: HTTPStatus = HTTPStatus.BAD_GATEWAY) -> HTTPStatus:
    """Map a backend status to the one this app answers with."""
    try:
        return HTTPStatus(code)
    except ValueError:
        return default


def extract_backend_message(payload: Any) -> str | None:
    if isinstance(payload, dict):
        for key in ("message", "mensaje", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:200]
    return None


class ApiClient:
    """
    Thin JSON wrapper around `requests.Session`.

    Args:
        base_url: Root of the backend API (e.g. http://localhost:8080/api)
        token_provider: Callable returning the current bearer token or None
        timeout: Seconds before a call is abandoned
        session: Optional pre-built `requests.Session`
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], str | None] | None = None,
        timeout: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        payload: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Perform a call and return the decoded JSON body.

        Returns None for empty bodies (204 or zero-length 200).

        Raises:
            ApiError: status 0 on transport failure, the HTTP status otherwise
        """
        url = self.url_for(endpoint)
        logger.debug(f"{method.upper()} {url}")

        try:
            response = self.session.request(
                method.upper(),
                url,
                json=payload,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error communicating with backend API at {url}: {e}")
            raise ApiError(
                "No se puede conectar con el servidor", NETWORK_ERROR_STATUS, url=url
            ) from e

        body = self._decode(response)

        if not response.ok:
            message = extract_backend_message(body) or response.reason or "Ha ocurrido un error"
            logger.warning(f"{method.upper()} {url} -> {response.status_code}: {message}")
            raise ApiError(message, response.status_code, payload=body, url=url)

        return body

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if response.status_code == HTTPStatus.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, payload: Any = None) -> Any:
        return self.request("POST", endpoint, payload=payload)

    def put(self, endpoint: str, payload: Any = None) -> Any:
        return self.request("PUT", endpoint, payload=payload)

    def patch(self, endpoint: str, payload: Any = None) -> Any:
        return self.request("PATCH", endpoint, payload=payload)

    def delete(self, endpoint: str) -> Any:
        return self.request("DELETE", endpoint)
