"""Async HTTP client for the HRMS data service.

Every answer is an ``{status, message, data}`` envelope. Successful calls
return ``data``; error envelopes are raised again as the matching
``AppException`` subclass, so client code catches the same exception
types as the service raises. Anything that is not an envelope
(connection errors, timeouts, 5xx pages, non-JSON bodies) becomes a
``RemoteFailure``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic_core import to_jsonable_python

from hrms.common.exceptions import ERROR_TYPES, AppException
from hrms.config import settings

logger = logging.getLogger(__name__)


class RemoteFailure(Exception):
    """The data service could not be reached or gave no usable answer."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ) -> None:
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class ApiClient:
    """Thin envelope-aware wrapper around ``httpx.AsyncClient``.

    ``transport`` lets tests route requests straight into an ASGI app.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or settings.API_BASE_URL
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.API_TIMEOUT_SECONDS if timeout is None else timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── Verbs ───────────────────────────────────────────────────────

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body=body)

    async def put(self, path: str, body: Any = None, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, body=body, params=params)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    # ── Core ────────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        """Send one request and return the envelope's ``data``."""
        if params:
            params = {
                k: to_jsonable_python(v) for k, v in params.items() if v is not None
            }
        kwargs: dict[str, Any] = {"params": params or None}
        if body is not None:
            kwargs["json"] = to_jsonable_python(body)

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise RemoteFailure(f"Request to {path} timed out.", retryable=True) from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise RemoteFailure(
                f"Unable to reach the HRMS service at {self.base_url}.", retryable=True,
            ) from exc

        return self._unwrap(method, path, response)

    @staticmethod
    def _unwrap(method: str, path: str, response: httpx.Response) -> Any:
        status_code = response.status_code
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict) or "status" not in payload:
            retryable = status_code >= 500 or status_code == 429
            log = logger.error if status_code >= 500 else logger.warning
            log("%s %s → %s without an envelope", method, path, status_code)
            raise RemoteFailure(
                f"Unexpected response from the HRMS service (HTTP {status_code}).",
                status_code=status_code,
                retryable=retryable,
            )

        if payload["status"] is True and status_code < 400:
            return payload.get("data")

        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        if status_code >= 500:
            logger.error("%s %s → %s: %s", method, path, status_code, payload.get("message"))
            raise RemoteFailure(
                payload.get("message") or f"HRMS service error (HTTP {status_code}).",
                status_code=status_code,
                retryable=True,
            )

        exc_class = ERROR_TYPES.get(data.get("type", ""), AppException)
        raise exc_class.from_payload(
            status_code, payload.get("message") or "Request failed.", data,
        )
