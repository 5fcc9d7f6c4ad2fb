"""Client for the marketplace auction endpoints used by the seller desk."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, MutableMapping

import httpx

from auction_desk.config import Settings, get_settings
from auction_desk.domain.models import Auction, Bid, normalize_auction, normalize_bid
from auction_desk.errors import AuctionServiceError, RecordFormatError, StaleStateError, UnsupportedEndpointError
from auction_desk.logging import get_logger

_LOGGER = get_logger(__name__, component="auction_service_client")

TRANSITION_ENDPOINTS = frozenset({"activate-now", "pause", "resume", "cancel"})

# 404 on these means the service predates them, not that the auction is gone
UNSUPPORTED_TRANSITIONS = {
    "pause": "Pausing auctions is not available yet.",
    "resume": "Resuming auctions is not available yet.",
}

BIDS_UNAVAILABLE_MESSAGE = "Bid history is not available yet. Please ask an admin to enable /auctions/:id/bids."


@dataclass
class ServiceRequest:
    """Description of a request to send to the auction service."""

    method: str
    path: str
    params: Mapping[str, Any] | None = None
    json: Any | None = None
    headers: Mapping[str, str] | None = None


def _error_message(body: Any, status_code: int) -> str:
    if isinstance(body, Mapping):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Request failed ({status_code})"


class AuctionServiceClient:
    """Thin wrapper around httpx for the marketplace auction API.

    Every call returns the ``data`` member of the ``{success, data, error}``
    envelope or raises an :class:`AuctionServiceError` carrying the server's
    message verbatim. Nothing is retried here.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        default_headers: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client
        self._default_headers = dict(default_headers or {})
        if "User-Agent" not in self._default_headers:
            self._default_headers["User-Agent"] = self.settings.user_agent
        if "Accept" not in self._default_headers:
            self._default_headers["Accept"] = "application/json"
        self._logger = _LOGGER

    @property
    def base_url(self) -> str:
        return self.settings.api_base_url.rstrip("/")

    def _session_cookies(self) -> dict[str, str]:
        if not self.settings.session_token:
            return {}
        return {self.settings.session_cookie_name: self.settings.session_token}

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator["AuctionServiceClient"]:
        """Ensure an AsyncClient is available for the duration of the context."""

        if self._client is not None:
            for name, value in self._session_cookies().items():
                self._client.cookies.set(name, value)
            yield self
            return

        timeout = httpx.Timeout(self.settings.request_timeout_seconds)
        async with httpx.AsyncClient(timeout=timeout, cookies=self._session_cookies()) as client:
            self._client = client
            try:
                yield self
            finally:
                self._client = None

    async def request(self, request: ServiceRequest) -> httpx.Response:
        """Perform a raw request against the service."""

        if self._client is None:
            raise RuntimeError("AuctionServiceClient.lifecycle must be entered before requesting")

        url = f"{self.base_url}/{request.path.lstrip('/')}"
        headers: MutableMapping[str, str] = dict(self._default_headers)
        if request.headers:
            headers |= request.headers

        self._logger.debug(
            "service_request",
            method=request.method,
            url=url,
            has_json=request.json is not None,
            params_present=bool(request.params),
        )

        try:
            return await self._client.request(
                request.method,
                url,
                params=request.params,
                json=request.json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            self._logger.warning("service_transport_failed", url=url, error=str(exc))
            raise AuctionServiceError(f"Could not reach the auction service: {exc}") from exc

    async def request_data(
        self,
        request: ServiceRequest,
        *,
        unsupported_message: str | None = None,
        stale_state: bool = False,
    ) -> Any:
        """Perform a request and unwrap the envelope.

        ``unsupported_message`` turns a 404 into :class:`UnsupportedEndpointError`;
        ``stale_state`` maps the configured conflict codes to :class:`StaleStateError`.
        """

        response = await self.request(request)
        try:
            body = response.json()
        except ValueError:
            body = {}

        failed = not response.is_success or (isinstance(body, Mapping) and body.get("success") is False)
        if not failed:
            if isinstance(body, Mapping) and "data" in body:
                return body["data"]
            return body

        status_code = response.status_code
        message = _error_message(body, status_code)
        self._logger.warning(
            "service_request_failed",
            status_code=status_code,
            url=str(response.request.url),
            error=message,
        )
        if status_code == 404 and unsupported_message is not None:
            raise UnsupportedEndpointError(unsupported_message, status_code=status_code)
        if stale_state and status_code in self.settings.stale_state_status_codes:
            raise StaleStateError(message, status_code=status_code)
        raise AuctionServiceError(message, status_code=status_code)

    async def list_my_auctions(self, status: str | None = None) -> list[Auction]:
        params = {"status": status} if status else None
        data = await self.request_data(
            ServiceRequest(method="GET", path="/auctions/seller/my-auctions", params=params)
        )
        return self._normalize_many(data, normalize_auction, "auction")

    async def get_auction(self, auction_id: str) -> Auction:
        data = await self.request_data(ServiceRequest(method="GET", path=f"/auctions/{auction_id}"))
        if not isinstance(data, Mapping):
            raise AuctionServiceError("Auction service returned an unexpected auction payload")
        return normalize_auction(data)

    async def list_bids(self, auction_id: str) -> list[Bid]:
        data = await self.request_data(
            ServiceRequest(method="GET", path=f"/auctions/{auction_id}/bids"),
            unsupported_message=BIDS_UNAVAILABLE_MESSAGE,
        )
        if not isinstance(data, list):
            raise UnsupportedEndpointError(BIDS_UNAVAILABLE_MESSAGE)
        return self._normalize_many(data, normalize_bid, "bid")

    async def update_auction(self, auction_id: str, payload: Mapping[str, Any]) -> Any:
        return await self.request_data(
            ServiceRequest(method="PUT", path=f"/auctions/{auction_id}", json=dict(payload)),
            stale_state=True,
        )

    async def transition(self, auction_id: str, endpoint: str) -> Any:
        """Ask the service to move an auction (``activate-now``, ``pause``, ...)."""

        if endpoint not in TRANSITION_ENDPOINTS:
            raise ValueError(f"Unknown transition endpoint: {endpoint}")
        return await self.request_data(
            ServiceRequest(method="PUT", path=f"/auctions/{auction_id}/{endpoint}"),
            unsupported_message=UNSUPPORTED_TRANSITIONS.get(endpoint),
            stale_state=True,
        )

    async def create_auction(self, payload: Mapping[str, Any]) -> Auction:
        data = await self.request_data(ServiceRequest(method="POST", path="/auctions", json=dict(payload)))
        if not isinstance(data, Mapping):
            raise AuctionServiceError("Auction service returned an unexpected auction payload")
        return normalize_auction(data)

    async def list_auction_items(self) -> list[dict[str, Any]]:
        data = await self.request_data(ServiceRequest(method="GET", path="/auctions/items/my-items"))
        return list(data or [])

    def _normalize_many(self, data: Any, normalizer, kind: str) -> list:
        records = []
        for raw in data or []:
            try:
                records.append(normalizer(raw))
            except (RecordFormatError, TypeError, ValueError) as exc:
                self._logger.warning(f"{kind}_normalize_failed", error=str(exc), raw=raw)
        return records


__all__ = [
    "AuctionServiceClient",
    "BIDS_UNAVAILABLE_MESSAGE",
    "ServiceRequest",
    "TRANSITION_ENDPOINTS",
]
