from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

import httpx
import pytest

from auction_desk.config import Settings

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
BASE_URL = "https://market.test/api"


def auction_payload(
    auction_id: str = "a-1",
    *,
    status: str = "scheduled",
    start_at: datetime = T0 + timedelta(hours=1),
    end_at: datetime = T0 + timedelta(days=2),
    **overrides: Any,
) -> dict[str, Any]:
    payload = {
        "auctionId": auction_id,
        "auction_items": {"title": "Harbor at Dusk", "primary_image": "https://img.test/harbor.jpg"},
        "startPrice": 1000,
        "reservePrice": 1500,
        "minIncrement": 50,
        "startAt": start_at.isoformat(),
        "endAt": end_at.isoformat(),
        "status": status,
    }
    payload.update(overrides)
    return payload


def bid_payload(bid_id: str, amount: float, created_at: datetime, bidder_id: str = "u-1") -> dict[str, Any]:
    return {
        "bidId": bid_id,
        "auctionId": "a-1",
        "bidderUserId": bidder_id,
        "bidder": {"firstName": "Ana", "lastName": "Reyes", "profilePicture": None},
        "amount": amount,
        "created_at": created_at.isoformat(),
    }


class RecordingTransport:
    """MockTransport wrapper that records every request it serves."""

    def __init__(self, handler: Callable[[httpx.Request], Awaitable[httpx.Response]]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return await self.handler(request)

    def calls(self) -> list[tuple[str, str]]:
        return [(request.method, request.url.path) for request in self.requests]

    def body(self, index: int) -> Any:
        content = self.requests[index].content
        return json.loads(content.decode()) if content else None


@pytest.fixture()
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, auction_timezone="UTC", session_token="sess-123")
