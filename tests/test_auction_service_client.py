from __future__ import annotations

import httpx
import pytest

from auction_desk.api.service import BIDS_UNAVAILABLE_MESSAGE, AuctionServiceClient, ServiceRequest
from auction_desk.config import Settings
from auction_desk.errors import AuctionServiceError, StaleStateError, UnsupportedEndpointError

from .conftest import T0, RecordingTransport, auction_payload, bid_payload


@pytest.mark.asyncio
async def test_request_builds_url_headers_and_session_cookie(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "data": []})

    recorder = RecordingTransport(handler)
    async with httpx.AsyncClient(transport=recorder.transport) as client:
        service = AuctionServiceClient(settings=settings, client=client)
        async with service.lifecycle():
            result = await service.list_my_auctions(status="active")

    request = recorder.requests[0]
    assert result == []
    assert str(request.url) == "https://market.test/api/auctions/seller/my-auctions?status=active"
    assert request.headers["user-agent"] == settings.user_agent
    assert request.headers["accept"] == "application/json"
    assert "session=sess-123" in request.headers["cookie"]


@pytest.mark.asyncio
async def test_list_without_filter_skips_bad_rows(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"success": True, "data": [auction_payload("a-1"), {"auctionId": "broken"}, auction_payload("a-2")]},
        )

    recorder = RecordingTransport(handler)
    async with httpx.AsyncClient(transport=recorder.transport) as client:
        service = AuctionServiceClient(settings=settings, client=client)
        auctions = await service.list_my_auctions()

    assert recorder.requests[0].url.query == b""
    assert [auction.auction_id for auction in auctions] == ["a-1", "a-2"]


@pytest.mark.asyncio
async def test_get_auction_carries_participants(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/auctions/a-9"
        return httpx.Response(200, json={"success": True, "data": auction_payload("a-9", participantsCount=3)})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        auction = await AuctionServiceClient(settings=settings, client=client).get_auction("a-9")

    assert auction.participants_count == 3


@pytest.mark.asyncio
async def test_server_error_message_is_passed_through(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": "Auction already has bids"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AuctionServiceClient(settings=settings, client=client)
        with pytest.raises(AuctionServiceError) as info:
            await service.transition("a-1", "activate-now")

    assert info.value.message == "Auction already has bids"
    assert not isinstance(info.value, StaleStateError)


@pytest.mark.asyncio
async def test_non_json_failure_gets_generic_message(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AuctionServiceClient(settings=settings, client=client)
        with pytest.raises(AuctionServiceError, match=r"Request failed \(502\)"):
            await service.get_auction("a-1")


@pytest.mark.asyncio
async def test_missing_bids_endpoint_is_unsupported(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"success": False, "error": "Cannot GET"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AuctionServiceClient(settings=settings, client=client)
        with pytest.raises(UnsupportedEndpointError) as info:
            await service.list_bids("a-1")
        with pytest.raises(UnsupportedEndpointError):
            await service.transition("a-1", "pause")
        with pytest.raises(AuctionServiceError) as cancel_info:
            await service.transition("a-1", "cancel")

    assert info.value.message == BIDS_UNAVAILABLE_MESSAGE
    assert not isinstance(cancel_info.value, UnsupportedEndpointError)
    assert cancel_info.value.message == "Cannot GET"


@pytest.mark.asyncio
async def test_list_bids_normalizes_history(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "data": [bid_payload("b-1", 500, T0)]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        bids = await AuctionServiceClient(settings=settings, client=client).list_bids("a-1")

    assert [bid.bid_id for bid in bids] == ["b-1"]


@pytest.mark.asyncio
async def test_conflict_on_transition_is_stale_state(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"success": False, "message": "Auction is not active"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AuctionServiceClient(settings=settings, client=client)
        with pytest.raises(StaleStateError, match="Auction is not active") as info:
            await service.transition("a-1", "pause")

    assert info.value.status_code == 409


@pytest.mark.asyncio
async def test_transport_failure_becomes_service_error(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AuctionServiceClient(settings=settings, client=client)
        with pytest.raises(AuctionServiceError, match="Could not reach the auction service"):
            await service.get_auction("a-1")


@pytest.mark.asyncio
async def test_request_requires_lifecycle(settings: Settings) -> None:
    service = AuctionServiceClient(settings=settings)

    with pytest.raises(RuntimeError):
        await service.request(ServiceRequest(method="GET", path="/auctions/a-1"))


@pytest.mark.asyncio
async def test_unknown_transition_endpoint_is_refused(settings: Settings) -> None:
    service = AuctionServiceClient(settings=settings)

    with pytest.raises(ValueError):
        await service.transition("a-1", "delete")


@pytest.mark.asyncio
async def test_list_auction_items_returns_raw_items(settings: Settings) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/auctions/items/my-items"
        return httpx.Response(200, json={"success": True, "data": [{"auctionItemId": "item-7", "title": "Lamp"}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        items = await AuctionServiceClient(settings=settings, client=client).list_auction_items()

    assert items == [{"auctionItemId": "item-7", "title": "Lamp"}]
