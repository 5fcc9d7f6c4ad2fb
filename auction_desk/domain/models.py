"""Auction and bid records as seen by the seller dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from typing import Any, Mapping

from auction_desk.domain.money import parse_amount
from auction_desk.domain.status import AuctionStatus, parse_status
from auction_desk.errors import RecordFormatError

ANONYMOUS_BIDDER = "Anonymous"


def parse_instant(value: Any, *, default_tz: tzinfo = timezone.utc) -> datetime | None:
    """Parse an ISO-8601 value into an aware datetime.

    Naive values are interpreted in ``default_tz``. Returns ``None`` for blanks
    and anything that is not a valid date.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


@dataclass(frozen=True, slots=True)
class ItemRef:
    """Display data of the auctioned item."""

    title: str
    primary_image: str | None = None


@dataclass(frozen=True, slots=True)
class BidderRef:
    bidder_id: str | None
    display_name: str
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class Auction:
    """Normalized auction record owned by the seller subsystem."""

    auction_id: str
    item: ItemRef
    start_price: Decimal
    reserve_price: Decimal | None
    min_increment: Decimal
    start_at: datetime
    end_at: datetime
    status: AuctionStatus
    participants_count: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Bid:
    bid_id: str
    auction_id: str
    bidder: BidderRef
    amount: Decimal
    created_at: datetime


def is_editable(auction: Auction) -> bool:
    return auction.status is not AuctionStatus.CANCELLED


def invariant_violations(auction: Auction) -> list[str]:
    """List the record invariants a server-side auction breaks."""

    problems: list[str] = []
    if auction.start_price < 0:
        problems.append("start_price is negative")
    if auction.reserve_price is not None and auction.reserve_price < auction.start_price:
        problems.append("reserve_price is below start_price")
    if auction.min_increment < 0:
        problems.append("min_increment is negative")
    if auction.end_at <= auction.start_at:
        problems.append("end_at is not after start_at")
    return problems


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _required_amount(raw: Mapping[str, Any], *keys: str) -> Decimal:
    amount = parse_amount(_first(raw, *keys))
    if amount is None:
        raise RecordFormatError(f"Missing or invalid amount field: {keys[0]}")
    return amount


def _required_instant(raw: Mapping[str, Any], *keys: str) -> datetime:
    instant = parse_instant(_first(raw, *keys))
    if instant is None:
        raise RecordFormatError(f"Missing or invalid timestamp field: {keys[0]}")
    return instant


def normalize_auction(raw: Mapping[str, Any]) -> Auction:
    """Normalize an auction payload from the marketplace API."""

    auction_id = _first(raw, "auctionId", "auction_id", "id")
    if auction_id is None:
        raise RecordFormatError("Missing mandatory auction field: auctionId")

    status = parse_status(raw.get("status"))
    if status is None:
        raise RecordFormatError(f"Unknown auction status: {raw.get('status')!r}")

    item_data = _first(raw, "auction_items", "auctionItem", "item") or {}
    if not isinstance(item_data, Mapping):
        item_data = {}
    item = ItemRef(
        title=str(item_data.get("title") or "Untitled"),
        primary_image=item_data.get("primary_image") or item_data.get("primaryImage"),
    )

    participants = _first(raw, "participantsCount", "participants_count")

    return Auction(
        auction_id=str(auction_id),
        item=item,
        start_price=_required_amount(raw, "startPrice", "start_price"),
        reserve_price=parse_amount(_first(raw, "reservePrice", "reserve_price")),
        min_increment=parse_amount(_first(raw, "minIncrement", "min_increment")) or Decimal(0),
        start_at=_required_instant(raw, "startAt", "start_at"),
        end_at=_required_instant(raw, "endAt", "end_at"),
        status=status,
        participants_count=int(participants) if participants is not None else None,
        raw=dict(raw),
    )


def _bidder_from(raw: Mapping[str, Any]) -> BidderRef:
    bidder = raw.get("bidder") if isinstance(raw.get("bidder"), Mapping) else {}
    names = [bidder.get("firstName"), bidder.get("lastName")]
    display_name = " ".join(str(part) for part in names if part) or ANONYMOUS_BIDDER
    bidder_id = _first(raw, "bidderUserId", "bidder_user_id") or bidder.get("userId") or bidder.get("id")
    return BidderRef(
        bidder_id=str(bidder_id) if bidder_id is not None else None,
        display_name=display_name,
        avatar_url=bidder.get("profilePicture") or bidder.get("avatar"),
    )


def normalize_bid(raw: Mapping[str, Any]) -> Bid:
    """Normalize a bid history entry."""

    bid_id = _first(raw, "bidId", "bid_id", "id")
    if bid_id is None:
        raise RecordFormatError("Missing mandatory bid field: bidId")

    return Bid(
        bid_id=str(bid_id),
        auction_id=str(_first(raw, "auctionId", "auction_id") or ""),
        bidder=_bidder_from(raw),
        amount=_required_amount(raw, "amount"),
        created_at=_required_instant(raw, "created_at", "createdAt"),
    )


__all__ = [
    "ANONYMOUS_BIDDER",
    "Auction",
    "Bid",
    "BidderRef",
    "ItemRef",
    "invariant_violations",
    "is_editable",
    "normalize_auction",
    "normalize_bid",
    "parse_instant",
]
