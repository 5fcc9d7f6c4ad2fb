"""Auction record model."""

from .models import (
    Auction,
    Bid,
    BidderRef,
    ItemRef,
    invariant_violations,
    is_editable,
    normalize_auction,
    normalize_bid,
    parse_instant,
)
from .money import format_amount, parse_amount
from .status import AuctionStatus, parse_status

__all__ = [
    "Auction",
    "AuctionStatus",
    "Bid",
    "BidderRef",
    "ItemRef",
    "format_amount",
    "invariant_violations",
    "is_editable",
    "normalize_auction",
    "normalize_bid",
    "parse_amount",
    "parse_instant",
    "parse_status",
]
