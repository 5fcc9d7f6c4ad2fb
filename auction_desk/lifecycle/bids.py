"""Deterministic bid ranking."""

from __future__ import annotations

from typing import Iterable, Sequence

from auction_desk.domain.models import Auction, Bid


def _rank_key(bid: Bid):
    # amount descending, earlier bid first on ties
    return (-bid.amount, bid.created_at)


def rank(bids: Iterable[Bid]) -> list[Bid]:
    """Return a new list of bids, highest amount first.

    The sort is stable, so ranking an already ranked list returns it unchanged.
    """

    return sorted(bids, key=_rank_key)


def top_bid(bids: Iterable[Bid]) -> Bid | None:
    ranked = rank(bids)
    return ranked[0] if ranked else None


def rank_by_bidder(bids: Iterable[Bid]) -> list[Bid]:
    """Rank each bidder's best bid only.

    A bidder's best bid is their highest amount, the earliest one on ties.
    Bids without a bidder id cannot be grouped and are ranked individually.
    """

    best: dict[str, Bid] = {}
    ungrouped: list[Bid] = []
    for bid in bids:
        bidder_id = bid.bidder.bidder_id
        if bidder_id is None:
            ungrouped.append(bid)
            continue
        current = best.get(bidder_id)
        if current is None or _rank_key(bid) < _rank_key(current):
            best[bidder_id] = bid
    return rank([*best.values(), *ungrouped])


def reserve_met(auction: Auction, bids: Sequence[Bid]) -> bool:
    leader = top_bid(bids)
    if leader is None:
        return False
    if auction.reserve_price is None:
        return True
    return leader.amount >= auction.reserve_price


__all__ = ["rank", "rank_by_bidder", "reserve_met", "top_bid"]
