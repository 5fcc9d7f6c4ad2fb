"""Closed set of auction lifecycle statuses."""

from __future__ import annotations

from enum import Enum


class AuctionStatus(str, Enum):
    """Server-authoritative lifecycle state of an auction.

    ``scheduled -> active -> (paused <-> active) -> ended | cancelled`` and
    ``ended -> settled``. Clock-driven moves happen on the server; the desk only
    observes them by re-fetching.
    """

    SCHEDULED = "scheduled"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"
    CANCELLED = "cancelled"
    SETTLED = "settled"

    @property
    def is_final(self) -> bool:
        """True once the record no longer accepts price or schedule changes."""
        return self in _FINAL

    def __str__(self) -> str:
        return self.value


_FINAL = frozenset({AuctionStatus.ENDED, AuctionStatus.CANCELLED, AuctionStatus.SETTLED})


def parse_status(value: AuctionStatus | str | None) -> AuctionStatus | None:
    """Map loosely formatted status strings onto :class:`AuctionStatus`.

    Surrounding whitespace and case are ignored; anything else unknown yields
    ``None`` so callers can decide on a fallback.
    """

    if value is None:
        return None
    if isinstance(value, AuctionStatus):
        return value
    normalised = str(value).strip().lower()
    try:
        return AuctionStatus(normalised)
    except ValueError:
        return None


__all__ = ["AuctionStatus", "parse_status"]
