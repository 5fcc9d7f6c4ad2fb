"""Countdown labels derived from wall-clock time and an auction window."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from auction_desk.domain.models import Auction
from auction_desk.domain.status import AuctionStatus

_SECOND = timedelta(seconds=1)


class Phase(str, Enum):
    """Display category of the countdown, distinct from the server status."""

    SCHEDULED = "scheduled"
    ACTIVE = "active"
    ENDED = "ended"


@dataclass(frozen=True, slots=True)
class CountdownReading:
    label: str
    phase: Phase


def _split(delta: timedelta) -> tuple[int, int, int, int]:
    total = delta // _SECOND
    days, rest = divmod(total, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, seconds = divmod(rest, 60)
    return days, hours, minutes, seconds


def compute_phase(now: datetime, start_at: datetime, end_at: datetime) -> CountdownReading:
    """Return the countdown phase and label for ``now``.

    Both window bounds are inclusive lower bounds of the next phase, so
    ``now == start_at`` is already active and ``now == end_at`` already ended.
    """

    if now < start_at:
        d, h, m, s = _split(start_at - now)
        return CountdownReading(f"Starts in {d}d {h}h {m}m {s}s", Phase.SCHEDULED)
    if now < end_at:
        d, h, m, s = _split(end_at - now)
        return CountdownReading(f"Ends in {d}d {h}h {m}m {s}s", Phase.ACTIVE)
    d, h, m, _ = _split(now - end_at)
    return CountdownReading(f"Ended {d}d {h}h {m}m ago", Phase.ENDED)


def reading_for(auction: Auction, now: datetime) -> CountdownReading:
    return compute_phase(now, auction.start_at, auction.end_at)


def expected_status_drift(status: AuctionStatus, phase: Phase) -> bool:
    """Whether the clock has crossed a boundary the server status has not caught up with."""

    if status is AuctionStatus.SCHEDULED:
        return phase is not Phase.SCHEDULED
    if status in (AuctionStatus.ACTIVE, AuctionStatus.PAUSED):
        return phase is Phase.ENDED
    return False


__all__ = ["CountdownReading", "Phase", "compute_phase", "expected_status_drift", "reading_for"]
