from __future__ import annotations

from datetime import timedelta

import pytest

from auction_desk.domain.status import AuctionStatus
from auction_desk.lifecycle.countdown import Phase, compute_phase, expected_status_drift

from .conftest import T0

START = T0
END = T0 + timedelta(days=3)


def test_starts_in_one_hour() -> None:
    reading = compute_phase(T0, T0 + timedelta(hours=1), T0 + timedelta(days=1))

    assert reading.phase is Phase.SCHEDULED
    assert reading.label == "Starts in 0d 1h 0m 0s"


def test_active_label_counts_down_to_end() -> None:
    now = START + timedelta(seconds=10)
    end = now + timedelta(days=1, hours=2, minutes=3, seconds=4)

    reading = compute_phase(now, START, end)

    assert reading.phase is Phase.ACTIVE
    assert reading.label == "Ends in 1d 2h 3m 4s"


def test_ended_label_omits_seconds() -> None:
    now = END + timedelta(days=2, hours=5, minutes=7, seconds=59)

    reading = compute_phase(now, START, END)

    assert reading.phase is Phase.ENDED
    assert reading.label == "Ended 2d 5h 7m ago"


def test_partial_seconds_are_floored() -> None:
    now = START - timedelta(seconds=1, milliseconds=900)

    assert compute_phase(now, START, END).label == "Starts in 0d 0h 0m 1s"


def test_boundaries_resolve_to_later_phase() -> None:
    assert compute_phase(START, START, END).phase is Phase.ACTIVE
    assert compute_phase(START, START, END).label == "Ends in 3d 0h 0m 0s"
    assert compute_phase(END, START, END).phase is Phase.ENDED
    assert compute_phase(END, START, END).label == "Ended 0d 0h 0m ago"


@pytest.mark.parametrize(
    ("offset", "phase"),
    [
        (timedelta(days=-400), Phase.SCHEDULED),
        (timedelta(microseconds=-1), Phase.SCHEDULED),
        (timedelta(0), Phase.ACTIVE),
        (timedelta(days=1, hours=23), Phase.ACTIVE),
        (timedelta(days=3, microseconds=-1), Phase.ACTIVE),
        (timedelta(days=3), Phase.ENDED),
        (timedelta(days=90), Phase.ENDED),
    ],
)
def test_phase_partitions_time(offset: timedelta, phase: Phase) -> None:
    assert compute_phase(START + offset, START, END).phase is phase


def test_same_inputs_give_same_reading() -> None:
    now = START + timedelta(hours=5, seconds=17)

    assert compute_phase(now, START, END) == compute_phase(now, START, END)


@pytest.mark.parametrize(
    ("status", "phase", "drift"),
    [
        (AuctionStatus.SCHEDULED, Phase.SCHEDULED, False),
        (AuctionStatus.SCHEDULED, Phase.ACTIVE, True),
        (AuctionStatus.ACTIVE, Phase.ACTIVE, False),
        (AuctionStatus.ACTIVE, Phase.ENDED, True),
        (AuctionStatus.PAUSED, Phase.ENDED, True),
        (AuctionStatus.ENDED, Phase.ENDED, False),
        (AuctionStatus.CANCELLED, Phase.ACTIVE, False),
    ],
)
def test_expected_status_drift(status: AuctionStatus, phase: Phase, drift: bool) -> None:
    assert expected_status_drift(status, phase) is drift
