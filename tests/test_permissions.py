from __future__ import annotations

import pytest

from auction_desk.domain.status import AuctionStatus
from auction_desk.lifecycle.permissions import EditPolicy, SellerAction, actions_for

A = SellerAction


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (AuctionStatus.SCHEDULED, (A.EDIT, A.ACTIVATE_NOW)),
        (AuctionStatus.ACTIVE, (A.VIEW_BIDS, A.PAUSE, A.CANCEL, A.EDIT)),
        (AuctionStatus.PAUSED, (A.VIEW_BIDS, A.RESUME, A.CANCEL, A.EDIT)),
        (AuctionStatus.ENDED, (A.VIEW_RESULTS,)),
        (AuctionStatus.SETTLED, (A.VIEW_RESULTS,)),
        (AuctionStatus.CANCELLED, (A.VIEW_BIDS,)),
    ],
)
def test_actions_per_status(status: AuctionStatus, expected: tuple[SellerAction, ...]) -> None:
    assert actions_for(status) == expected


def test_running_auctions_lose_edit_when_policy_disallows() -> None:
    policy = EditPolicy(edit_running_auctions=False)

    assert actions_for("active", policy) == (A.VIEW_BIDS, A.PAUSE, A.CANCEL)
    assert actions_for("paused", policy) == (A.VIEW_BIDS, A.RESUME, A.CANCEL)
    assert actions_for("scheduled", policy) == (A.EDIT, A.ACTIVATE_NOW)


def test_cancelled_never_offers_edit() -> None:
    for policy in (EditPolicy(True), EditPolicy(False)):
        assert actions_for("cancelled", policy) == (A.VIEW_BIDS,)
        assert A.EDIT not in actions_for(AuctionStatus.CANCELLED, policy)


def test_loose_status_strings_are_normalised() -> None:
    assert actions_for("  Active ") == actions_for(AuctionStatus.ACTIVE)
    assert actions_for("SCHEDULED") == (A.EDIT, A.ACTIVATE_NOW)


@pytest.mark.parametrize("status", ["", "   ", "archived", "draft", "canceled", "endedd", "None", "\n", None])
def test_unknown_status_falls_back_to_view_bids(status) -> None:
    assert actions_for(status) == (A.VIEW_BIDS,)


def test_no_status_string_yields_an_empty_action_set() -> None:
    candidates = [s.value for s in AuctionStatus] + ["", "x", "ACTIVE", "paused ", "Settled", "?", "ended\t"]
    for status in candidates:
        assert actions_for(status), status


def test_labels_match_dashboard_buttons() -> None:
    assert [action.label for action in actions_for("scheduled")] == ["Edit", "Activate Now"]
    assert A.VIEW_BIDS.is_transition is False
    assert A.CANCEL.is_transition is True
