"""Seller actions exposed for each auction status."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from auction_desk.domain.status import AuctionStatus, parse_status


class SellerAction(str, Enum):
    EDIT = "edit"
    ACTIVATE_NOW = "activate-now"
    PAUSE = "pause"
    RESUME = "resume"
    CANCEL = "cancel"
    VIEW_BIDS = "view-bids"
    VIEW_RESULTS = "view-results"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_transition(self) -> bool:
        """True for actions that ask the server to change the auction."""
        return self not in (SellerAction.VIEW_BIDS, SellerAction.VIEW_RESULTS)


_LABELS = {
    SellerAction.EDIT: "Edit",
    SellerAction.ACTIVATE_NOW: "Activate Now",
    SellerAction.PAUSE: "Pause",
    SellerAction.RESUME: "Resume",
    SellerAction.CANCEL: "Cancel",
    SellerAction.VIEW_BIDS: "View Bids",
    SellerAction.VIEW_RESULTS: "View Results",
}


@dataclass(frozen=True, slots=True)
class EditPolicy:
    """Which statuses beyond ``scheduled`` may be edited.

    The service has the final say on which fields change after activation;
    this only controls whether the Edit action is offered.
    """

    edit_running_auctions: bool = True

    @classmethod
    def from_settings(cls, settings) -> "EditPolicy":
        return cls(edit_running_auctions=settings.edit_running_auctions)


_BASE_ACTIONS: dict[AuctionStatus, tuple[SellerAction, ...]] = {
    AuctionStatus.SCHEDULED: (SellerAction.EDIT, SellerAction.ACTIVATE_NOW),
    AuctionStatus.ACTIVE: (SellerAction.VIEW_BIDS, SellerAction.PAUSE, SellerAction.CANCEL),
    AuctionStatus.PAUSED: (SellerAction.VIEW_BIDS, SellerAction.RESUME, SellerAction.CANCEL),
    AuctionStatus.ENDED: (SellerAction.VIEW_RESULTS,),
    AuctionStatus.SETTLED: (SellerAction.VIEW_RESULTS,),
    AuctionStatus.CANCELLED: (SellerAction.VIEW_BIDS,),
}

_RUNNING = frozenset({AuctionStatus.ACTIVE, AuctionStatus.PAUSED})

FALLBACK_ACTIONS: tuple[SellerAction, ...] = (SellerAction.VIEW_BIDS,)


def actions_for(status: AuctionStatus | str | None, policy: EditPolicy | None = None) -> tuple[SellerAction, ...]:
    """Return the ordered actions the dashboard offers for ``status``.

    Unknown statuses get :data:`FALLBACK_ACTIONS` so the seller always has
    something to do. Callers must evaluate this per render; results are not
    cached anywhere.
    """

    policy = policy or EditPolicy()
    parsed = parse_status(status)
    if parsed is None:
        return FALLBACK_ACTIONS

    actions = _BASE_ACTIONS[parsed]
    if parsed in _RUNNING and policy.edit_running_auctions:
        actions = (*actions, SellerAction.EDIT)
    if parsed is AuctionStatus.CANCELLED:
        actions = tuple(action for action in actions if action is not SellerAction.EDIT)
    return actions


def is_allowed(status: AuctionStatus | str | None, action: SellerAction, policy: EditPolicy | None = None) -> bool:
    return action in actions_for(status, policy)


__all__ = ["EditPolicy", "FALLBACK_ACTIONS", "SellerAction", "actions_for", "is_allowed"]
