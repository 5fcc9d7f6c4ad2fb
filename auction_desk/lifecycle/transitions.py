"""Seller-initiated auction transitions.

The controller never writes a status locally. Each action is one request to
the auction service followed by a re-fetch of the auction, because the
server can also move auctions on its own clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from auction_desk.api.service import AuctionServiceClient
from auction_desk.domain.models import Auction, is_editable
from auction_desk.domain.status import AuctionStatus
from auction_desk.errors import AuctionServiceError, InvalidTransitionError, StaleStateError
from auction_desk.lifecycle.edit_validator import EditForm, validate_create, validate_edit
from auction_desk.lifecycle.permissions import EditPolicy, SellerAction
from auction_desk.logging import get_logger


@dataclass(frozen=True, slots=True)
class TransitionRule:
    action: SellerAction
    sources: frozenset[AuctionStatus]
    target: AuctionStatus | None  # None keeps the current status
    endpoint: str | None  # None means PUT /auctions/:id


TRANSITIONS: dict[SellerAction, TransitionRule] = {
    SellerAction.ACTIVATE_NOW: TransitionRule(
        SellerAction.ACTIVATE_NOW, frozenset({AuctionStatus.SCHEDULED}), AuctionStatus.ACTIVE, "activate-now"
    ),
    SellerAction.PAUSE: TransitionRule(
        SellerAction.PAUSE, frozenset({AuctionStatus.ACTIVE}), AuctionStatus.PAUSED, "pause"
    ),
    SellerAction.RESUME: TransitionRule(
        SellerAction.RESUME, frozenset({AuctionStatus.PAUSED}), AuctionStatus.ACTIVE, "resume"
    ),
    SellerAction.CANCEL: TransitionRule(
        SellerAction.CANCEL,
        frozenset({AuctionStatus.ACTIVE, AuctionStatus.PAUSED}),
        AuctionStatus.CANCELLED,
        "cancel",
    ),
    SellerAction.EDIT: TransitionRule(
        SellerAction.EDIT,
        frozenset({AuctionStatus.SCHEDULED, AuctionStatus.ACTIVE, AuctionStatus.PAUSED}),
        None,
        None,
    ),
}


@dataclass(frozen=True, slots=True)
class TransitionPlan:
    action: SellerAction
    source: AuctionStatus
    target: AuctionStatus
    endpoint: str | None


def plan_transition(
    status: AuctionStatus,
    action: SellerAction,
    policy: EditPolicy | None = None,
) -> TransitionPlan:
    """Resolve ``action`` from ``status`` against the transition table.

    Raises:
        InvalidTransitionError: when the action is not a transition or the
            current status does not permit it.
    """

    policy = policy or EditPolicy()
    rule = TRANSITIONS.get(action)
    if rule is None:
        raise InvalidTransitionError(f"'{action.label}' does not change the auction")
    if status not in rule.sources:
        raise InvalidTransitionError(f"Cannot {action.label.lower()} an auction that is {status.value}")
    if (
        action is SellerAction.EDIT
        and status is not AuctionStatus.SCHEDULED
        and not policy.edit_running_auctions
    ):
        raise InvalidTransitionError(f"Editing is disabled for {status.value} auctions")
    return TransitionPlan(
        action=action,
        source=status,
        target=rule.target or status,
        endpoint=rule.endpoint,
    )


class TransitionController:
    """Issue seller transitions against the auction service."""

    def __init__(
        self,
        *,
        client: AuctionServiceClient,
        policy: EditPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.client = client
        self.policy = policy or EditPolicy.from_settings(client.settings)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._logger = get_logger(__name__, component="transition_controller")

    @property
    def tz(self):
        return self.client.settings.tz

    async def perform(self, auction: Auction, action: SellerAction) -> Auction:
        """Run a status transition and return the re-fetched auction."""

        if action is SellerAction.EDIT:
            raise InvalidTransitionError("Use submit_edit to change prices or schedule")
        plan = plan_transition(auction.status, action, self.policy)
        if plan.endpoint is None:
            raise InvalidTransitionError(f"'{action.label}' has no transition endpoint")

        try:
            await self.client.transition(auction.auction_id, plan.endpoint)
        except StaleStateError as exc:
            await self._attach_fresh(exc, auction.auction_id)
            raise

        self._logger.info(
            "transition_applied",
            auction_id=auction.auction_id,
            action=action.value,
            source=plan.source.value,
            expected=plan.target.value,
        )
        return await self.client.get_auction(auction.auction_id)

    async def submit_edit(self, auction: Auction, form: EditForm) -> Auction:
        """Validate and send a price/schedule edit, then re-fetch.

        Validation failures raise :class:`EditValidationError` before any
        request is made.
        """

        if not is_editable(auction):
            raise InvalidTransitionError("Cancelled auctions cannot be edited")
        plan_transition(auction.status, SellerAction.EDIT, self.policy)
        validated = validate_edit(form, self.tz)

        try:
            await self.client.update_auction(auction.auction_id, validated.to_payload())
        except StaleStateError as exc:
            await self._attach_fresh(exc, auction.auction_id)
            raise

        self._logger.info("edit_applied", auction_id=auction.auction_id, status=auction.status.value)
        return await self.client.get_auction(auction.auction_id)

    async def create(self, auction_item_id: str, form: EditForm) -> Auction:
        """Quick-create an auction for one of the seller's auction items."""

        validated = validate_create(form, self.tz, now=self._clock())
        payload = {"auctionItemId": auction_item_id, **validated.to_payload()}
        created = await self.client.create_auction(payload)
        self._logger.info("auction_created", auction_id=created.auction_id, status=created.status.value)
        return created

    async def _attach_fresh(self, exc: StaleStateError, auction_id: str) -> None:
        self._logger.info("stale_state_refetch", auction_id=auction_id, error=exc.message)
        try:
            exc.auction = await self.client.get_auction(auction_id)
        except AuctionServiceError as refetch_exc:
            # the rejection is what the seller needs to see
            self._logger.warning("stale_state_refetch_failed", auction_id=auction_id, error=refetch_exc.message)


__all__ = [
    "TRANSITIONS",
    "TransitionController",
    "TransitionPlan",
    "TransitionRule",
    "plan_transition",
]
