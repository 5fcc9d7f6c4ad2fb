"""Transient state of the seller's auction list view."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from auction_desk.api.service import AuctionServiceClient
from auction_desk.config import Settings
from auction_desk.domain.models import Auction, Bid, invariant_violations
from auction_desk.domain.status import AuctionStatus
from auction_desk.errors import (
    AuctionDeskError,
    EditValidationError,
    StaleStateError,
    UnsupportedEndpointError,
)
from auction_desk.lifecycle.bids import rank, rank_by_bidder, reserve_met, top_bid
from auction_desk.lifecycle.countdown import CountdownReading, expected_status_drift, reading_for
from auction_desk.lifecycle.edit_validator import EditForm
from auction_desk.lifecycle.permissions import EditPolicy, SellerAction, actions_for, is_allowed
from auction_desk.lifecycle.transitions import TransitionController
from auction_desk.logging import get_logger

# auctions whose bid history is fetched alongside each list refresh
_BIDDING = frozenset({AuctionStatus.ACTIVE, AuctionStatus.PAUSED})


@dataclass(frozen=True, slots=True)
class Notice:
    """A message for the seller: a toast, or an inline error when ``field`` is set.

    Inline errors of the quick-create form carry ``auction_id=None``.
    """

    message: str
    level: str = "error"
    auction_id: str | None = None
    field: str | None = None


@dataclass(frozen=True, slots=True)
class AuctionRow:
    auction: Auction
    reading: CountdownReading | None
    actions: tuple[SellerAction, ...]
    participants_count: int | None
    top_bid: Bid | None
    reserve_met: bool | None = None


@dataclass(frozen=True, slots=True)
class AuctionResults:
    """Outcome of a finished auction: each bidder's best bid, ranked."""

    auction_id: str
    standings: tuple[Bid, ...]
    top_bid: Bid | None
    reserve_met: bool


class DashboardView:
    """Owns everything the auction list shows while it is on screen.

    The view only reads server state. Writes go through the
    :class:`TransitionController` and come back as a re-fetched record.
    List fetches carry a generation token so a response that lands after the
    view was hidden, or after a newer fetch started, is dropped. Each applied
    list schedules participant counts and bid history per auction; those
    complete in any order and are dropped if the view was hidden meanwhile.
    """

    def __init__(
        self,
        *,
        client: AuctionServiceClient,
        controller: TransitionController | None = None,
        settings: Settings | None = None,
        status_filter: str | None = None,
    ) -> None:
        self.client = client
        self.settings = settings or client.settings
        self.controller = controller or TransitionController(client=client)
        self.policy = EditPolicy.from_settings(self.settings)
        self.status_filter = status_filter if status_filter is not None else self.settings.default_status_filter
        self.notices: list[Notice] = []

        self._auctions: dict[str, Auction] = {}
        self._readings: dict[str, CountdownReading] = {}
        self._bids: dict[str, list[Bid]] = {}
        self._results: dict[str, AuctionResults] = {}
        self._participants: dict[str, int] = {}
        self._bids_supported = True
        self._generation = 0
        self._mount = 0
        self._visible = False
        self._refresh_in_flight = 0
        self._tasks: set[asyncio.Task] = set()
        self._logger = get_logger(__name__, component="dashboard_view")

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh_in_flight > 0

    @property
    def auctions(self) -> list[Auction]:
        return list(self._auctions.values())

    def auction(self, auction_id: str) -> Auction | None:
        return self._auctions.get(auction_id)

    def show(self) -> None:
        self._mount += 1
        self._visible = True
        self._logger.debug("view_shown", mount=self._mount)

    async def hide(self) -> None:
        """Stop applying results and drop outstanding background fetches."""

        self._visible = False
        self._mount += 1
        self._generation += 1
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._logger.debug("view_hidden", cancelled=len(tasks))

    # -- background fetches -------------------------------------------------

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def schedule_refresh(self) -> asyncio.Task:
        """Fire-and-forget list refresh."""
        return self._spawn(self.refresh())

    def schedule_participants(self, auction_id: str) -> asyncio.Task:
        return self._spawn(self.load_participants(auction_id))

    def schedule_bids(self, auction_id: str) -> asyncio.Task:
        return self._spawn(self.load_bids(auction_id, notify=False))

    async def wait_for_fetches(self) -> None:
        """Wait until every scheduled background fetch has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def refresh(self) -> bool:
        """Fetch the seller's auctions; returns whether the result was applied."""

        self._generation += 1
        generation = self._generation
        self._refresh_in_flight += 1
        try:
            auctions = await self.client.list_my_auctions(self.status_filter)
        except AuctionDeskError as exc:
            if generation == self._generation and self._visible:
                self._notify(exc.message)
            return False
        finally:
            self._refresh_in_flight -= 1

        if generation != self._generation or not self._visible:
            self._logger.info("stale_list_discarded", generation=generation, current=self._generation)
            return False

        self._auctions = {auction.auction_id: auction for auction in auctions}
        self._readings = {key: value for key, value in self._readings.items() if key in self._auctions}
        for auction in auctions:
            problems = invariant_violations(auction)
            if problems:
                self._logger.warning("auction_invariant_violated", auction_id=auction.auction_id, problems=problems)
        self._logger.info("auction_list_refreshed", count=len(auctions), status_filter=self.status_filter)

        for auction in auctions:
            self.schedule_participants(auction.auction_id)
            if self._bids_supported and auction.status in _BIDDING:
                self.schedule_bids(auction.auction_id)
        return True

    async def set_status_filter(self, status: str | None) -> bool:
        self.status_filter = status or None
        return await self.refresh()

    async def load_participants(self, auction_id: str) -> int | None:
        mount = self._mount
        try:
            auction = await self.client.get_auction(auction_id)
        except AuctionDeskError as exc:
            self._logger.warning("participants_fetch_failed", auction_id=auction_id, error=exc.message)
            return None
        if mount != self._mount:
            return None
        if auction.participants_count is not None:
            self._participants[auction_id] = auction.participants_count
        return auction.participants_count

    async def load_bids(self, auction_id: str, *, notify: bool = True) -> list[Bid] | None:
        """Fetch and rank an auction's bid history into the cache.

        Returns ``None`` when the history could not be loaded. Background
        loads (``notify=False``) only log; a seller-initiated load also shows
        a notice.
        """

        mount = self._mount
        try:
            bids = await self.client.list_bids(auction_id)
        except UnsupportedEndpointError as exc:
            self._bids_supported = False
            if notify and mount == self._mount:
                self._notify(exc.message, level="info", auction_id=auction_id)
            else:
                self._logger.info("bid_history_unavailable", auction_id=auction_id)
            return None
        except AuctionDeskError as exc:
            if notify and mount == self._mount:
                self._notify(exc.message, auction_id=auction_id)
            else:
                self._logger.warning("bid_history_fetch_failed", auction_id=auction_id, error=exc.message)
            return None
        self._bids_supported = True
        ranked = rank(bids)
        if mount != self._mount:
            return None
        self._bids[auction_id] = ranked
        return ranked

    async def load_results(self, auction_id: str) -> AuctionResults | None:
        """Load the bid history of an auction and summarise its outcome."""

        mount = self._mount
        bids = await self.load_bids(auction_id)
        auction = self._auctions.get(auction_id)
        if bids is None or auction is None or mount != self._mount:
            return None
        results = AuctionResults(
            auction_id=auction_id,
            standings=tuple(rank_by_bidder(bids)),
            top_bid=top_bid(bids),
            reserve_met=reserve_met(auction, bids),
        )
        self._results[auction_id] = results
        self._logger.info(
            "auction_results_loaded",
            auction_id=auction_id,
            bidders=len(results.standings),
            reserve_met=results.reserve_met,
        )
        return results

    def bids(self, auction_id: str) -> list[Bid]:
        return list(self._bids.get(auction_id, ()))

    def results(self, auction_id: str) -> AuctionResults | None:
        return self._results.get(auction_id)

    # -- clock ----------------------------------------------------------------

    def tick(self, now: datetime) -> dict[str, CountdownReading]:
        """Recompute every visible row's countdown from one shared ``now``."""

        self._readings = {auction_id: reading_for(auction, now) for auction_id, auction in self._auctions.items()}
        return dict(self._readings)

    def drifted(self) -> frozenset[str]:
        """Auction ids whose countdown has passed a boundary their status has not."""

        return frozenset(
            auction_id
            for auction_id, reading in self._readings.items()
            if auction_id in self._auctions and expected_status_drift(self._auctions[auction_id].status, reading.phase)
        )

    # -- seller actions -------------------------------------------------------

    def actions(self, auction_id: str) -> tuple[SellerAction, ...]:
        auction = self._auctions.get(auction_id)
        return actions_for(auction.status if auction else None, self.policy)

    async def perform(self, auction_id: str, action: SellerAction) -> bool:
        """Run one of the row's actions.

        View Bids and View Results only read; every other action goes to the
        transition controller.
        """

        auction = self._auctions.get(auction_id)
        if auction is None:
            self._notify("Auction is no longer on this list", auction_id=auction_id)
            return False
        if not is_allowed(auction.status, action, self.policy):
            self._notify(f"{action.label} is not available for {auction.status.value} auctions", auction_id=auction_id)
            return False
        if action is SellerAction.VIEW_BIDS:
            return await self.load_bids(auction_id) is not None
        if action is SellerAction.VIEW_RESULTS:
            return await self.load_results(auction_id) is not None

        try:
            updated = await self.controller.perform(auction, action)
        except StaleStateError as exc:
            self._apply_stale(exc, auction_id)
            return False
        except UnsupportedEndpointError as exc:
            self._notify(exc.message, level="info", auction_id=auction_id)
            return False
        except AuctionDeskError as exc:
            self._notify(exc.message, auction_id=auction_id)
            return False
        self._replace(updated)
        self._notify(f"{action.label} applied", level="info", auction_id=auction_id)
        return True

    def edit_form(self, auction_id: str) -> EditForm | None:
        auction = self._auctions.get(auction_id)
        if auction is None:
            return None
        return EditForm.from_auction(auction, self.settings.tz)

    async def submit_edit(self, auction_id: str, form: EditForm) -> bool:
        auction = self._auctions.get(auction_id)
        if auction is None:
            self._notify("Auction is no longer on this list", auction_id=auction_id)
            return False
        self._clear(auction_id)
        try:
            updated = await self.controller.submit_edit(auction, form)
        except EditValidationError as exc:
            self.notices.append(Notice(exc.message, auction_id=auction_id, field=exc.field))
            return False
        except StaleStateError as exc:
            self._apply_stale(exc, auction_id)
            return False
        except AuctionDeskError as exc:
            self._notify(exc.message, auction_id=auction_id)
            return False
        self._replace(updated)
        self._notify("Auction updated", level="info", auction_id=auction_id)
        return True

    async def auction_items(self) -> list[dict[str, Any]]:
        """Items the seller can put up for auction."""

        try:
            return await self.client.list_auction_items()
        except AuctionDeskError as exc:
            self._notify(exc.message)
            return []

    async def create(self, auction_item_id: str, form: EditForm) -> Auction | None:
        """Quick-create an auction; validation errors show inline under ``field_errors(None)``."""

        self.notices = [notice for notice in self.notices if notice.auction_id is not None or notice.field is None]
        try:
            created = await self.controller.create(auction_item_id, form)
        except EditValidationError as exc:
            self.notices.append(Notice(exc.message, field=exc.field))
            return None
        except AuctionDeskError as exc:
            self._notify(exc.message)
            return None
        if self.status_filter in (None, created.status.value):
            self._replace(created)
        self._notify("Auction created", level="info", auction_id=created.auction_id)
        return created

    def field_errors(self, auction_id: str | None) -> dict[str, str]:
        return {
            notice.field: notice.message
            for notice in self.notices
            if notice.auction_id == auction_id and notice.field is not None
        }

    def rows(self) -> list[AuctionRow]:
        rows = []
        for auction_id, auction in self._auctions.items():
            bids = self._bids.get(auction_id)
            rows.append(
                AuctionRow(
                    auction=auction,
                    reading=self._readings.get(auction_id),
                    actions=self.actions(auction_id),
                    participants_count=self._participants.get(auction_id, auction.participants_count),
                    top_bid=top_bid(bids or ()),
                    reserve_met=reserve_met(auction, bids) if bids is not None else None,
                )
            )
        return rows

    def dismiss(self, auction_id: str | None = None) -> None:
        if auction_id is None:
            self.notices.clear()
        else:
            self._clear(auction_id)

    def _apply_stale(self, exc: StaleStateError, auction_id: str) -> None:
        if exc.auction is not None:
            self._replace(exc.auction)
        self._notify(exc.message, auction_id=auction_id)

    def _replace(self, auction: Auction) -> None:
        self._auctions[auction.auction_id] = auction
        if auction.participants_count is not None:
            self._participants[auction.auction_id] = auction.participants_count

    def _clear(self, auction_id: str) -> None:
        self.notices = [notice for notice in self.notices if notice.auction_id != auction_id]

    def _notify(self, message: str, *, level: str = "error", auction_id: str | None = None) -> None:
        self.notices.append(Notice(message, level=level, auction_id=auction_id))
        log = self._logger.warning if level == "error" else self._logger.info
        log("seller_notice", message=message, auction_id=auction_id)


__all__ = ["AuctionResults", "AuctionRow", "DashboardView", "Notice"]
