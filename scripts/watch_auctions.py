"""Entry-point for watching the seller's auctions from a terminal."""

from __future__ import annotations

import argparse
import asyncio
import sys

from auction_desk.api.service import AuctionServiceClient
from auction_desk.config import get_settings
from auction_desk.dashboard import AuctionResults, AuctionRow, DashboardPoller, DashboardView
from auction_desk.domain.money import format_amount
from auction_desk.lifecycle.permissions import SellerAction
from auction_desk.logging import configure_logging, get_logger

logger = get_logger(__name__, component="watch_auctions")


def render(rows: list[AuctionRow], symbol: str) -> str:
    lines = []
    for row in rows:
        auction = row.auction
        countdown = row.reading.label if row.reading else "-"
        actions = ", ".join(action.label for action in row.actions)
        top = format_amount(row.top_bid.amount, symbol) if row.top_bid else "no bids"
        reserve = {True: "reserve met", False: "below reserve", None: ""}[row.reserve_met]
        bidders = "-" if row.participants_count is None else str(row.participants_count)
        lines.append(
            f"{auction.auction_id:<12} {auction.item.title[:28]:<28} "
            f"{format_amount(auction.start_price, symbol):>14} {auction.status.value:<10} "
            f"{countdown:<28} bidders: {bidders:<4} top: {top:<14} {reserve:<13} [{actions}]"
        )
    return "\n".join(lines) if lines else "No auctions found"


def render_results(results: AuctionResults, symbol: str) -> str:
    lines = [f"Results for {results.auction_id}: {'reserve met' if results.reserve_met else 'reserve not met'}"]
    for place, bid in enumerate(results.standings, start=1):
        lines.append(f"{place:>3}. {bid.bidder.display_name:<24} {format_amount(bid.amount, symbol):>14}")
    return "\n".join(lines)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Watch seller auctions with live countdowns")
    parser.add_argument("--status", type=str, default=None, help="Only list auctions with this status")
    parser.add_argument("--seconds", type=int, default=None, help="Stop after this many seconds")
    parser.add_argument("--auction", type=str, default=None, help="Auction id for --action")
    parser.add_argument(
        "--action",
        choices=[a.value for a in SellerAction if a is not SellerAction.EDIT],
        default=None,
        help="Run one seller action on --auction before watching",
    )
    parser.add_argument("--items", action="store_true", help="List auction items that can be put up for auction")
    args = parser.parse_args()
    if args.action and not args.auction:
        parser.error("--action requires --auction")

    settings = get_settings()
    configure_logging(json_output=False, settings=settings)
    symbol = settings.currency_symbol

    service = AuctionServiceClient(settings=settings)
    async with service.lifecycle():
        view = DashboardView(client=service, status_filter=args.status)

        if args.items:
            for item in await view.auction_items():
                print(f"{item.get('auctionItemId', item.get('id', '?'))}: {item.get('title', 'Untitled')}")
            for notice in view.notices:
                print(f"! {notice.message}")
            return

        def on_tick(rows: list[AuctionRow]) -> None:
            sys.stdout.write("\x1b[2J\x1b[H" + render(rows, symbol) + "\n")
            for notice in view.notices[-3:]:
                sys.stdout.write(f"! {notice.message}\n")
            sys.stdout.flush()

        if args.action:
            view.show()
            await view.refresh()
            action = SellerAction(args.action)
            if not await view.perform(args.auction, action):
                logger.warning("action_not_applied", auction_id=args.auction, action=args.action)
            elif action is SellerAction.VIEW_RESULTS:
                print(render_results(view.results(args.auction), symbol))
            elif action is SellerAction.VIEW_BIDS:
                for bid in view.bids(args.auction):
                    print(f"{bid.bidder.display_name:<24} {format_amount(bid.amount, symbol):>14}")
            await view.hide()

        poller = DashboardPoller(view=view, on_tick=on_tick)
        async with poller.visible():
            if args.seconds is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(args.seconds)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
