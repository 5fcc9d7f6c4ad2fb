"""Seller dashboard state and polling."""

from .poller import DashboardPoller
from .view import AuctionResults, AuctionRow, DashboardView, Notice

__all__ = ["AuctionResults", "AuctionRow", "DashboardPoller", "DashboardView", "Notice"]
