"""Auction Desk: seller-side auction lifecycle coordination."""

from __future__ import annotations

from .api.service import AuctionServiceClient, ServiceRequest
from .config import Settings, get_settings
from .dashboard import DashboardPoller, DashboardView
from .domain import Auction, AuctionStatus, Bid
from .lifecycle import (
    EditForm,
    SellerAction,
    TransitionController,
    actions_for,
    compute_phase,
    rank,
    top_bid,
    validate_edit,
)

__all__ = [
    "Auction",
    "AuctionServiceClient",
    "AuctionStatus",
    "Bid",
    "DashboardPoller",
    "DashboardView",
    "EditForm",
    "SellerAction",
    "ServiceRequest",
    "Settings",
    "TransitionController",
    "actions_for",
    "compute_phase",
    "get_settings",
    "rank",
    "top_bid",
    "validate_edit",
]
