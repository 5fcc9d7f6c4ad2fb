"""Marketplace REST client."""

from .service import AuctionServiceClient, ServiceRequest

__all__ = ["AuctionServiceClient", "ServiceRequest"]
