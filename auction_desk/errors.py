"""Error taxonomy for the auction desk.

Everything raised by this package derives from :class:`AuctionDeskError` so the
dashboard can turn any failure into an inline message or a notice without
crashing the tick loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auction_desk.domain.models import Auction


class AuctionDeskError(Exception):
    """Base class for auction desk failures."""

    @property
    def message(self) -> str:
        return str(self)


class RecordFormatError(AuctionDeskError):
    """A server payload is missing mandatory auction or bid fields."""


class EditValidationError(AuctionDeskError):
    """A seller edit broke a business rule; never sent to the server."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class InvalidTransitionError(AuctionDeskError):
    """The requested seller action is not allowed from the current status."""


class AuctionServiceError(AuctionDeskError):
    """Non-2xx response or ``{"success": false}`` envelope from the auction service."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnsupportedEndpointError(AuctionServiceError):
    """The service does not expose this endpoint yet (404)."""


class StaleStateError(AuctionServiceError):
    """The service rejected a transition because the auction had already moved on."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        auction: "Auction | None" = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.auction = auction


__all__ = [
    "AuctionDeskError",
    "AuctionServiceError",
    "EditValidationError",
    "InvalidTransitionError",
    "RecordFormatError",
    "StaleStateError",
    "UnsupportedEndpointError",
]
