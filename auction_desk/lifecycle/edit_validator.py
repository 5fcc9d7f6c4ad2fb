"""Validation of seller-submitted price and schedule edits.

Rules run in a fixed order and the first broken one is reported, mirroring
how the edit form shows a single message next to the offending field. Money
is compared as :class:`~decimal.Decimal` throughout.

The form's date inputs are naive ``YYYY-MM-DDTHH:MM`` strings. They are read
as wall-clock time in the auction's zone and rendered back in that same zone,
so opening and saving an edit never shifts the displayed value.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Any

from auction_desk.domain.models import Auction, parse_instant
from auction_desk.domain.money import parse_amount, to_wire
from auction_desk.errors import EditValidationError

LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


def iso_to_local_input(value: datetime | str | None, tz: tzinfo) -> str:
    """Render an instant as the naive local input string for ``tz``."""

    instant = parse_instant(value)
    if instant is None:
        return ""
    return instant.astimezone(tz).strftime(LOCAL_INPUT_FORMAT)


def local_input_to_datetime(value: datetime | str | None, tz: tzinfo) -> datetime | None:
    """Read a local input (or full ISO string) as an aware datetime.

    Naive values are wall-clock time in ``tz``; values carrying an offset are
    kept as given.
    """

    return parse_instant(value, default_tz=tz)


@dataclass(slots=True)
class EditForm:
    """Raw values as typed by the seller."""

    start_price: Any = None
    reserve_price: Any = None
    min_increment: Any = 0
    start_at: Any = None
    end_at: Any = None

    @classmethod
    def from_auction(cls, auction: Auction, tz: tzinfo) -> "EditForm":
        return cls(
            start_price=auction.start_price,
            reserve_price=auction.reserve_price if auction.reserve_price is not None else "",
            min_increment=auction.min_increment,
            start_at=iso_to_local_input(auction.start_at, tz),
            end_at=iso_to_local_input(auction.end_at, tz),
        )


@dataclass(frozen=True, slots=True)
class ValidatedEdit:
    start_price: Decimal
    reserve_price: Decimal | None
    min_increment: Decimal
    start_at: datetime
    end_at: datetime

    def to_payload(self) -> dict[str, Any]:
        """Request body for ``PUT /auctions/:id``."""

        return {
            "startPrice": to_wire(self.start_price),
            "reservePrice": to_wire(self.reserve_price),
            "minIncrement": to_wire(self.min_increment),
            "startAt": self.start_at.isoformat(),
            "endAt": self.end_at.isoformat(),
        }


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _instant(form_value: Any, field: str, label: str, tz: tzinfo) -> datetime:
    if _blank(form_value):
        raise EditValidationError(field, f"{label} is required")
    parsed = local_input_to_datetime(form_value, tz)
    if parsed is None:
        raise EditValidationError(field, f"{label} is not a valid date")
    return parsed


def validate_edit(form: EditForm, tz: tzinfo) -> ValidatedEdit:
    """Check an edit against the auction rules.

    Raises:
        EditValidationError: for the first rule the form breaks.
    """

    start_price = parse_amount(form.start_price)
    if start_price is None or start_price <= 0:
        raise EditValidationError("start_price", "Starting price must be greater than 0")

    reserve_price = parse_amount(form.reserve_price)
    if reserve_price is None or reserve_price < 0:
        raise EditValidationError("reserve_price", "Reserve price must be 0 or more")

    if reserve_price < start_price:
        raise EditValidationError("reserve_price", "Reserve price must be at least the starting price")

    min_increment = parse_amount(form.min_increment)
    if min_increment is None or min_increment < 0:
        raise EditValidationError("min_increment", "Minimum increment must be 0 or more")

    start_at = _instant(form.start_at, "start_at", "Start time", tz)
    end_at = _instant(form.end_at, "end_at", "End time", tz)
    if end_at <= start_at:
        raise EditValidationError("end_at", "End time must be after start time")

    return ValidatedEdit(
        start_price=start_price,
        reserve_price=reserve_price,
        min_increment=min_increment,
        start_at=start_at,
        end_at=end_at,
    )


def validate_create(form: EditForm, tz: tzinfo, *, now: datetime) -> ValidatedEdit:
    """Rules for the quick-create flow.

    Reserve price and start time are optional there: a blank reserve means no
    reserve and a blank start means the auction starts ``now``. The edit rules
    apply to everything that is filled in.
    """

    reserve_blank = _blank(form.reserve_price)
    candidate = EditForm(
        start_price=form.start_price,
        reserve_price=form.start_price if reserve_blank else form.reserve_price,
        min_increment=0 if _blank(form.min_increment) else form.min_increment,
        start_at=now if _blank(form.start_at) else form.start_at,
        end_at=form.end_at,
    )
    validated = validate_edit(candidate, tz)
    if reserve_blank:
        return ValidatedEdit(
            start_price=validated.start_price,
            reserve_price=None,
            min_increment=validated.min_increment,
            start_at=validated.start_at,
            end_at=validated.end_at,
        )
    return validated


__all__ = [
    "EditForm",
    "LOCAL_INPUT_FORMAT",
    "ValidatedEdit",
    "iso_to_local_input",
    "local_input_to_datetime",
    "validate_create",
    "validate_edit",
]
