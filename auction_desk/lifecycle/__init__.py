"""Auction lifecycle coordination: countdowns, ranking, permissions, transitions."""

from .bids import rank, rank_by_bidder, reserve_met, top_bid
from .countdown import CountdownReading, Phase, compute_phase, expected_status_drift, reading_for
from .edit_validator import EditForm, ValidatedEdit, iso_to_local_input, local_input_to_datetime, validate_edit
from .permissions import EditPolicy, SellerAction, actions_for
from .transitions import TransitionController, TransitionPlan, plan_transition

__all__ = [
    "CountdownReading",
    "EditForm",
    "EditPolicy",
    "Phase",
    "SellerAction",
    "TransitionController",
    "TransitionPlan",
    "ValidatedEdit",
    "actions_for",
    "compute_phase",
    "expected_status_drift",
    "iso_to_local_input",
    "local_input_to_datetime",
    "plan_transition",
    "rank",
    "rank_by_bidder",
    "reading_for",
    "reserve_met",
    "top_bid",
    "validate_edit",
]
