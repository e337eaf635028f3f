"""Slot-scoped hard filters expressed as independent predicates.

Each predicate inspects one candidate against a :class:`FilterContext` and
returns a :class:`Rejection` or ``None``. The pipeline stops at the first
rejection so each candidate is tallied under exactly one reason.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Callable, Dict, List, Optional, Sequence, Tuple

from models.candidate import Candidate
from models.profile import StyleProfile
from models.taxonomy import (
    CHILD_FILTER_MIN_AGE,
    CHILD_PATTERN,
    FEMALE_CATEGORY_PATTERN,
    FITTED_CUT_PATTERN,
    IN_STOCK_PATTERN,
    LOOSE_CUT_PATTERN,
    MALE_CATEGORY_PATTERN,
    Slot,
)


class RejectionReason(str, Enum):
    SLOT_MISMATCH = "slot_mismatch"
    ALREADY_USED = "already_used"
    CURRENCY_MISMATCH = "currency_mismatch"
    PRICE_OUT_OF_RANGE = "price_out_of_range"
    OUT_OF_STOCK = "out_of_stock"
    CHILD_ITEM = "child_item"
    OPPOSITE_GENDER = "opposite_gender"
    FIT_CONFLICT = "fit_conflict"


@dataclass(frozen=True)
class Rejection:
    """Why a candidate was refused for a slot."""

    reason: RejectionReason
    detail: str = ""


@dataclass(frozen=True)
class FilterContext:
    profile: StyleProfile
    slot: Slot
    max_price: float
    currency: str
    excluded_keys: AbstractSet[str] = frozenset()


@dataclass(frozen=True)
class FilteringResult:
    """Captures the outcome of filtering a pool for one slot."""

    items: List[Candidate]
    rejections: Counter = field(default_factory=Counter)


Predicate = Callable[[Candidate, FilterContext], Optional[Rejection]]


def check_slot(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    if candidate.slot != context.slot:
        return Rejection(RejectionReason.SLOT_MISMATCH, candidate.slot.value)
    return None


def check_not_used(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    if candidate.exclusion_key in context.excluded_keys:
        return Rejection(RejectionReason.ALREADY_USED, candidate.exclusion_key)
    return None


def check_currency(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    if candidate.currency != context.currency:
        return Rejection(RejectionReason.CURRENCY_MISMATCH, candidate.currency)
    return None


def check_price(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    if candidate.price <= 0 or candidate.price > context.max_price:
        return Rejection(
            RejectionReason.PRICE_OUT_OF_RANGE, f"{candidate.price:.2f} > {context.max_price:.2f}"
        )
    return None


def check_availability(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    if candidate.availability and not IN_STOCK_PATTERN.search(candidate.availability):
        return Rejection(RejectionReason.OUT_OF_STOCK, candidate.availability)
    return None


def check_not_child_item(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    age = context.profile.age
    if age is not None and age < CHILD_FILTER_MIN_AGE:
        return None
    match = CHILD_PATTERN.search(candidate.text)
    if match:
        return Rejection(RejectionReason.CHILD_ITEM, match.group(0))
    return None


def check_gender(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    category = candidate.category
    gender = context.profile.gender
    # Female targets keep categories naming both genders; male targets do not.
    if gender == "female":
        if MALE_CATEGORY_PATTERN.search(category) and not FEMALE_CATEGORY_PATTERN.search(category):
            return Rejection(RejectionReason.OPPOSITE_GENDER, category)
    elif gender == "male":
        if FEMALE_CATEGORY_PATTERN.search(category):
            return Rejection(RejectionReason.OPPOSITE_GENDER, category)
    return None


def check_fit(candidate: Candidate, context: FilterContext) -> Optional[Rejection]:
    preference = context.profile.fit_preference
    if preference == "fitted":
        match = LOOSE_CUT_PATTERN.search(candidate.text)
    elif preference == "loose":
        match = FITTED_CUT_PATTERN.search(candidate.text)
    else:
        return None
    if match:
        return Rejection(RejectionReason.FIT_CONFLICT, match.group(0))
    return None


HARD_FILTERS: Tuple[Predicate, ...] = (
    check_slot,
    check_not_used,
    check_currency,
    check_price,
    check_availability,
    check_not_child_item,
    check_gender,
    check_fit,
)


def evaluate(
    candidate: Candidate, context: FilterContext, predicates: Sequence[Predicate] = HARD_FILTERS
) -> Optional[Rejection]:
    """Return the first rejection raised by ``predicates`` or ``None``."""

    for predicate in predicates:
        rejection = predicate(candidate, context)
        if rejection is not None:
            return rejection
    return None


def apply_hard_filters(
    pool: Sequence[Candidate], context: FilterContext, predicates: Sequence[Predicate] = HARD_FILTERS
) -> FilteringResult:
    """Filter a pool for one slot, tallying rejection reasons."""

    kept: List[Candidate] = []
    rejections: Counter = Counter()
    for candidate in pool:
        rejection = evaluate(candidate, context, predicates)
        if rejection is None:
            kept.append(candidate)
        else:
            rejections[rejection.reason.value] += 1
    return FilteringResult(items=kept, rejections=rejections)


def rejection_summary(rejections: Dict[str, Counter]) -> Dict[str, Dict[str, int]]:
    """Drop slot mismatches, which dominate every tally and carry no signal."""

    return {
        slot: {reason: count for reason, count in tally.items() if reason != RejectionReason.SLOT_MISMATCH.value}
        for slot, tally in rejections.items()
    }


__all__ = [
    "FilterContext",
    "FilteringResult",
    "HARD_FILTERS",
    "Rejection",
    "RejectionReason",
    "apply_hard_filters",
    "evaluate",
    "rejection_summary",
    "check_availability",
    "check_currency",
    "check_fit",
    "check_gender",
    "check_not_child_item",
    "check_not_used",
    "check_price",
    "check_slot",
]
