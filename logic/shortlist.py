"""Per-slot shortlist construction with budget simulation and brand diversity."""
from __future__ import annotations

import logging
from collections import Counter, OrderedDict, deque
from dataclasses import dataclass, field
from typing import AbstractSet, Deque, Dict, Iterator, List, Sequence

from logic.hard_filters import FilterContext, apply_hard_filters
from models.candidate import Candidate
from models.profile import StyleProfile
from models.taxonomy import DEFAULT_CURRENCY, SHORTLIST_LIMIT, SLOT_HEADROOM_FACTOR, Slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotShortlists:
    """Shortlists for one composition attempt, keyed by required slot."""

    required_slots: List[Slot]
    candidates_by_slot: Dict[Slot, List[Candidate]]
    max_price_by_slot: Dict[Slot, float] = field(default_factory=dict)
    rejections_by_slot: Dict[str, Counter] = field(default_factory=dict)

    def empty_slots(self) -> List[Slot]:
        return [slot for slot in self.required_slots if not self.candidates_by_slot.get(slot)]

    def find(self, slot: Slot, candidate_id: str) -> Candidate | None:
        for candidate in self.candidates_by_slot.get(slot, []):
            if candidate.id == candidate_id:
                return candidate
        return None


class BrandInterleaver:
    """Round-robin iterator over brand buckets of price-sorted candidates.

    Brand order is fixed when the buckets are built. The cursor advances
    modulo the number of live buckets and exhausted buckets are pruned in
    place, so the next brand inherits the cursor position.
    """

    def __init__(self, candidates: Sequence[Candidate]) -> None:
        self._buckets: "OrderedDict[str, Deque[Candidate]]" = OrderedDict()
        for candidate in sorted(candidates, key=lambda item: item.price):
            self._buckets.setdefault(candidate.brand or "unknown", deque()).append(candidate)
        self._brands: List[str] = list(self._buckets)
        self._cursor = 0

    def __iter__(self) -> Iterator[Candidate]:
        return self

    def __next__(self) -> Candidate:
        if not self._brands:
            raise StopIteration
        brand = self._brands[self._cursor]
        bucket = self._buckets[brand]
        candidate = bucket.popleft()
        if bucket:
            self._cursor = (self._cursor + 1) % len(self._brands)
        else:
            del self._buckets[brand]
            self._brands.pop(self._cursor)
            if self._brands:
                self._cursor %= len(self._brands)
            else:
                self._cursor = 0
        return candidate


def interleave_by_brand(candidates: Sequence[Candidate], limit: int = SHORTLIST_LIMIT) -> List[Candidate]:
    """Cheapest-first shortlist that cycles through brands."""

    shortlisted: List[Candidate] = []
    for candidate in BrandInterleaver(candidates):
        if len(shortlisted) >= limit:
            break
        shortlisted.append(candidate)
    return shortlisted


def build_slot_shortlists(
    pool: Sequence[Candidate],
    profile: StyleProfile,
    required_slots: Sequence[Slot],
    excluded_keys: AbstractSet[str] = frozenset(),
    currency: str = DEFAULT_CURRENCY,
    limit: int = SHORTLIST_LIMIT,
) -> SlotShortlists:
    """Filter and shortlist the pool for every required slot.

    The per-slot ceiling is ``remaining / remaining_slots * 1.5`` where
    ``remaining`` is a simulated budget reduced by each slot's cheapest
    shortlisted price. An empty shortlist is returned as-is.
    """

    candidates_by_slot: Dict[Slot, List[Candidate]] = {}
    max_price_by_slot: Dict[Slot, float] = {}
    rejections_by_slot: Dict[str, Counter] = {}
    simulated_remaining = profile.budget

    for index, slot in enumerate(required_slots):
        remaining_slots = max(len(required_slots) - index, 1)
        max_price = (simulated_remaining / remaining_slots) * SLOT_HEADROOM_FACTOR
        context = FilterContext(
            profile=profile,
            slot=slot,
            max_price=max_price,
            currency=currency,
            excluded_keys=frozenset(excluded_keys),
        )
        filtered = apply_hard_filters(pool, context)
        shortlisted = interleave_by_brand(filtered.items, limit)

        candidates_by_slot[slot] = shortlisted
        max_price_by_slot[slot] = round(max_price, 2)
        rejections_by_slot[slot.value] = filtered.rejections
        if shortlisted:
            simulated_remaining -= min(candidate.price for candidate in shortlisted)

        logger.info(
            "Slot=%s candidates=%s max_price=%.2f top brands=%s",
            slot.value,
            len(shortlisted),
            max_price,
            ", ".join(candidate.brand for candidate in shortlisted[:5]),
        )

    return SlotShortlists(
        required_slots=list(required_slots),
        candidates_by_slot=candidates_by_slot,
        max_price_by_slot=max_price_by_slot,
        rejections_by_slot=rejections_by_slot,
    )


__all__ = ["BrandInterleaver", "SlotShortlists", "build_slot_shortlists", "interleave_by_brand"]
