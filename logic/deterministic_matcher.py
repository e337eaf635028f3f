"""Budget-amortised weighted-random outfit matcher.

This is the fallback path that never calls an external service. It walks the
required slots in order, caps each pick at the real remaining budget divided
by the slots still open, and picks uniformly among the few cheapest eligible
candidates. The amount of variety is controlled by ``randomness``.
"""
from __future__ import annotations

import logging
import math
import random
from typing import AbstractSet, Dict, List, Optional, Sequence

from models.candidate import Candidate
from models.outfit import total_price
from models.profile import StyleProfile
from models.taxonomy import Slot, budget_ceiling

logger = logging.getLogger(__name__)


def top_n_for(randomness: float, pool_size: int) -> int:
    """Number of cheapest candidates to draw from, clamped to ``[1, pool_size]``."""

    return max(1, min(pool_size, 1 + math.floor(randomness * 4)))


def match_deterministic(
    profile: StyleProfile,
    required_slots: Sequence[Slot],
    candidates_by_slot: Dict[Slot, List[Candidate]],
    excluded_keys: AbstractSet[str] = frozenset(),
    randomness: float = 0.2,
    rng: Optional[random.Random] = None,
) -> List[Candidate]:
    """Fill every required slot or return an empty list.

    Each attempt terminates after one pass over ``required_slots``.
    """

    rng = rng or random.Random()
    ceiling = budget_ceiling(profile.budget)
    remaining_budget = ceiling
    used_keys = set(excluded_keys)
    selected: List[Candidate] = []

    for index, slot in enumerate(required_slots):
        remaining_slots = max(len(required_slots) - index, 1)
        max_price = remaining_budget / remaining_slots
        slot_candidates = [
            candidate
            for candidate in candidates_by_slot.get(slot, [])
            if candidate.exclusion_key not in used_keys
        ]
        if not slot_candidates:
            logger.info("Deterministic matcher found no candidate for slot=%s", slot.value)
            return []

        affordable = [candidate for candidate in slot_candidates if candidate.price <= max_price]
        eligible = sorted(affordable or slot_candidates, key=lambda candidate: candidate.price)
        top_n = top_n_for(randomness, len(eligible))
        chosen = eligible[rng.randrange(top_n)]

        selected.append(chosen)
        used_keys.add(chosen.exclusion_key)
        remaining_budget -= chosen.price

    outfit_total = total_price(selected)
    logger.info("Deterministic matcher selected total_price=%.2f ceiling=%.2f", outfit_total, ceiling)
    if outfit_total > ceiling:
        return []
    return selected


__all__ = ["match_deterministic", "top_n_for"]
