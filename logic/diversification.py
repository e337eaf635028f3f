"""Multi-outfit generation with exclusion tracking and signature dedup.

A :class:`RunContext` is the single owner of the cross-attempt state for one
request: exclusion keys of accepted outfits, signatures already seen and the
accepted outfits themselves. Attempts run sequentially because each strict
attempt depends on the exclusions accumulated by the previous ones.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from logic.outfit_composer import CompositionResult, OutfitComposer
from lookbook_app.logging_config import get_logger, log_event
from models.candidate import Candidate
from models.outfit import Outfit, outfit_signature
from models.profile import StyleProfile, required_slots
from models.taxonomy import DEFAULT_CURRENCY, budget_ceiling

logger = get_logger(__name__)

STRICT_RANDOMNESS = 0.2
RELAXED_RANDOMNESS = 0.35
LAST_RESORT_RANDOMNESS = 0.1
DEFAULT_TARGET_COUNT = 5
EMERGENCY = "emergency"


@dataclass
class RunContext:
    """Mutable state of one generation run."""

    target_count: int = DEFAULT_TARGET_COUNT
    used_keys: Set[str] = field(default_factory=set)
    seen_signatures: Set[str] = field(default_factory=set)
    outfits: List[Outfit] = field(default_factory=list)
    attempts: List[Dict[str, object]] = field(default_factory=list)

    @property
    def is_full(self) -> bool:
        return len(self.outfits) >= self.target_count

    def is_fresh(self, items: Sequence[Candidate]) -> bool:
        return bool(items) and outfit_signature(items) not in self.seen_signatures

    def accept(self, outfit: Outfit) -> None:
        self.outfits.append(outfit)
        self.used_keys.update(outfit.exclusion_keys)
        self.seen_signatures.add(outfit.signature)


def _record(context: RunContext, look_index: int, stage: str, result: CompositionResult) -> None:
    context.attempts.append(
        {
            "look_index": look_index,
            "stage": stage,
            "path": result.path,
            "filled": bool(result.items),
            "signature": outfit_signature(result.items) if result.items else None,
            **result.diagnostics,
        }
    )


def generate_diverse_outfits(
    pool: Sequence[Candidate],
    profile: StyleProfile,
    composer: OutfitComposer,
    context: Optional[RunContext] = None,
    rng: Optional[random.Random] = None,
) -> RunContext:
    """Produce up to ``context.target_count`` distinct outfits.

    Each look index gets a strict attempt honouring the accumulated
    exclusions, then at most one relaxed attempt without them. The loop makes
    at most ``2 * target_count + 1`` composition attempts.
    """

    context = context or RunContext()
    rng = rng or random.Random()

    for look_index in range(context.target_count):
        if context.is_full:
            break
        strict = composer.compose(
            pool,
            profile,
            excluded_keys=frozenset(context.used_keys),
            randomness=STRICT_RANDOMNESS,
            look_index=look_index,
            rng=rng,
        )
        _record(context, look_index, "strict", strict)
        selected, relaxed = strict, False

        if not context.is_fresh(strict.items):
            relaxed_result = composer.compose(
                pool,
                profile,
                excluded_keys=frozenset(),
                randomness=RELAXED_RANDOMNESS,
                look_index=look_index,
                rng=rng,
            )
            _record(context, look_index, "relaxed", relaxed_result)
            if context.is_fresh(relaxed_result.items):
                selected, relaxed = relaxed_result, True

        if not context.is_fresh(selected.items):
            log_event(logger, logging.INFO, "look_attempt_skipped", look_index=look_index)
            continue

        outfit = Outfit(items=list(selected.items), look_index=look_index, path=selected.path, relaxed=relaxed)
        context.accept(outfit)
        log_event(
            logger,
            logging.INFO,
            "look_accepted",
            look_index=look_index,
            path=outfit.path,
            relaxed=relaxed,
            total_price=outfit.total_price,
        )

    if not context.outfits:
        last_resort = composer.compose(
            pool,
            profile,
            excluded_keys=frozenset(),
            randomness=LAST_RESORT_RANDOMNESS,
            look_index=0,
            rng=rng,
        )
        _record(context, 0, "last_resort", last_resort)
        if last_resort.items:
            context.accept(Outfit(items=list(last_resort.items), look_index=0, path=last_resort.path, relaxed=True))
            log_event(logger, logging.INFO, "look_accepted_last_resort", path=last_resort.path)

    log_event(
        logger,
        logging.INFO,
        "diversification_completed",
        outfits=len(context.outfits),
        target=context.target_count,
        attempts=len(context.attempts),
    )
    return context


def build_emergency_outfit(
    pool: Sequence[Candidate], profile: StyleProfile, currency: str = DEFAULT_CURRENCY
) -> List[Candidate]:
    """Cheapest candidate per slot, bypassing filters, ranking and exclusions.

    Each slot prefers the cheapest candidate within the amortised remaining
    budget and otherwise takes the cheapest one available. Returns an empty
    list when some required slot has no candidate at all.
    """

    slots = required_slots(profile)
    remaining_budget = budget_ceiling(profile.budget)
    selected: List[Candidate] = []
    for index, slot in enumerate(slots):
        max_price = remaining_budget / max(len(slots) - index, 1)
        in_slot = sorted(
            (
                candidate
                for candidate in pool
                if candidate.slot == slot and candidate.price > 0 and candidate.currency == currency
            ),
            key=lambda candidate: candidate.price,
        )
        if not in_slot:
            log_event(logger, logging.ERROR, "emergency_outfit_missing_slot", slot=slot.value)
            return []
        chosen = next((candidate for candidate in in_slot if candidate.price <= max_price), in_slot[0])
        selected.append(chosen)
        remaining_budget -= chosen.price
    return selected


__all__ = [
    "EMERGENCY",
    "LAST_RESORT_RANDOMNESS",
    "RELAXED_RANDOMNESS",
    "STRICT_RANDOMNESS",
    "RunContext",
    "build_emergency_outfit",
    "generate_diverse_outfits",
]
