"""Single-outfit composition: shortlist, assisted ranking, validation, fallback."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Optional, Sequence, Tuple

from agents.outfit_ranker import OutfitRanker, RankerError
from logic.deterministic_matcher import match_deterministic
from logic.shortlist import SlotShortlists, build_slot_shortlists
from logic.validation import RankedOutfit, build_ranking_request
from lookbook_app.logging_config import get_logger, log_event
from models.candidate import Candidate
from models.look_variations import get_look_variation
from models.outfit import total_price
from models.profile import StyleProfile, required_slots
from models.taxonomy import DEFAULT_CURRENCY, SHORTLIST_LIMIT, Slot, budget_ceiling

logger = get_logger(__name__)

ASSISTED = "assisted"
DETERMINISTIC = "deterministic"


@dataclass(frozen=True)
class CompositionResult:
    items: List[Candidate]
    path: str
    shortlists: SlotShortlists
    diagnostics: Dict[str, object] = field(default_factory=dict)


def validate_ranked_outfit(
    ranked: RankedOutfit,
    slots: Sequence[Slot],
    shortlists: SlotShortlists,
    budget: float,
) -> Tuple[List[Candidate], Optional[str]]:
    """Resolve ranker picks against the shortlist.

    Returns the candidates in required-slot order, or an empty list and the
    reason the reply was refused. A reply is never partially accepted.
    """

    if len(ranked.outfit) != len(slots):
        return [], f"expected {len(slots)} picks, got {len(ranked.outfit)}"

    selected: List[Candidate] = []
    for slot in slots:
        picks = [pick for pick in ranked.outfit if pick.slot == slot.value]
        if not picks:
            return [], f"no pick for slot {slot.value}"
        if len(picks) > 1:
            return [], f"slot {slot.value} picked {len(picks)} times"
        candidate = shortlists.find(slot, picks[0].id)
        if candidate is None:
            return [], f"id {picks[0].id} is not shortlisted for slot {slot.value}"
        selected.append(candidate)

    keys = [candidate.exclusion_key for candidate in selected]
    if len(set(keys)) != len(keys):
        return [], "picks share an exclusion key"

    outfit_total = total_price(selected)
    if outfit_total > budget_ceiling(budget):
        return [], f"total {outfit_total:.2f} exceeds ceiling {budget_ceiling(budget):.2f}"
    return selected, None


class OutfitComposer:
    """Composes one outfit per call, preferring the assisted ranker."""

    def __init__(
        self,
        ranker: Optional[OutfitRanker] = None,
        currency: str = DEFAULT_CURRENCY,
        shortlist_limit: int = SHORTLIST_LIMIT,
    ) -> None:
        self.ranker = ranker
        self.currency = currency
        self.shortlist_limit = shortlist_limit

    def compose(
        self,
        pool: Sequence[Candidate],
        profile: StyleProfile,
        excluded_keys: AbstractSet[str] = frozenset(),
        randomness: float = 0.2,
        look_index: int = 0,
        rng: Optional[random.Random] = None,
    ) -> CompositionResult:
        """Run one composition attempt; ``items`` is empty when it fails."""

        slots = required_slots(profile)
        shortlists = build_slot_shortlists(
            pool,
            profile,
            slots,
            excluded_keys=excluded_keys,
            currency=self.currency,
            limit=self.shortlist_limit,
        )
        diagnostics: Dict[str, object] = {
            "look_index": look_index,
            "randomness": randomness,
            "shortlist_sizes": {slot.value: len(shortlists.candidates_by_slot[slot]) for slot in slots},
        }

        empty_slots = shortlists.empty_slots()
        if empty_slots:
            log_event(
                logger,
                logging.WARNING,
                "slot_shortlist_empty",
                slots=[slot.value for slot in empty_slots],
                look_index=look_index,
            )
            diagnostics["fallback_reason"] = "empty_shortlist"
            return self._deterministic(profile, slots, shortlists, excluded_keys, randomness, rng, diagnostics)

        if self.ranker is None:
            diagnostics["fallback_reason"] = "ranker_disabled"
            return self._deterministic(profile, slots, shortlists, excluded_keys, randomness, rng, diagnostics)

        request = build_ranking_request(
            profile,
            slots,
            shortlists.candidates_by_slot,
            variation_instruction=get_look_variation(look_index).instruction,
        )
        try:
            ranked = self.ranker.rank(request)
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                logging.WARNING,
                "ranker_failed_fallback",
                look_index=look_index,
                error_type=type(exc).__name__,
                error=str(exc),
                expected=isinstance(exc, RankerError),
            )
            diagnostics["fallback_reason"] = "ranker_error"
            return self._deterministic(profile, slots, shortlists, excluded_keys, randomness, rng, diagnostics)

        selected, failure = validate_ranked_outfit(ranked, slots, shortlists, profile.budget)
        if failure:
            log_event(logger, logging.WARNING, "ranker_reply_rejected", look_index=look_index, reason=failure)
            diagnostics["fallback_reason"] = "invalid_ranked_outfit"
            diagnostics["rejection"] = failure
            return self._deterministic(profile, slots, shortlists, excluded_keys, randomness, rng, diagnostics)

        diagnostics["notes"] = list(ranked.notes)
        log_event(
            logger,
            logging.INFO,
            "assisted_outfit_selected",
            look_index=look_index,
            picks=[f"{item.slot.value}:{item.id}" for item in selected],
            total_price=total_price(selected),
        )
        return CompositionResult(items=selected, path=ASSISTED, shortlists=shortlists, diagnostics=diagnostics)

    def _deterministic(
        self,
        profile: StyleProfile,
        slots: Sequence[Slot],
        shortlists: SlotShortlists,
        excluded_keys: AbstractSet[str],
        randomness: float,
        rng: Optional[random.Random],
        diagnostics: Dict[str, object],
    ) -> CompositionResult:
        items = match_deterministic(
            profile,
            slots,
            shortlists.candidates_by_slot,
            excluded_keys=excluded_keys,
            randomness=randomness,
            rng=rng,
        )
        return CompositionResult(items=items, path=DETERMINISTIC, shortlists=shortlists, diagnostics=diagnostics)


__all__ = ["ASSISTED", "DETERMINISTIC", "CompositionResult", "OutfitComposer", "validate_ranked_outfit"]
