"""Composer behaviour across the assisted and deterministic paths."""

import random
from typing import List

import pytest

from agents.outfit_ranker import OutfitRanker, RankerError
from logic.diversification import generate_diverse_outfits
from logic.outfit_composer import ASSISTED, DETERMINISTIC, OutfitComposer, validate_ranked_outfit
from logic.shortlist import build_slot_shortlists
from logic.validation import RankedOutfit, RankingRequest
from models.profile import StyleProfile, required_slots
from models.taxonomy import Slot


class FakeRanker(OutfitRanker):
    model_name = "fake-ranker"

    def __init__(self, picks: dict | None = None, error: Exception | None = None) -> None:
        self.picks = picks or {}
        self.error = error
        self.requests: List[RankingRequest] = []

    def rank(self, request: RankingRequest) -> RankedOutfit:
        self.requests.append(request)
        if self.error:
            raise self.error
        return RankedOutfit.model_validate(
            {"outfit": [{"slot": slot, "id": item_id} for slot, item_id in self.picks.items()], "notes": ["ok"]}
        )


class ExplodingRanker(OutfitRanker):
    def rank(self, request: RankingRequest) -> RankedOutfit:  # pragma: no cover - must never run
        raise AssertionError("ranker must not be called when a shortlist is empty")


def test_valid_ranker_reply_takes_the_assisted_path(two_per_slot_pool, mild_profile) -> None:
    ranker = FakeRanker({"top": "top-1", "bottom": "bottom-0", "shoes": "shoes-1"})
    composer = OutfitComposer(ranker=ranker)

    result = composer.compose(two_per_slot_pool, mild_profile, rng=random.Random(1))

    assert result.path == ASSISTED
    assert [item.id for item in result.items] == ["top-1", "bottom-0", "shoes-1"]
    assert result.diagnostics["notes"] == ["ok"]
    request = ranker.requests[0]
    assert request.allowed_ids_by_slot[Slot.TOP] == ["top-0", "top-1"]
    assert request.variation_instruction


def test_invented_id_falls_back_to_deterministic(two_per_slot_pool, mild_profile) -> None:
    ranker = FakeRanker({"top": "top-0", "bottom": "bottom-0", "shoes": "shoes-999"})
    composer = OutfitComposer(ranker=ranker)

    result = composer.compose(two_per_slot_pool, mild_profile, rng=random.Random(1))

    assert result.path == DETERMINISTIC
    assert result.diagnostics["fallback_reason"] == "invalid_ranked_outfit"
    assert len(result.items) == 3
    assert {item.slot for item in result.items} == {Slot.TOP, Slot.BOTTOM, Slot.SHOES}


def test_ranker_error_falls_back_to_deterministic(two_per_slot_pool, mild_profile) -> None:
    composer = OutfitComposer(ranker=FakeRanker(error=RankerError("quota")))

    result = composer.compose(two_per_slot_pool, mild_profile, rng=random.Random(1))

    assert result.path == DETERMINISTIC
    assert result.diagnostics["fallback_reason"] == "ranker_error"
    assert len(result.items) == 3


def test_empty_shortlist_skips_the_ranker(two_per_slot_pool) -> None:
    rainy = StyleProfile(gender="female", age=30, temperature="mild", rain=True, budget=500)
    composer = OutfitComposer(ranker=ExplodingRanker())

    result = composer.compose(two_per_slot_pool, rainy, rng=random.Random(1))

    assert result.path == DETERMINISTIC
    assert result.items == []
    assert result.diagnostics["fallback_reason"] == "empty_shortlist"


def test_no_ranker_uses_deterministic_path(two_per_slot_pool, mild_profile) -> None:
    result = OutfitComposer().compose(two_per_slot_pool, mild_profile, rng=random.Random(5))

    assert result.path == DETERMINISTIC
    assert result.diagnostics["fallback_reason"] == "ranker_disabled"
    assert sum(item.price for item in result.items) <= 500 * 1.05


@pytest.mark.parametrize(
    "picks, reason",
    [
        ({"top": "top-0", "bottom": "bottom-0"}, "expected 3 picks"),
        ({"top": "top-0", "bottom": "bottom-0", "outerwear": "shoes-0"}, "no pick for slot shoes"),
        ({"top": "top-0", "bottom": "top-1", "shoes": "shoes-0"}, "not shortlisted for slot bottom"),
    ],
)
def test_validate_ranked_outfit_refuses_bad_replies(two_per_slot_pool, mild_profile, picks, reason) -> None:
    slots = required_slots(mild_profile)
    shortlists = build_slot_shortlists(two_per_slot_pool, mild_profile, slots)
    ranked = RankedOutfit.model_validate({"outfit": [{"slot": s, "id": i} for s, i in picks.items()], "notes": []})

    items, failure = validate_ranked_outfit(ranked, slots, shortlists, mild_profile.budget)

    assert items == []
    assert reason in failure


def test_validate_ranked_outfit_enforces_budget_ceiling(two_per_slot_pool) -> None:
    profile = StyleProfile(gender="female", age=30, temperature="mild", budget=190)
    slots = required_slots(profile)
    shortlists = build_slot_shortlists(two_per_slot_pool, profile, slots)
    ranked = RankedOutfit.model_validate(
        {"outfit": [{"slot": "top", "id": "top-1"}, {"slot": "bottom", "id": "bottom-1"}, {"slot": "shoes", "id": "shoes-1"}], "notes": []}
    )

    items, failure = validate_ranked_outfit(ranked, slots, shortlists, profile.budget)

    assert items == []
    assert "exceeds ceiling" in failure


class TimeoutRanker(OutfitRanker):
    def rank(self, request: RankingRequest) -> RankedOutfit:
        raise TimeoutError("ranker timed out")


def test_unexpected_ranker_exception_falls_back(two_per_slot_pool, mild_profile) -> None:
    result = OutfitComposer(ranker=TimeoutRanker()).compose(two_per_slot_pool, mild_profile, rng=random.Random(1))

    assert result.path == DETERMINISTIC
    assert result.diagnostics["fallback_reason"] == "ranker_error"
    assert len(result.items) == 3


def test_diversification_survives_a_failing_ranker(two_per_slot_pool, mild_profile) -> None:
    context = generate_diverse_outfits(
        two_per_slot_pool, mild_profile, OutfitComposer(ranker=TimeoutRanker()), rng=random.Random(4)
    )

    assert context.outfits
    assert all(outfit.path == DETERMINISTIC for outfit in context.outfits)


def _pool_with_coord_set(pool, make_candidate):
    return pool + [
        make_candidate("top-set", Slot.TOP, 30, exclusion_key="acme:set-1"),
        make_candidate("bottom-set", Slot.BOTTOM, 30, exclusion_key="acme:set-1"),
    ]


def test_validate_ranked_outfit_rejects_shared_exclusion_keys(two_per_slot_pool, mild_profile, make_candidate) -> None:
    pool = _pool_with_coord_set(two_per_slot_pool, make_candidate)
    slots = required_slots(mild_profile)
    shortlists = build_slot_shortlists(pool, mild_profile, slots)
    ranked = RankedOutfit.model_validate(
        {
            "outfit": [
                {"slot": "top", "id": "top-set"},
                {"slot": "bottom", "id": "bottom-set"},
                {"slot": "shoes", "id": "shoes-0"},
            ],
            "notes": [],
        }
    )

    items, failure = validate_ranked_outfit(ranked, slots, shortlists, mild_profile.budget)

    assert items == []
    assert "share an exclusion key" in failure


def test_shared_key_reply_falls_back_to_unique_outfit(two_per_slot_pool, mild_profile, make_candidate) -> None:
    pool = _pool_with_coord_set(two_per_slot_pool, make_candidate)
    ranker = FakeRanker({"top": "top-set", "bottom": "bottom-set", "shoes": "shoes-0"})

    result = OutfitComposer(ranker=ranker).compose(pool, mild_profile, rng=random.Random(1))

    assert result.path == DETERMINISTIC
    assert result.diagnostics["fallback_reason"] == "invalid_ranked_outfit"
    keys = [item.exclusion_key for item in result.items]
    assert len(keys) == len(set(keys)) == 3
