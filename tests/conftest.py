"""Shared fixtures for the lookbook composer test-suite."""

from pathlib import Path
from typing import Callable, Dict, List

import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models.candidate import Candidate  # noqa: E402
from models.profile import StyleProfile  # noqa: E402
from models.taxonomy import Slot  # noqa: E402


def build_candidate(
    candidate_id: str,
    slot: Slot,
    price: float,
    brand: str = "Acme",
    category: str | None = None,
    title: str | None = None,
    currency: str = "EUR",
    availability: str | None = None,
    exclusion_key: str | None = None,
) -> Candidate:
    return Candidate(
        id=candidate_id,
        title=title or f"{slot.value} {candidate_id}",
        brand=brand,
        image=f"https://cdn.example.com/{candidate_id}.jpg",
        link=f"https://shop.example.com/{candidate_id}",
        price=price,
        currency=currency,
        category=category or slot.value,
        slot=slot,
        exclusion_key=exclusion_key or f"{brand.lower()}:{candidate_id}",
        availability=availability,
    )


@pytest.fixture()
def make_candidate() -> Callable[..., Candidate]:
    return build_candidate


@pytest.fixture()
def mild_profile() -> StyleProfile:
    return StyleProfile(gender="female", age=30, temperature="mild", budget=500)


@pytest.fixture()
def two_per_slot_pool() -> List[Candidate]:
    """Two distinct garments per mild-weather slot, all cheap enough."""

    prices: Dict[Slot, List[float]] = {
        Slot.TOP: [40.0, 55.0],
        Slot.BOTTOM: [60.0, 70.0],
        Slot.SHOES: [80.0, 90.0],
    }
    pool: List[Candidate] = []
    for slot, slot_prices in prices.items():
        for index, price in enumerate(slot_prices):
            pool.append(build_candidate(f"{slot.value}-{index}", slot, price, brand=f"Brand{index}"))
    return pool
