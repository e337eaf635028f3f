"""Canonical taxonomy definitions for catalog items and outfit slots.

This module centralises the slot labels, the keyword vocabularies used to
classify catalog text and the budget constants shared by the composition
engine. Keyword lists cover both the English and the French wording found in
affiliate feeds.
"""

from enum import Enum
import re
from typing import Dict, List, Pattern, Tuple


class Slot(str, Enum):
    """A clothing role that an outfit fills exactly once."""

    OUTERWEAR = "outerwear"
    TOP = "top"
    BOTTOM = "bottom"
    SHOES = "shoes"
    ACCESSORY = "accessory"


BUDGET_TOLERANCE = 0.05
SHORTLIST_LIMIT = 40
SLOT_HEADROOM_FACTOR = 1.5
DEFAULT_CURRENCY = "EUR"

TEMPERATURE_SLOTS: Dict[str, List[Slot]] = {
    "cold": [Slot.OUTERWEAR, Slot.TOP, Slot.BOTTOM, Slot.SHOES],
    "mild": [Slot.TOP, Slot.BOTTOM, Slot.SHOES],
    "hot": [Slot.TOP, Slot.BOTTOM, Slot.SHOES],
}
DEFAULT_SLOTS: List[Slot] = [Slot.TOP, Slot.BOTTOM, Slot.SHOES]


def _keyword_pattern(words: List[str]) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(word) for word in words) + ")", re.IGNORECASE)


SLOT_KEYWORDS: Dict[Slot, List[str]] = {
    Slot.OUTERWEAR: [
        "coat", "manteau", "jacket", "veste", "trench", "blazer", "parka",
        "doudoune", "anorak", "raincoat", "imperméable", "blouson", "puffer",
    ],
    Slot.TOP: [
        "pullover", "pull", "sweater", "sweatshirt", "cardigan", "t-shirt",
        "shirt", "chemise", "top", "blouse", "knitwear", "hoodie", "polo",
        "dress", "robe", "débardeur",
    ],
    Slot.BOTTOM: [
        "trousers", "pants", "pantalon", "jean", "skirt", "jupe", "short",
        "bermuda", "chino", "legging",
    ],
    Slot.SHOES: [
        "shoe", "chaussure", "sneaker", "basket", "boot", "bottine", "ballerina",
        "ballerine", "heels", "escarpin", "loafer", "mocassin", "sandal",
        "derby",
    ],
}

# Checked in this order; the first slot whose keywords match wins.
SLOT_PRIORITY: Tuple[Slot, ...] = (Slot.OUTERWEAR, Slot.TOP, Slot.BOTTOM, Slot.SHOES)
SLOT_PATTERNS: Dict[Slot, Pattern[str]] = {
    slot: _keyword_pattern(words) for slot, words in SLOT_KEYWORDS.items()
}

IN_STOCK_PATTERN = re.compile(
    r"\b(?:in ?stock|en stock|available|disponible|limited availability)\b", re.IGNORECASE
)
CHILD_PATTERN = re.compile(
    r"\b(?:girls?|boys?|kids?|junior|child|children|baby|enfants?|filles?|garçons?|bébé)\b",
    re.IGNORECASE,
)
CHILD_FILTER_MIN_AGE = 16

MALE_CATEGORY_PATTERN = re.compile(r"\b(?:man|men|homme|hommes|male)\b", re.IGNORECASE)
FEMALE_CATEGORY_PATTERN = re.compile(r"\b(?:woman|women|femme|femmes|female)\b", re.IGNORECASE)

LOOSE_CUT_PATTERN = re.compile(
    r"\b(?:oversized?|loose|relaxed|baggy|ample|wide)\b", re.IGNORECASE
)
FITTED_CUT_PATTERN = re.compile(
    r"\b(?:slim|skinny|fitted|tight|ajustée?|cintrée?)\b", re.IGNORECASE
)


def budget_ceiling(budget: float) -> float:
    """Return the highest acceptable outfit total for a budget."""

    return budget * (1 + BUDGET_TOLERANCE)


def infer_slot(text: str) -> Slot:
    """Classify free text into a slot, defaulting to ``top``."""

    for slot in SLOT_PRIORITY:
        if SLOT_PATTERNS[slot].search(text):
            return slot
    return Slot.TOP


__all__ = [
    "Slot",
    "BUDGET_TOLERANCE",
    "SHORTLIST_LIMIT",
    "SLOT_HEADROOM_FACTOR",
    "DEFAULT_CURRENCY",
    "TEMPERATURE_SLOTS",
    "DEFAULT_SLOTS",
    "SLOT_KEYWORDS",
    "SLOT_PRIORITY",
    "IN_STOCK_PATTERN",
    "CHILD_PATTERN",
    "CHILD_FILTER_MIN_AGE",
    "MALE_CATEGORY_PATTERN",
    "FEMALE_CATEGORY_PATTERN",
    "LOOSE_CUT_PATTERN",
    "FITTED_CUT_PATTERN",
    "budget_ceiling",
    "infer_slot",
]
