"""Per-look styling instructions that steer the assisted ranker."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger(__name__)

NEUTRAL_INSTRUCTION = "Neutral take: balanced and easy to wear."


@dataclass(frozen=True)
class LookVariation:
    """Represents the framing requested for one look of a run."""

    name: str
    instruction: str


_LOOK_VARIATIONS: Dict[int, LookVariation] = {
    0: LookVariation(
        name="classic",
        instruction="Look 0: favour a classic, understated and versatile outfit.",
    ),
    1: LookVariation(
        name="colorful",
        instruction="Look 1: propose a more colorful outfit that stays wearable day to day.",
    ),
    2: LookVariation(
        name="bold",
        instruction="Look 2: propose a bolder outfit with more assertive combinations.",
    ),
    3: LookVariation(
        name="casual",
        instruction="Look 3: propose a more casual, relaxed outfit.",
    ),
    4: LookVariation(
        name="dressy",
        instruction="Look 4: propose a dressier, more elegant outfit.",
    ),
}


def get_look_variation(look_index: int | None) -> LookVariation:
    """Return the :class:`LookVariation` for an outfit index.

    Indexes outside the known set get the neutral instruction.
    """

    if look_index is None or look_index not in _LOOK_VARIATIONS:
        logger.debug("No variation for look index %s, using neutral instruction", look_index)
        return LookVariation(name="neutral", instruction=NEUTRAL_INSTRUCTION)
    return _LOOK_VARIATIONS[look_index]


__all__ = ["LookVariation", "get_look_variation", "NEUTRAL_INSTRUCTION"]
