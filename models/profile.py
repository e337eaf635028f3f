"""User style profile and the slot requirements derived from it."""

from __future__ import annotations

import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.taxonomy import DEFAULT_SLOTS, TEMPERATURE_SLOTS, Slot

logger = logging.getLogger(__name__)


class StyleProfile(BaseModel):
    """Styling inputs supplied by the user for one generation run."""

    model_config = ConfigDict(frozen=True)

    gender: Optional[Literal["female", "male"]] = None
    age: Optional[int] = Field(default=None, ge=0, le=120)
    style: str = "casual"
    occasion: str = "everyday"
    temperature: Literal["cold", "mild", "hot"] = "mild"
    rain: bool = False
    fit_preference: Optional[Literal["fitted", "loose"]] = None
    audacity: Literal["low", "medium", "high"] = "medium"
    color_preference: Optional[str] = None
    budget: float = Field(gt=0)


def required_slots(profile: StyleProfile) -> List[Slot]:
    """Return the ordered slots an outfit must fill for this profile.

    Order drives budget amortisation, so outerwear added for rain goes first.
    """

    slots = list(TEMPERATURE_SLOTS.get(profile.temperature, DEFAULT_SLOTS))
    if profile.rain and Slot.OUTERWEAR not in slots:
        slots.insert(0, Slot.OUTERWEAR)
    logger.debug("Required slots for temperature=%s rain=%s: %s", profile.temperature, profile.rain, slots)
    return slots


__all__ = ["StyleProfile", "required_slots"]
