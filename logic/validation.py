"""Pydantic schemas for the assisted ranker contract and API payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.candidate import Candidate
from models.profile import StyleProfile
from models.taxonomy import Slot, budget_ceiling


class RankingRequest(BaseModel):
    """Everything the assisted ranker may see for one outfit."""

    profile: StyleProfile
    required_slots: List[Slot]
    budget_max: float = Field(gt=0)
    allowed_ids_by_slot: Dict[Slot, List[str]]
    candidates_by_slot: Dict[Slot, List[Dict[str, Any]]]
    variation_instruction: str = ""

    def to_prompt_payload(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.model_dump(),
            "requiredSlots": [slot.value for slot in self.required_slots],
            "budgetMax": self.budget_max,
            "allowedIdsBySlot": {slot.value: ids for slot, ids in self.allowed_ids_by_slot.items()},
            "candidatesBySlot": {slot.value: items for slot, items in self.candidates_by_slot.items()},
            "variationInstruction": self.variation_instruction,
        }


class RankedPick(BaseModel):
    """One slot choice in a ranker reply."""

    slot: str
    id: str
    reason: List[str] = []

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class RankedOutfit(BaseModel):
    """Structured reply expected from the assisted ranker."""

    model_config = ConfigDict(populate_by_name=True)

    outfit: List[RankedPick]
    total_price: Optional[float] = Field(default=None, alias="totalPrice")
    notes: List[str]


class ValidationResult(BaseModel):
    """Wrapper returned when a payload fails validation."""

    status: str = "invalid"
    message: str
    details: List[Dict[str, Any]]


def build_ranking_request(
    profile: StyleProfile,
    required_slots: List[Slot],
    candidates_by_slot: Dict[Slot, List[Candidate]],
    variation_instruction: str = "",
) -> RankingRequest:
    """Assemble the ranker request from shortlisted candidates."""

    return RankingRequest(
        profile=profile,
        required_slots=required_slots,
        budget_max=round(budget_ceiling(profile.budget), 2),
        allowed_ids_by_slot={
            slot: [candidate.id for candidate in candidates_by_slot.get(slot, [])] for slot in required_slots
        },
        candidates_by_slot={
            slot: [candidate.to_payload() for candidate in candidates_by_slot.get(slot, [])]
            for slot in required_slots
        },
        variation_instruction=variation_instruction,
    )


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent payload."""

    return ValidationResult(message=message, details=exc.errors(include_url=False)).model_dump()


__all__ = [
    "RankedOutfit",
    "RankedPick",
    "RankingRequest",
    "ValidationResult",
    "build_ranking_request",
    "validation_failure",
]
