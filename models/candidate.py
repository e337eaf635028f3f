"""Canonical catalog candidate data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.taxonomy import Slot


@dataclass(frozen=True)
class Candidate:
    """A normalised catalog product eligible for an outfit slot.

    ``exclusion_key`` groups size and color variants of the same garment so
    that outfits within one generation run never repeat a piece.
    """

    id: str
    title: str
    brand: str
    image: str
    link: str
    price: float
    currency: str
    category: str
    slot: Slot
    exclusion_key: str
    availability: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if self.price <= 0:
            raise ValueError(f"Candidate {self.id} must have a positive price, got {self.price}")

    @property
    def text(self) -> str:
        """Combined category, title and description used by keyword filters."""

        return f"{self.category} {self.title} {self.description or ''}"

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-safe record shared with the assisted ranker."""

        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "brand": self.brand,
            "price": self.price,
            "currency": self.currency,
            "category": self.category,
            "affiliateUrl": self.link,
            "image": self.image,
            "availability": self.availability,
        }


__all__ = ["Candidate"]
