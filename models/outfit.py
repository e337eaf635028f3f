"""Outfit and rendered look schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from models.candidate import Candidate


def outfit_signature(items: Sequence[Candidate]) -> str:
    """Sorted concatenation of exclusion keys identifying an outfit."""

    return "|".join(sorted(item.exclusion_key for item in items))


def total_price(items: Sequence[Candidate]) -> float:
    return round(sum(item.price for item in items), 2)


@dataclass
class Outfit:
    items: List[Candidate]
    look_index: int
    path: str
    relaxed: bool = False

    @property
    def total_price(self) -> float:
        return total_price(self.items)

    @property
    def signature(self) -> str:
        return outfit_signature(self.items)

    @property
    def exclusion_keys(self) -> List[str]:
        return [item.exclusion_key for item in self.items]


@dataclass
class LookVariant:
    image_url: str
    outfit: Outfit
    rendered: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image_url": self.image_url,
            "rendered": self.rendered,
            "total_price": self.outfit.total_price,
            "path": self.outfit.path,
            "items": [
                {
                    "id": item.id,
                    "title": item.title,
                    "brand": item.brand,
                    "slot": item.slot.value,
                    "price": item.price,
                    "currency": item.currency,
                    "image": item.image,
                    "link": item.link,
                }
                for item in self.outfit.items
            ],
        }


@dataclass
class GeneratedLook:
    primary: LookVariant
    alternatives: List[LookVariant] = field(default_factory=list)
    debug: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.primary.to_dict(),
            "alternatives": [variant.to_dict() for variant in self.alternatives],
            "debug": self.debug,
        }
