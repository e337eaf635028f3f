"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.candidate import Candidate
from models.outfit import GeneratedLook, LookVariant, Outfit, outfit_signature
from models.profile import StyleProfile, required_slots

__all__ = [
    "Candidate",
    "GeneratedLook",
    "LookVariant",
    "Outfit",
    "StyleProfile",
    "outfit_signature",
    "required_slots",
]
