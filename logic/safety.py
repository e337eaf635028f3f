"""Centralised guardrails shared by the ranker and renderer prompts."""

from __future__ import annotations

from typing import List

RANKER_GUARDRAILS: List[str] = [
    "Pick exactly one product per slot listed in requiredSlots, only among the candidates provided.",
    "Use ONLY the ids listed in allowedIdsBySlot for that slot.",
    "The total price must be <= budgetMax (tolerance included).",
    "Exclude children's products (category mentions girl/boy/kids or the title mentions a child).",
    "Favour categories matching the profile gender.",
    "Never invent an id, a slot, a product or a price.",
]

RANKER_SOFT_GOALS: List[str] = [
    "Respect the style, occasion, temperature, audacity and color preference, and keep the outfit coherent.",
    "Avoid two strong patterns when audacity is low.",
]

RENDER_GUARDRAILS: List[str] = [
    "Wear EXACTLY and ONLY the garments described and shown in the reference images.",
    "Reproduce cut, materials, colors, patterns, seams, length and details without modification.",
    "Full body framing: head and feet fully visible, shoes visible.",
    "No invented garments, no color changes, no added logos or text.",
]


def system_instruction(role_hint: str) -> str:
    """Compose a consistent system prompt with boundary reminders."""

    boundary_text = "\n".join(f"- {bullet}" for bullet in RANKER_GUARDRAILS)
    return (
        f"You are the lookbook {role_hint}.\n"
        "Hard constraints:\n"
        f"{boundary_text}\n"
        "Reply with strict JSON only, no text around it."
    )


__all__ = ["system_instruction", "RANKER_GUARDRAILS", "RANKER_SOFT_GOALS", "RENDER_GUARDRAILS"]
