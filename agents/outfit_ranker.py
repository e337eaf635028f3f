"""Assisted outfit ranking backed by a Gemini model.

The ranker is a pure request/response boundary: it formats the shortlist,
asks the model for one pick per slot and checks that the reply has the
expected shape. Deciding whether the picks are acceptable is left to the
outfit composer.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

import google.generativeai as genai
from pydantic import ValidationError

from lookbook_app.config import LookbookConfig
from lookbook_app.logging_config import get_logger, log_event
from logic.safety import RANKER_SOFT_GOALS, system_instruction
from logic.validation import RankedOutfit, RankingRequest, validation_failure

logger = get_logger(__name__)

REPLY_TEMPLATE = {
    "outfit": [{"slot": "outerwear", "id": "...", "reason": ["..."]}],
    "totalPrice": 0,
    "notes": ["..."],
}


class RankerError(RuntimeError):
    """Raised when the assisted ranker cannot produce a usable reply."""


class RankerResponseError(RankerError):
    """Raised when the ranker reply is not valid JSON of the expected shape."""


class OutfitRanker(ABC):
    """Narrow interface to an external outfit decision service."""

    model_name: str = "unknown"

    @abstractmethod
    def rank(self, request: RankingRequest) -> RankedOutfit:
        """Return one pick per required slot or raise :class:`RankerError`."""


def extract_response_text(response: Any) -> str:
    """Return the first text part of a ``generate_content`` response."""

    try:
        text = getattr(response, "text", None)
    except ValueError:
        text = None
    if isinstance(text, str) and text:
        return text
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            part_text = getattr(part, "text", None)
            if isinstance(part_text, str) and part_text:
                return part_text
    return ""


def parse_ranked_outfit(text: str) -> RankedOutfit:
    """Parse a JSON reply, tolerating markdown code fences."""

    cleaned = text.strip()
    if "```json" in cleaned:
        cleaned = cleaned.split("```json")[1].split("```")[0]
    elif "```" in cleaned:
        cleaned = cleaned.split("```")[1].split("```")[0]
    try:
        payload = json.loads(cleaned.strip())
    except json.JSONDecodeError as exc:
        raise RankerResponseError(f"Ranker reply is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise RankerResponseError("Ranker reply must be a JSON object")
    try:
        return RankedOutfit.model_validate(payload)
    except ValidationError as exc:
        details = validation_failure("Ranker reply failed validation", exc)
        raise RankerResponseError(f"{details['message']}: {details['details']}") from exc


def build_ranking_prompt(request: RankingRequest) -> str:
    payload: Dict[str, Any] = request.to_prompt_payload()
    soft_goals = "\n".join(f"- {goal}" for goal in RANKER_SOFT_GOALS)
    variation = request.variation_instruction or "Neutral take."
    sections = [
        "Your mission: choose exactly 1 product per slot in requiredSlots, only among the candidates provided.",
        f"SOFT GOALS:\n{soft_goals}\n- {variation}",
        f"PROFILE:\n{json.dumps(payload['profile'], ensure_ascii=False)}",
        f"requiredSlots:\n{json.dumps(payload['requiredSlots'])}",
        f"budgetMax:\n{payload['budgetMax']}",
        f"allowedIdsBySlot:\n{json.dumps(payload['allowedIdsBySlot'], ensure_ascii=False)}",
        f"candidatesBySlot:\n{json.dumps(payload['candidatesBySlot'], ensure_ascii=False)}",
        f"STRICT JSON REPLY (no text around it):\n{json.dumps(REPLY_TEMPLATE)}",
    ]
    return "\n\n".join(sections)


class GeminiOutfitRanker(OutfitRanker):
    """Ask a Gemini model to pick one candidate per slot."""

    def __init__(self, config: LookbookConfig, model: Any | None = None) -> None:
        self.config = config
        self.model_name = config.ranker_model
        self.system_instruction = system_instruction(
            "stylist and ranking engine. Pick products from the shortlist only"
        )
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            if self.config.api_key:
                genai.configure(api_key=self.config.api_key)
            self._model = genai.GenerativeModel(
                self.model_name,
                system_instruction=self.system_instruction,
                generation_config={"temperature": 0, "response_mime_type": "application/json"},
            )
        return self._model

    def rank(self, request: RankingRequest) -> RankedOutfit:
        prompt = build_ranking_prompt(request)
        try:
            response = self._get_model().generate_content(prompt)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.WARNING, "ranker_call_failed", model=self.model_name, error=str(exc))
            raise RankerError(f"Ranker call failed: {exc}") from exc

        text = extract_response_text(response)
        if not text:
            raise RankerResponseError("Ranker reply was empty")
        ranked = parse_ranked_outfit(text)
        log_event(
            logger,
            logging.INFO,
            "ranker_reply_parsed",
            model=self.model_name,
            picks=[f"{pick.slot}:{pick.id}" for pick in ranked.outfit],
        )
        return ranked


__all__ = [
    "GeminiOutfitRanker",
    "OutfitRanker",
    "RankerError",
    "RankerResponseError",
    "build_ranking_prompt",
    "extract_response_text",
    "parse_ranked_outfit",
]
