"""Photorealistic look rendering through a Gemini image model."""
from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai

from lookbook_app.config import LookbookConfig
from lookbook_app.logging_config import get_logger, log_event
from logic.safety import RENDER_GUARDRAILS
from models.candidate import Candidate
from models.profile import StyleProfile

logger = get_logger(__name__)

PROMPT_TEMPLATE = """Generate an ultra photorealistic street style photo (as if taken during Fashion Week), full body from head to toe with shoes visible, showing a {subject} wearing exactly the garments visible in the reference images provided.

GARMENTS (PRIORITY CONSTRAINT)
Wear EXACTLY and ONLY all of the following garments:
{clothing_description}

CLIENT CONTEXT
Age: {age}
Style: {style}
Occasion: {occasion}
Weather: {weather}
Audacity: {audacity}

RULES
{guardrails}

POSE
Authentic street style, confident posture

SETTING
Sober, minimalist Parisian street without a crowd

LIGHT
Natural outdoor light, realistic skin, no plastic effect

FRAMING
Vertical photo, centred full body, shallow depth of field

NEGATIVE PROMPT:
illustration, cartoon, anime, CGI, 3D, plastic rendering, unrealistic proportions, deformed body, deformed hands, low-res, watermark, logo, text, crowd, studio, invented garments, color change, cropped feet, cut off head, half body
"""

REFERENCE_HINT = (
    "Also use the attached product reference images to reproduce the garments faithfully "
    "(cut, materials, patterns, details, colors)."
)

_SUBJECTS = {"female": "woman", "male": "man"}


class RenderError(RuntimeError):
    """Raised when the image model does not return a rendered look."""


class LookRenderer(ABC):
    """Turns an outfit into an image URL."""

    model_name: str = "unknown"

    @abstractmethod
    def render(
        self,
        profile: StyleProfile,
        items: Sequence[Candidate],
        reference_images: Sequence[Dict[str, object]] = (),
    ) -> str:
        """Return an image URL (usually a ``data:`` URI) or raise :class:`RenderError`."""


def describe_clothing(items: Sequence[Candidate]) -> str:
    lines = []
    for item in items:
        color = f" in {item.color}" if item.color else ""
        lines.append(f"- {item.title} ({item.brand}){color}, {item.category or item.slot.value}")
    return "\n".join(lines)


def build_render_prompt(profile: StyleProfile, items: Sequence[Candidate]) -> str:
    weather = f"{profile.temperature}, rainy" if profile.rain else profile.temperature
    return PROMPT_TEMPLATE.format(
        subject=_SUBJECTS.get(profile.gender or "", "person"),
        clothing_description=describe_clothing(items),
        age=f"{profile.age} years old" if profile.age is not None else "adult",
        style=profile.style,
        occasion=profile.occasion,
        weather=weather,
        audacity=profile.audacity,
        guardrails="\n".join(f"- {rule}" for rule in RENDER_GUARDRAILS),
    )


def extract_inline_image(response: Any) -> Optional[str]:
    """Return the first inline image of a response as a ``data:`` URI."""

    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if not data:
                continue
            mime_type = getattr(inline, "mime_type", None) or "image/png"
            if isinstance(data, str):
                encoded = data
            else:
                encoded = base64.b64encode(data).decode("ascii")
            return f"data:{mime_type};base64,{encoded}"
    return None


class GeminiLookRenderer(LookRenderer):
    """Render a look with a Gemini image generation model."""

    def __init__(self, config: LookbookConfig, model: Any | None = None) -> None:
        self.config = config
        self.model_name = config.render_model
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            if self.config.api_key:
                genai.configure(api_key=self.config.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def render(
        self,
        profile: StyleProfile,
        items: Sequence[Candidate],
        reference_images: Sequence[Dict[str, object]] = (),
    ) -> str:
        prompt = build_render_prompt(profile, items)
        contents: List[Any] = [f"{prompt}\n\n{REFERENCE_HINT}" if reference_images else prompt]
        contents.extend(reference_images)
        log_event(
            logger,
            logging.INFO,
            "render_started",
            model=self.model_name,
            reference_images=len(reference_images),
            garments=len(items),
        )
        try:
            response = self._get_model().generate_content(contents)
        except Exception as exc:  # noqa: BLE001
            raise RenderError(f"Render call failed: {exc}") from exc

        image_url = extract_inline_image(response)
        if not image_url:
            raise RenderError("Render reply did not contain an image")
        return image_url


__all__ = [
    "GeminiLookRenderer",
    "LookRenderer",
    "PROMPT_TEMPLATE",
    "RenderError",
    "build_render_prompt",
    "describe_clothing",
    "extract_inline_image",
]
