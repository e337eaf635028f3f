"""Orchestration: rendering fallbacks, emergency outfit and total failure."""

import random
from types import SimpleNamespace

import pytest

from agents.look_orchestrator import LookGenerationError, LookOrchestrator
from agents.look_renderer import GeminiLookRenderer, LookRenderer, RenderError, build_render_prompt
from logic.outfit_composer import OutfitComposer
from lookbook_app.config import LookbookConfig
from models.profile import StyleProfile
from tools.catalog_provider import CatalogUnavailableError, StaticCatalogProvider

CATALOG = [
    {"id": "t1", "title": "Cotton T-shirt", "brand": "Basic", "price": 20, "image": "https://img.example.com/t1.jpg"},
    {"id": "t2", "title": "Linen Shirt", "brand": "Maison", "price": 45, "image": "https://img.example.com/t2.jpg"},
    {"id": "b1", "title": "Straight Jean", "brand": "Denim Co", "price": 60, "image": "https://img.example.com/b1.jpg"},
    {"id": "b2", "title": "Pleated Skirt", "brand": "Maison", "price": 55, "image": "https://img.example.com/b2.jpg"},
    {"id": "s1", "title": "Canvas Sneaker", "brand": "Run", "price": 70, "image": "https://img.example.com/s1.jpg"},
    {"id": "s2", "title": "Leather Loafer", "brand": "Pied", "price": 95, "image": "https://img.example.com/s2.jpg"},
]


class RecordingRenderer(LookRenderer):
    model_name = "fake-render"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    def render(self, profile, items, reference_images=()):
        self.calls += 1
        if self.fail:
            raise RenderError("image model refused")
        return f"data:image/png;base64,look{self.calls}"


def _orchestrator(records, renderer=None, target=3) -> LookOrchestrator:
    return LookOrchestrator(
        config=LookbookConfig(target_look_count=target, render_enabled=renderer is not None),
        catalog_provider=StaticCatalogProvider(records),
        composer=OutfitComposer(),
        renderer=renderer,
        image_fetcher=lambda urls: [],
    )


def test_generate_look_returns_primary_and_alternatives() -> None:
    renderer = RecordingRenderer()
    profile = StyleProfile(gender="female", age=28, temperature="mild", budget=300)

    look = _orchestrator(CATALOG, renderer).generate_look(profile, rng=random.Random(2))

    payload = look.to_dict()
    assert payload["image_url"].startswith("data:image/png;base64,")
    assert payload["debug"]["generated_looks"] == 1 + len(look.alternatives)
    assert payload["debug"]["requested_looks"] == 3
    assert payload["debug"]["render_model"] == "fake-render"
    assert renderer.calls == payload["debug"]["generated_looks"]


def test_render_failure_uses_first_item_image() -> None:
    profile = StyleProfile(temperature="mild", budget=300)

    look = _orchestrator(CATALOG, RecordingRenderer(fail=True)).generate_look(profile, rng=random.Random(2))

    assert look.primary.rendered is False
    assert look.primary.image_url == look.primary.outfit.items[0].image


def test_placeholder_url_when_items_have_no_image() -> None:
    records = [{k: v for k, v in record.items() if k != "image"} for record in CATALOG]
    orchestrator = _orchestrator(records)

    look = orchestrator.generate_look(StyleProfile(temperature="mild", budget=300), rng=random.Random(0))

    assert look.primary.image_url == orchestrator.config.placeholder_image_url


def test_emergency_outfit_when_budget_is_unreachable() -> None:
    look = _orchestrator(CATALOG).generate_look(StyleProfile(temperature="mild", budget=30), rng=random.Random(0))

    assert look.primary.outfit.path == "emergency"
    assert [item.id for item in look.primary.outfit.items] == ["t1", "b2", "s1"]
    assert look.alternatives == []


def test_total_failure_raises_look_generation_error() -> None:
    tops_only = [record for record in CATALOG if record["id"].startswith("t")]

    with pytest.raises(LookGenerationError):
        _orchestrator(tops_only).generate_look(StyleProfile(temperature="mild", budget=300))


def test_empty_catalog_is_unavailable() -> None:
    with pytest.raises(CatalogUnavailableError):
        _orchestrator([{"title": "no price"}]).generate_look(StyleProfile(budget=100))


def test_gemini_renderer_returns_data_uri() -> None:
    inline = SimpleNamespace(mime_type="image/png", data=b"\x89PNG")
    response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(inline_data=inline)]))])
    model = SimpleNamespace(generate_content=lambda contents: response)
    renderer = GeminiLookRenderer(LookbookConfig(), model=model)
    items = StaticCatalogProvider(CATALOG).load_candidates()[:3]

    image_url = renderer.render(StyleProfile(gender="male", budget=200), items)

    assert image_url == "data:image/png;base64,iVBORw=="


def test_gemini_renderer_without_image_raises() -> None:
    response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(inline_data=None)]))])
    renderer = GeminiLookRenderer(LookbookConfig(), model=SimpleNamespace(generate_content=lambda contents: response))

    with pytest.raises(RenderError):
        renderer.render(StyleProfile(budget=200), [])


def test_render_prompt_describes_every_garment() -> None:
    items = StaticCatalogProvider(CATALOG).load_candidates()[:2]

    prompt = build_render_prompt(StyleProfile(gender="female", age=41, style="chic", budget=200), items)

    assert "- Cotton T-shirt (Basic)" in prompt
    assert "- Linen Shirt (Maison)" in prompt
    assert "woman" in prompt
    assert "41 years old" in prompt
