"""End-to-end look generation: catalog, outfits, rendering."""
from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Sequence

from agents.look_renderer import LookRenderer, RenderError
from logic.catalog_normalizer import pool_summary
from logic.diversification import EMERGENCY, RunContext, build_emergency_outfit, generate_diverse_outfits
from logic.outfit_composer import OutfitComposer
from lookbook_app.config import LookbookConfig
from lookbook_app.logging_config import get_logger, log_event, operation_context
from models.candidate import Candidate
from models.outfit import GeneratedLook, LookVariant, Outfit
from models.profile import StyleProfile
from tools.catalog_provider import CatalogProvider
from tools.image_fetcher import fetch_reference_images

logger = get_logger(__name__)

RULES_VERSION = "2.0"

ImageFetcher = Callable[[Sequence[str]], List[Dict[str, object]]]


class LookGenerationError(RuntimeError):
    """Raised when no outfit at all could be produced for a profile."""


class LookOrchestrator:
    """Coordinates the composition engine with the catalog and the renderer."""

    def __init__(
        self,
        config: LookbookConfig,
        catalog_provider: CatalogProvider,
        composer: OutfitComposer,
        renderer: Optional[LookRenderer] = None,
        image_fetcher: Optional[ImageFetcher] = None,
    ) -> None:
        self.config = config
        self.catalog_provider = catalog_provider
        self.composer = composer
        self.renderer = renderer
        self.image_fetcher = image_fetcher or (
            lambda urls: fetch_reference_images(urls, timeout=config.request_timeout_seconds)
        )

    def build_outfits(
        self, pool: Sequence[Candidate], profile: StyleProfile, rng: Optional[random.Random] = None
    ) -> RunContext:
        """Run the diversification loop and fall back to the emergency outfit."""

        context = generate_diverse_outfits(
            pool,
            profile,
            self.composer,
            context=RunContext(target_count=self.config.target_look_count),
            rng=rng,
        )
        if context.outfits:
            return context

        emergency_items = build_emergency_outfit(pool, profile, currency=self.config.currency)
        if not emergency_items:
            raise LookGenerationError("Unable to compose any outfit from the current catalog")
        log_event(
            logger,
            logging.WARNING,
            "emergency_outfit_used",
            picks=[f"{item.slot.value}:{item.id}" for item in emergency_items],
            total_price=round(sum(item.price for item in emergency_items), 2),
            budget=profile.budget,
        )
        context.accept(Outfit(items=emergency_items, look_index=0, path=EMERGENCY, relaxed=True))
        return context

    def render_outfit(self, profile: StyleProfile, outfit: Outfit) -> LookVariant:
        """Render one outfit, substituting a placeholder image on failure."""

        if self.renderer is not None:
            try:
                references = self.image_fetcher([item.image for item in outfit.items])
                image_url = self.renderer.render(profile, outfit.items, references)
                return LookVariant(image_url=image_url, outfit=outfit)
            except RenderError as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "render_failed_placeholder",
                    look_index=outfit.look_index,
                    error=str(exc),
                )
        placeholder = next((item.image for item in outfit.items if item.image), None)
        return LookVariant(
            image_url=placeholder or self.config.placeholder_image_url,
            outfit=outfit,
            rendered=False,
        )

    def generate_look(self, profile: StyleProfile, rng: Optional[random.Random] = None) -> GeneratedLook:
        """Produce the primary look, its alternatives and a debug summary.

        Raises:
            CatalogUnavailableError: If the catalog yields no usable product.
            LookGenerationError: If neither the loop nor the emergency outfit
                produced anything.
        """

        with operation_context("orchestrator:generate_look") as correlation_id:
            pool = self.catalog_provider.load_candidates()
            summary = pool_summary(pool)
            log_event(logger, logging.INFO, "catalog_loaded", products=len(pool), by_slot=summary)

            context = self.build_outfits(pool, profile, rng=rng)
            variants = [self.render_outfit(profile, outfit) for outfit in context.outfits]
            primary, *alternatives = variants

            debug = {
                "rules_version": RULES_VERSION,
                "correlation_id": correlation_id,
                "ranker_model": getattr(self.composer.ranker, "model_name", None),
                "render_model": getattr(self.renderer, "model_name", None),
                "requested_looks": context.target_count,
                "generated_looks": len(variants),
                "rendered_looks": sum(1 for variant in variants if variant.rendered),
                "paths": [outfit.path for outfit in context.outfits],
                "attempts": len(context.attempts),
                "pool": summary,
            }
            log_event(logger, logging.INFO, "look_generated", **{k: v for k, v in debug.items() if k != "pool"})
            return GeneratedLook(primary=primary, alternatives=alternatives, debug=debug)


__all__ = ["LookGenerationError", "LookOrchestrator", "RULES_VERSION"]
