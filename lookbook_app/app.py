"""Lookbook app bootstrap."""

from __future__ import annotations

import logging
import random
from typing import Optional

from agents.look_orchestrator import LookOrchestrator
from agents.look_renderer import GeminiLookRenderer, LookRenderer
from agents.outfit_ranker import GeminiOutfitRanker, OutfitRanker
from logic.outfit_composer import OutfitComposer
from lookbook_app.config import LookbookConfig
from lookbook_app.logging_config import configure_logging, get_logger, log_event
from models.outfit import GeneratedLook
from models.profile import StyleProfile
from tools.catalog_provider import (
    CatalogProvider,
    HttpCatalogProvider,
    JsonFileCatalogProvider,
    StaticCatalogProvider,
)

LOGGER = get_logger(__name__)


class LookbookApp:
    """Wires together the catalog provider, composer, ranker and renderer."""

    def __init__(
        self,
        config: LookbookConfig | None = None,
        catalog_provider: CatalogProvider | None = None,
        ranker: OutfitRanker | None = None,
        renderer: LookRenderer | None = None,
    ) -> None:
        self.config = config or LookbookConfig.from_env()
        configure_logging()

        self.catalog_provider = catalog_provider or self._build_catalog_provider()
        self.ranker = ranker if ranker is not None else self._build_ranker()
        self.renderer = renderer if renderer is not None else self._build_renderer()
        self.composer = OutfitComposer(
            ranker=self.ranker,
            currency=self.config.currency,
            shortlist_limit=self.config.shortlist_limit,
        )
        self.orchestrator = LookOrchestrator(
            config=self.config,
            catalog_provider=self.catalog_provider,
            composer=self.composer,
            renderer=self.renderer,
        )
        log_event(
            LOGGER,
            logging.INFO,
            "app_initialised",
            environment=self.config.environment or "local",
            ranker_model=getattr(self.ranker, "model_name", None),
            render_model=getattr(self.renderer, "model_name", None),
            catalog_provider=type(self.catalog_provider).__name__,
        )

    def _build_catalog_provider(self) -> CatalogProvider:
        if self.config.catalog_urls:
            return HttpCatalogProvider(self.config.catalog_urls, timeout_seconds=self.config.request_timeout_seconds)
        if self.config.catalog_paths:
            return JsonFileCatalogProvider(self.config.catalog_paths)
        LOGGER.warning("No catalog source configured; using an empty catalog")
        return StaticCatalogProvider([])

    def _build_ranker(self) -> Optional[OutfitRanker]:
        if not self.config.ranker_enabled:
            return None
        return GeminiOutfitRanker(self.config)

    def _build_renderer(self) -> Optional[LookRenderer]:
        if not self.config.render_enabled:
            return None
        return GeminiLookRenderer(self.config)

    def generate_look(self, profile: StyleProfile, seed: int | None = None) -> GeneratedLook:
        """Generate looks for a profile; ``seed`` makes fallbacks reproducible."""

        rng = random.Random(seed) if seed is not None else None
        return self.orchestrator.generate_look(profile, rng=rng)


__all__ = ["LookbookApp"]
