"""Catalog provider abstractions and implementations.

Providers only move raw feed records; turning them into candidates is the
job of :mod:`logic.catalog_normalizer`. Multi-source providers read their
sources concurrently and tolerate individual source failures.
"""

from __future__ import annotations

import contextvars
import json
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Sequence

import requests

from logic.catalog_normalizer import extract_raw_records, normalize_catalog
from models.candidate import Candidate
from tools.observability import instrument_tool

LOGGER = logging.getLogger(__name__)
MAX_FETCH_WORKERS = 8


class CatalogUnavailableError(RuntimeError):
    """Raised when no catalog source yields a usable product."""


def _fan_out(sources: Sequence[str], fetch: Callable[[str], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Fetch every source concurrently, skipping the ones that fail."""

    if not sources:
        return []
    records: List[Dict[str, Any]] = []
    with ThreadPoolExecutor(max_workers=min(MAX_FETCH_WORKERS, len(sources))) as executor:
        futures = {
            source: executor.submit(contextvars.copy_context().run, fetch, source) for source in sources
        }
        for source, future in futures.items():
            try:
                records.extend(future.result())
            except (OSError, ValueError, requests.RequestException) as exc:
                LOGGER.warning("Catalog source failed", extra={"source": source, "error": str(exc)})
    return records


class CatalogProvider(ABC):
    """Abstract catalog provider interface."""

    @abstractmethod
    def fetch_records(self) -> List[Dict[str, Any]]:
        """Return raw product records from the upstream feed."""

    def load_candidates(self) -> List[Candidate]:
        """Fetch and normalise the catalog into a candidate pool."""

        candidates = normalize_catalog(self.fetch_records())
        if not candidates:
            raise CatalogUnavailableError("No usable catalog product")
        return candidates


class StaticCatalogProvider(CatalogProvider):
    """In-memory provider returning canned records for tests and demos."""

    def __init__(self, records: Iterable[Dict[str, Any]]) -> None:
        self.records = list(records)

    def fetch_records(self) -> List[Dict[str, Any]]:
        return list(self.records)


class JsonFileCatalogProvider(CatalogProvider):
    """Read one or more JSON catalog exports from disk."""

    def __init__(self, paths: Sequence[str | Path]) -> None:
        self.paths = [str(path) for path in paths]

    @staticmethod
    def _read(path: str) -> List[Dict[str, Any]]:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        records = extract_raw_records(payload)
        LOGGER.info("Loaded catalog file", extra={"path": path, "records": len(records)})
        return records

    @instrument_tool("read_catalog_files")
    def fetch_records(self) -> List[Dict[str, Any]]:
        return _fan_out(self.paths, self._read)


class HttpCatalogProvider(CatalogProvider):
    """Fetch catalog JSON from one or more HTTP endpoints."""

    def __init__(self, urls: Sequence[str], timeout_seconds: float = 10.0) -> None:
        self.urls = list(urls)
        self.timeout_seconds = timeout_seconds

    def _get(self, url: str) -> List[Dict[str, Any]]:
        response = requests.get(url, headers={"Accept": "application/json"}, timeout=self.timeout_seconds)
        response.raise_for_status()
        records = extract_raw_records(response.json())
        LOGGER.info("Fetched catalog page", extra={"url": url, "records": len(records)})
        return records

    @instrument_tool("fetch_catalog")
    def fetch_records(self) -> List[Dict[str, Any]]:
        return _fan_out(self.urls, self._get)


__all__ = [
    "CatalogProvider",
    "CatalogUnavailableError",
    "HttpCatalogProvider",
    "JsonFileCatalogProvider",
    "StaticCatalogProvider",
]
