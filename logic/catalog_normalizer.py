"""Normalisation of heterogeneous affiliate feed records into candidates.

Feeds disagree on field names and nesting: a product may carry ``title`` or
``name``, a flat ``price`` or a ``Sale price`` custom field or only an offer
price history. Every resolver below walks a fixed alias chain and returns the
first usable value. All functions are pure.
"""
from __future__ import annotations

import hashlib
import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from models.candidate import Candidate
from models.taxonomy import DEFAULT_CURRENCY, infer_slot

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"-?\d+(?:[.,]\d+)?")
_LETTER_SIZE = r"(?:xxs|xs|s|m|l|xl|xxl|xxxl|[2-5]xl|one ?size|os|tu|taille unique)"
# Bare numbers only count as sizes in the clothing and shoe range; model
# numbers such as "Air Max 90" need an explicit size prefix to be stripped.
_BARE_NUMBER_SIZE = r"(?:\d{1,2}/\d{1,2}|[2-5]\d(?:[.,]5)?)"
_ANY_NUMBER_SIZE = r"(?:\d{1,2}/\d{1,2}|\d{1,3}(?:[.,]5)?)"
_TRAILING_SIZE = re.compile(
    rf"[\s_\-/]+(?:(?:size|taille)\s+\(?(?:{_LETTER_SIZE}|{_ANY_NUMBER_SIZE})\)?"
    rf"|\(?(?:{_LETTER_SIZE}|{_BARE_NUMBER_SIZE})\)?)$",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")


def _as_string(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _first_string(*values: Any) -> Optional[str]:
    for value in values:
        text = _as_string(value)
        if text:
            return text
    return None


def _first(sequence: Any) -> Mapping[str, Any]:
    if isinstance(sequence, list) and sequence and isinstance(sequence[0], Mapping):
        return sequence[0]
    return {}


def _field_value(raw: Mapping[str, Any], key: str) -> Optional[str]:
    """Return a custom field value from the ``fields`` name/value list."""

    fields = raw.get("fields")
    if not isinstance(fields, list):
        return None
    for entry in fields:
        if isinstance(entry, Mapping) and entry.get("name") == key:
            return _as_string(entry.get("value"))
    return None


def parse_price(value: Any) -> Optional[float]:
    """Parse a positive price from a number, numeric string or amount mapping."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Mapping):
        return parse_price(value.get("value", value.get("amount")))
    if isinstance(value, (int, float)):
        price = float(value)
    elif isinstance(value, str):
        match = _NUMBER_PATTERN.search(value.replace(" ", ""))
        if not match:
            return None
        price = float(match.group(0).replace(",", "."))
    else:
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def _last_price_entry(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    history = _first(raw.get("offers")).get("priceHistory")
    if isinstance(history, list) and history and isinstance(history[-1], Mapping):
        price = history[-1].get("price")
        if isinstance(price, Mapping):
            return price
    return {}


def resolve_price(raw: Mapping[str, Any]) -> Optional[float]:
    """Explicit price, then ``Sale price`` field, then latest offer price."""

    for value in (raw.get("price"), _field_value(raw, "Sale price"), _last_price_entry(raw).get("value")):
        price = parse_price(value)
        if price is not None:
            return price
    return None


def _stable_id(brand: str, title: str, category: str, price: float) -> str:
    digest = hashlib.sha1(f"{brand}|{title}|{category}|{price}".encode("utf-8")).hexdigest()
    return f"p_{digest[:12]}"


def _normalise_token(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip().lower()


def strip_size_tokens(value: str) -> str:
    """Remove trailing size-like tokens such as ``XL``, ``42`` or ``32/34``.

    Tokens are peeled one at a time from the end; every pass shortens the
    text, so the loop is bounded by its length.
    """

    text = value.strip()
    match = _TRAILING_SIZE.search(text)
    while match:
        text = text[: match.start()]
        match = _TRAILING_SIZE.search(text)
    return text.strip(" -_/")


def compute_exclusion_key(
    raw_id: str,
    brand: str,
    category: str,
    title: str,
    product_code: Optional[str] = None,
    group_id: Optional[str] = None,
) -> str:
    """Derive the identity shared by every size variant of one garment."""

    brand_key = _normalise_token(brand)
    if group_id:
        return f"{brand_key}:{_normalise_token(group_id)}"
    base = _normalise_token(strip_size_tokens(product_code or title or ""))
    if not base:
        return raw_id
    return f"{brand_key}:{_normalise_token(category)}:{base}"


def normalize_record(raw: Mapping[str, Any]) -> Optional[Candidate]:
    """Convert one raw feed record into a :class:`Candidate`.

    Returns ``None`` when the record has no title or no positive price.
    """

    if not isinstance(raw, Mapping):
        return None
    title = _first_string(raw.get("title"), raw.get("name"))
    price = resolve_price(raw)
    if not title or price is None:
        return None

    offer = _first(raw.get("offers"))
    first_category = _first(raw.get("categories"))
    product_image = raw.get("productImage") if isinstance(raw.get("productImage"), Mapping) else {}

    brand = _first_string(raw.get("brand"), raw.get("brandName"), raw.get("manufacturer")) or "Unknown"
    category = (
        _first_string(
            raw.get("category"),
            raw.get("productType"),
            raw.get("categoryName"),
            first_category.get("name"),
            _field_value(raw, "g:product_type"),
        )
        or "Unknown"
    )
    description = _first_string(raw.get("description"))
    product_code = _first_string(raw.get("mpn"), raw.get("sku"), _field_value(raw, "g:mpn"))
    raw_id = _first_string(
        raw.get("id"), _field_value(raw, "ProductoID"), _field_value(raw, "g:mpn"), offer.get("id")
    ) or _stable_id(brand, title, category, price)
    group_id = _first_string(
        raw.get("groupId"),
        raw.get("group_id"),
        raw.get("itemGroupId"),
        raw.get("item_group_id"),
        _field_value(raw, "g:item_group_id"),
    )

    return Candidate(
        id=raw_id,
        title=title,
        brand=brand,
        image=_first_string(
            raw.get("image"),
            raw.get("imageUrl"),
            product_image.get("url"),
            _first(raw.get("images")).get("url"),
            _field_value(raw, "g:additional_image_link"),
        )
        or "",
        link=_first_string(raw.get("affiliateUrl"), raw.get("productUrl"), raw.get("url"), offer.get("productUrl"))
        or "#",
        price=price,
        currency=(
            _first_string(raw.get("currency"), _last_price_entry(raw).get("currency")) or DEFAULT_CURRENCY
        ).upper(),
        category=category,
        slot=infer_slot(f"{category} {title} {description or ''}"),
        exclusion_key=compute_exclusion_key(raw_id, brand, category, title, product_code, group_id),
        availability=_first_string(raw.get("availability"), offer.get("availability")),
        description=description,
        color=_first_string(raw.get("color"), _field_value(raw, "g:color")),
    )


def extract_raw_records(payload: Any) -> List[Dict[str, Any]]:
    """Return the product list from a bare list or an ``items``/``products`` envelope."""

    if isinstance(payload, list):
        return [record for record in payload if isinstance(record, dict)]
    if isinstance(payload, dict):
        for key in ("items", "products"):
            if isinstance(payload.get(key), list):
                return [record for record in payload[key] if isinstance(record, dict)]
    return []


def normalize_catalog(records: Iterable[Mapping[str, Any]]) -> List[Candidate]:
    """Normalise records, drop unusable ones and keep the first of each id."""

    candidates: Dict[str, Candidate] = {}
    dropped = 0
    for raw in records:
        candidate = normalize_record(raw)
        if candidate is None:
            dropped += 1
            continue
        candidates.setdefault(candidate.id, candidate)
    logger.info("Normalised catalog: %s candidates kept, %s records dropped", len(candidates), dropped)
    return list(candidates.values())


def pool_summary(pool: Sequence[Candidate]) -> Dict[str, int]:
    """Count candidates per slot for diagnostics."""

    summary: Dict[str, int] = {}
    for candidate in pool:
        summary[candidate.slot.value] = summary.get(candidate.slot.value, 0) + 1
    return summary


__all__ = [
    "compute_exclusion_key",
    "extract_raw_records",
    "normalize_catalog",
    "normalize_record",
    "parse_price",
    "pool_summary",
    "resolve_price",
    "strip_size_tokens",
]
