"""
Extraction output validation.

The extraction service returns a JSON array of concert objects as text. This
module turns that text (or already-structured records from API sources) into
validated ExtractedConcert objects, dropping what cannot be used:

- records without a title or date
- records that fail schema validation
- tags outside the fixed vocabulary
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from concert_catalog.errors import ExtractionError
from concert_catalog.ingestion.normalization.currency import PriceParser
from concert_catalog.schemas.concert import (
    PRICE_PLACEHOLDER,
    VALID_TAGS,
    ExtractedConcert,
)

logger = logging.getLogger(__name__)

_CODE_FENCE_START = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_CODE_FENCE_END = re.compile(r"\n?```\s*$")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _CODE_FENCE_START.sub("", stripped)
        stripped = _CODE_FENCE_END.sub("", stripped)
    return stripped.strip()


def parse_extraction_output(
    text: str, source_name: str, source_url: str = ""
) -> List[ExtractedConcert]:
    """
    Parse the extraction service's text output for one source.

    Raises:
        ExtractionError: If the text is not JSON or not a JSON array
    """
    payload = strip_code_fence(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ExtractionError(source_name, f"invalid JSON ({e.msg})", payload[:500]) from e

    if not isinstance(data, list):
        raise ExtractionError(
            source_name, f"expected a JSON array, got {type(data).__name__}", payload[:200]
        )

    concerts = validate_records(data, source_name)
    logger.info(f"Parsed {len(concerts)}/{len(data)} concerts from {source_name} ({source_url})")
    return concerts


def validate_records(records: Iterable[Any], source_name: str) -> List[ExtractedConcert]:
    """Validate raw record dicts for one source, skipping unusable ones."""
    concerts: List[ExtractedConcert] = []
    for raw in records:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping non-object record from {source_name}: {raw!r:.80}")
            continue

        if not raw.get("title") or not raw.get("date"):
            logger.warning(
                f"Skipping incomplete concert from {source_name}: {raw.get('title')!r}"
            )
            continue

        try:
            concerts.append(ExtractedConcert.model_validate(_clean(raw, source_name)))
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid concert from {source_name} ({raw.get('title')!r}): "
                f"{e.error_count()} validation error(s)"
            )
    return concerts


def _clean(raw: Dict[str, Any], source_name: str) -> Dict[str, Any]:
    data = dict(raw)

    # Single-venue sources often omit the venue per event
    if not str(data.get("venue") or "").strip():
        data["venue"] = source_name

    price = str(data.get("price") or "").strip()
    data["price"] = price or PRICE_PLACEHOLDER
    if data.get("price_cents") is None:
        data["price_cents"] = PriceParser.to_cents(price)

    tags = data.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]
    kept = [t for t in tags if str(t).strip().lower() in VALID_TAGS]
    if len(kept) != len(tags):
        dropped = sorted({str(t) for t in tags} - {str(t) for t in kept})
        logger.debug(f"Dropping unknown tags from {source_name}: {dropped}")
    data["tags"] = kept
    return data
