"""
Price Parser.

Turns the free-text price sources publish ("Free", "$25", "$15-30",
"Pay what you wish") into integer cents.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation


class PriceParser:
    """Parse price display text into cents. Dollar prices only."""

    FREE_PATTERNS = [
        r"^\s*free\b",
        r"\bfree admission\b",
        r"\bfree entry\b",
        r"\bno charge\b",
    ]

    # "$25", "$ 25.50", "25 dollars"
    AMOUNT_PATTERN = re.compile(r"\$\s*(\d+(?:,\d{3})*(?:\.\d{1,2})?)|(\d+(?:\.\d{1,2})?)\s*(?:usd|dollars?)\b")

    @classmethod
    def is_free(cls, price_str: str | None) -> bool:
        """Check whether the price text announces a free event."""
        if not price_str:
            return False
        lower = price_str.lower()
        return any(re.search(p, lower) for p in cls.FREE_PATTERNS)

    @classmethod
    def amounts(cls, price_str: str | None) -> list[Decimal]:
        """All dollar amounts in the text, in order of appearance."""
        if not price_str:
            return []
        found: list[Decimal] = []
        for match in cls.AMOUNT_PATTERN.finditer(price_str.lower()):
            raw = (match.group(1) or match.group(2)).replace(",", "")
            try:
                found.append(Decimal(raw))
            except InvalidOperation:
                continue
        return found

    @classmethod
    def to_cents(cls, price_str: str | None) -> int | None:
        """
        Parse price text into cents.

        - "Free" -> 0
        - "$25" -> 2500
        - "$15-30" / "$15 / $30" -> 1500 (first amount)
        - "Pay what you wish" -> None

        Args:
            price_str: Price display text

        Returns:
            Cents as int, or None when no price can be determined
        """
        if cls.is_free(price_str):
            return 0
        found = cls.amounts(price_str)
        if not found:
            return None
        return int((found[0] * 100).to_integral_value())
