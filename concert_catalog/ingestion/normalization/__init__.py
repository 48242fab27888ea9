"""Normalization helpers applied to extracted records before resolution."""

from concert_catalog.ingestion.normalization.currency import PriceParser

__all__ = ["PriceParser"]
