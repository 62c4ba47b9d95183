"""
Normalization layer exports.
"""

from catalog.scraping.normalization.product_normalizer import ProductNormalizer, parse_price

__all__ = ["ProductNormalizer", "parse_price"]
