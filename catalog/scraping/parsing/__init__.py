"""
Role-specific extractors for catalog content.
"""

from catalog.scraping.parsing.html_parsers import StorefrontHTMLParser
from catalog.scraping.parsing.json_parsers import StoreAPIParser
from catalog.scraping.parsing.rules import Document, ExtractionError, FieldRule, first_match

__all__ = [
    "Document",
    "ExtractionError",
    "FieldRule",
    "StoreAPIParser",
    "StorefrontHTMLParser",
    "first_match",
]
