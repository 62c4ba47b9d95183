"""
Ordered extraction rules: each field is a priority list of strategies and the
first non-empty result wins.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from bs4 import BeautifulSoup

D = TypeVar("D")

WHITESPACE_RE = re.compile(r"\s+")


class ExtractionError(RuntimeError):
    """
    Raised when content does not have the shape its role requires.
    """


@dataclass(frozen=True)
class Document:
    """
    Raw markup plus its parsed tree, so rules can use selectors or patterns.
    """

    content: str
    soup: BeautifulSoup

    @classmethod
    def parse(cls, content: str) -> "Document":
        return cls(content=content, soup=BeautifulSoup(content, "html.parser"))


@dataclass(frozen=True)
class FieldRule(Generic[D]):
    """
    One named strategy for one field.
    """

    name: str
    extract: Callable[[D], str | None]


def first_match(rules: Sequence[FieldRule[D]], document: D) -> str | None:
    """
    Return the first non-empty value produced by `rules`, in order.
    """

    for rule in rules:
        value = rule.extract(document)
        if value is not None:
            value = clean_text(value)
        if value:
            return value
    return None


def clean_text(value: str) -> str:
    return WHITESPACE_RE.sub(" ", html.unescape(value)).strip()
