"""
URL helpers for catalog links and pagination.
"""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit, urlunsplit


def absolute_url(base_url: str, reference: str) -> str:
    """
    Resolve `reference` against `base_url`; empty references stay empty.
    """

    reference = (reference or "").strip()
    if not reference or reference.startswith(("http://", "https://")):
        return reference
    if reference.startswith("//"):
        return f"{urlsplit(base_url).scheme or 'https'}:{reference}"
    return urljoin(f"{base_url.rstrip('/')}/", reference)


def strip_query(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def canonical_url(url: str) -> str:
    """
    Dedup key for a product link: lower-cased, without query, fragment or
    trailing slash.
    """

    parts = urlsplit(url.strip())
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path.lower(), "", ""))


def with_page(url: str, page_number: int) -> str:
    """
    Listing URL for `page_number`; page 1 is the bare category URL.
    """

    if page_number <= 1:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}page={page_number}"
