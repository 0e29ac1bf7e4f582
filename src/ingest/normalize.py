"""Normalize saved article data."""
from typing import Optional
from urllib.parse import urlsplit


def extract_domain(url: Optional[str]) -> str:
    """Hostname of ``url``, lowercased with a leading ``www.`` removed.

    Returns "" for a missing or unparseable URL; never raises.
    """
    if not url:
        return ""
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        return ""
    if not host:
        return ""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def normalize_title(title: str) -> str:
    """Strip whitespace, collapse multiple spaces."""
    return " ".join(title.split()).strip()


def normalize_url(url: str) -> str:
    """Strip trailing slashes and whitespace."""
    return url.strip().rstrip("/")
