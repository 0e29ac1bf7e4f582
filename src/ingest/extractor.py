"""Fetch a page and extract its readable title and body text."""
import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from src.app.config import get_settings
from src.ingest.normalize import extract_domain

logger = logging.getLogger("readshelf.ingest.extractor")

MAX_TITLE_LENGTH = 200
MAX_CONTENT_LENGTH = 10000
MIN_BLOCK_LENGTH = 20

CONTENT_SELECTORS = [
    "article",
    '[role="main"]',
    ".post-content",
    ".entry-content",
    ".content",
    ".post-body",
    ".article-body",
    "main",
]

UNWANTED_SELECTORS = [
    "script", "style", "nav", "header", "footer",
    ".advertisement", ".ads", ".social-share",
    ".comments", ".related-posts", ".sidebar",
]

TEXT_BLOCK_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li"]


@dataclass(frozen=True)
class ArticleContent:
    title: str
    content: str


def _blocked_content(domain: str) -> ArticleContent:
    return ArticleContent(
        title=f"Article from {domain}",
        content=(
            f"This article couldn't be automatically extracted because the website "
            f"({domain}) blocked our request.\n\n"
            "You can still read the original article by opening the original link."
        ),
    )


def _failed_content(domain: str) -> ArticleContent:
    return ArticleContent(
        title=f"Article from {domain}",
        content=(
            f"This article couldn't be automatically extracted from {domain}.\n\n"
            "This might be because:\n"
            "• The website blocks automated requests\n"
            "• The site requires JavaScript to load content\n"
            "• The content is behind a paywall\n\n"
            "You can still read the original article by opening the original link."
        ),
    )


def _extract_title(soup: BeautifulSoup, fallback: str) -> str:
    candidates = []
    if soup.title and soup.title.string:
        candidates.append(soup.title.string)
    h1 = soup.find("h1")
    if h1:
        candidates.append(h1.get_text())
    og = soup.find("meta", attrs={"property": "og:title"})
    if og and og.get("content"):
        candidates.append(og["content"])

    for candidate in candidates:
        text = candidate.strip()
        if text:
            return text[:MAX_TITLE_LENGTH]
    return fallback[:MAX_TITLE_LENGTH]


def _extract_body(soup: BeautifulSoup) -> str:
    root = None
    for selector in CONTENT_SELECTORS:
        root = soup.select_one(selector)
        if root is not None:
            break
    if root is None:
        root = soup.body or soup

    for selector in UNWANTED_SELECTORS:
        for el in root.select(selector):
            el.decompose()

    blocks = [
        el.get_text(" ", strip=True)
        for el in root.find_all(TEXT_BLOCK_TAGS)
    ]
    text = "\n\n".join(b for b in blocks if len(b) > MIN_BLOCK_LENGTH)
    if not text:
        text = root.get_text("\n", strip=True)

    # Keep paragraph breaks, collapse horizontal whitespace
    text = re.sub(r"[ \t]+", " ", text).strip()
    if len(text) > MAX_CONTENT_LENGTH:
        text = text[:MAX_CONTENT_LENGTH] + "..."
    return text


def parse_article_html(html: str, url: str) -> ArticleContent:
    """Extract title and readable text from an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    title = _extract_title(soup, extract_domain(url) or url)
    return ArticleContent(title=title, content=_extract_body(soup))


def extract_article_content(url: str, timeout: Optional[float] = None) -> ArticleContent:
    """Fetch ``url`` and extract its content. Falls back gracefully.

    Never raises: HTTP errors and network failures are logged and mapped to
    an explanatory placeholder body.
    """
    settings = get_settings()
    domain = extract_domain(url) or "unknown"
    headers = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }

    try:
        with httpx.Client(
            timeout=timeout or settings.fetch_timeout,
            follow_redirects=True,
            headers=headers,
        ) as client:
            response = client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error("Failed to fetch %s: %s", url, e)
        return _failed_content(domain)

    if response.status_code >= 400:
        logger.warning("Fetching %s returned HTTP %d", url, response.status_code)
        return _blocked_content(domain)

    content = parse_article_html(response.text, url)
    logger.info("Extracted %d chars from %s", len(content.content), domain)
    return content
