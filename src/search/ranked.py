"""Ranked search over a user's saved articles using SQLite LIKE queries.

Candidates come from a LIKE prefilter; each is then scored by tag, title,
annotation and content hits with a recency boost.
"""
import logging
from datetime import datetime
from typing import Optional

from src.storage.dao import Article, ArticleDAO

logger = logging.getLogger("readshelf.search")

TAG_WEIGHT = 3.0
TITLE_WEIGHT = 2.0
ANNOTATION_WEIGHT = 1.5
CONTENT_WEIGHT = 1.0
RECENCY_BOOST_DAYS = 30
RECENCY_BOOST_FACTOR = 1.5


def _score_article(
    article: Article,
    query_terms: list[str],
    query_tags: list[str],
) -> float:
    """Score an article against query terms and tags."""
    score = 0.0

    tag_lower = article.tag.lower()
    title_lower = article.title.lower()
    annotation_lower = (article.annotation or "").lower()
    content_lower = (article.content or "").lower()

    for tag in query_tags:
        if tag.lower() == tag_lower:
            score += TAG_WEIGHT

    for term in query_terms:
        term_lower = term.lower()
        if term_lower in title_lower:
            score += TITLE_WEIGHT
        if term_lower in annotation_lower:
            score += ANNOTATION_WEIGHT
        if term_lower in content_lower:
            score += CONTENT_WEIGHT

    try:
        saved = datetime.fromisoformat(article.saved_at)
        if (datetime.now() - saved).days <= RECENCY_BOOST_DAYS:
            score *= RECENCY_BOOST_FACTOR
    except (ValueError, TypeError):
        pass

    return score


def _parse_query(query: str) -> tuple[list[str], list[str]]:
    """Parse query into (terms, tags). Tags start with #."""
    parts = query.split()
    tags = [p[1:] for p in parts if p.startswith("#") and len(p) > 1]
    terms = [p for p in parts if not p.startswith("#")]
    return (terms, tags)


def search_articles(
    user_id: str,
    query: str,
    tag: Optional[str] = None,
    state: Optional[str] = None,
    days: Optional[int] = None,
    limit: int = 20,
) -> list[tuple[Article, float]]:
    """Search a user's articles with ranked results.

    Returns list of (article, score) tuples sorted by score desc.
    """
    terms, tags = _parse_query(query)
    dao = ArticleDAO()

    tag_filter = tag or (tags[0] if tags else None)
    keyword_filter = terms[0] if terms else None

    candidates = dao.search(
        user_id,
        keyword=keyword_filter,
        tag=tag_filter,
        state=state,
        days=days,
        limit=limit * 3,  # Fetch more for re-ranking
    )

    scored = [(a, _score_article(a, terms, tags)) for a in candidates]
    scored = [(a, s) for a, s in scored if s > 0]
    scored.sort(key=lambda x: x[1], reverse=True)

    logger.debug("Search %r matched %d of %d candidates", query, len(scored), len(candidates))
    return scored[:limit]
