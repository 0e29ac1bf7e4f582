"""Save articles with auto-tagging, and retag untagged ones."""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from src.ingest.dedupe import make_article_id, make_note_id
from src.ingest.extractor import extract_article_content
from src.ingest.normalize import extract_domain, normalize_title, normalize_url
from src.storage.dao import Article, ArticleDAO, UNTAGGED
from src.tagging.classifier import ClassificationResult, RuleEngine

logger = logging.getLogger("readshelf.ingest.saver")


def save_article(
    user_id: str,
    engine: RuleEngine,
    url: Optional[str] = None,
    title: Optional[str] = None,
    content: Optional[str] = None,
    tag: Optional[str] = None,
) -> tuple[Article, Optional[ClassificationResult]]:
    """Build, tag and store an article or note.

    A URL without content is fetched and extracted. A manual ``tag`` skips
    auto-tagging (the returned result is then None); otherwise an undecided
    classification is stored as ``untagged``. Re-saving a URL without a
    manual tag keeps a tag already stored for it, so no result is returned.
    """
    url = (url or "").strip() or None
    title = (title or "").strip() or None
    if not url and not title:
        raise ValueError("URL or title required")

    if url:
        url = normalize_url(url)
        if not content:
            extracted = extract_article_content(url)
            title = title or extracted.title
            content = extracted.content

    article = Article(
        id=make_article_id(user_id, url) if url else make_note_id(),
        user_id=user_id,
        url=url,
        title=normalize_title(title or "") or "Untitled",
        domain=extract_domain(url),
        content=content or None,
        saved_at=datetime.now().isoformat(),
    )

    dao = ArticleDAO()
    result: Optional[ClassificationResult] = None
    existing = dao.find_by_id(article.id, user_id) if url else None
    if tag and tag.strip():
        article = replace(article, tag=tag.strip())
    elif existing is not None and existing.tag != UNTAGGED:
        article = replace(article, tag=existing.tag)
    else:
        result = engine.classify(article)
        article = replace(article, tag=result.tag or UNTAGGED)

    dao.upsert(article)
    logger.info("Saved %s as %s", article.domain or article.title, article.tag)
    return article, result


def retag_untagged(user_id: str, engine: RuleEngine) -> int:
    """Classify the user's untagged articles; returns how many got a tag."""
    dao = ArticleDAO()
    updated = 0
    for article in dao.find_by_user(user_id, tag=UNTAGGED):
        result = engine.classify(article)
        if result.tag is None:
            continue
        dao.update_tag(article.id, user_id, result.tag)
        updated += 1
    logger.info("Retagged %d untagged articles for user %s", updated, user_id)
    return updated
