"""Tag analytics and rule suggestions mined from a user's tagging history."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from src.ingest.normalize import extract_domain
from src.tagging.classifier import RuleEngine

logger = logging.getLogger("readshelf.tagging.analytics")

MIN_ARTICLES = 3
MIN_PURITY = 0.7
MAX_SUGGESTIONS = 5


class TaggedRecord(Protocol):
    url: Optional[str]
    tag: str


@dataclass(frozen=True)
class Suggestion:
    id: str
    type: str
    category: str
    value: str
    count: int
    description: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "category": self.category,
            "value": self.value,
            "count": self.count,
            "description": self.description,
        }


@dataclass(frozen=True)
class TaggingStats:
    total_articles: int
    work_count: int
    personal_count: int
    untagged_count: int
    suggestions: tuple[Suggestion, ...]

    def to_dict(self) -> dict:
        return {
            "totalArticles": self.total_articles,
            "workCount": self.work_count,
            "personalCount": self.personal_count,
            "untaggedCount": self.untagged_count,
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


def _domain_counts(
    articles: list[TaggedRecord], engine: RuleEngine
) -> dict[str, dict[str, int]]:
    """Count work/personal tags per domain the engine doesn't already know."""
    rules = engine.get_rules()
    counts: dict[str, dict[str, int]] = {}
    for article in articles:
        tag = getattr(article, "tag", None)
        if tag not in ("work", "personal"):
            continue
        domain = extract_domain(getattr(article, "url", None))
        if not domain or rules.knows_domain(domain):
            continue
        bucket = counts.setdefault(domain, {"work": 0, "personal": 0})
        bucket[tag] += 1
    return counts


def suggest_domain_rules(
    articles: list[TaggedRecord],
    engine: RuleEngine,
    min_articles: int = MIN_ARTICLES,
    min_purity: float = MIN_PURITY,
    limit: int = MAX_SUGGESTIONS,
) -> list[Suggestion]:
    """Suggest domains to add to a category's rules.

    A domain qualifies with at least ``min_articles`` decided articles of which
    the dominant category holds a share of at least ``min_purity``.
    Ordered by descending count, then domain name.
    """
    suggestions: list[Suggestion] = []

    for domain, counts in _domain_counts(articles, engine).items():
        total = counts["work"] + counts["personal"]
        if total < min_articles:
            continue
        category = "work" if counts["work"] > counts["personal"] else "personal"
        dominant = counts[category]
        if dominant / total < min_purity:
            continue
        suggestions.append(Suggestion(
            id=f"domain-{domain}",
            type="domain",
            category=category,
            value=domain,
            count=dominant,
            description=(
                f"Add {domain} to {category} domains "
                f"({dominant}/{total} articles tagged as {category})"
            ),
        ))

    suggestions.sort(key=lambda s: (-s.count, s.value))
    return suggestions[:limit]


def generate_analytics(
    articles: Iterable[TaggedRecord],
    engine: RuleEngine,
    min_articles: int = MIN_ARTICLES,
    min_purity: float = MIN_PURITY,
    limit: int = MAX_SUGGESTIONS,
) -> TaggingStats:
    """Tag counts plus rule suggestions over a user's full article list.

    Everything not tagged work or personal lands in the untagged bucket, so
    the three counts always sum to the total.
    """
    items = list(articles)
    work_count = sum(1 for a in items if getattr(a, "tag", None) == "work")
    personal_count = sum(1 for a in items if getattr(a, "tag", None) == "personal")
    suggestions = suggest_domain_rules(
        items, engine, min_articles=min_articles, min_purity=min_purity, limit=limit
    )

    logger.debug(
        "Analytics over %d articles: %d suggestions", len(items), len(suggestions)
    )
    return TaggingStats(
        total_articles=len(items),
        work_count=work_count,
        personal_count=personal_count,
        untagged_count=len(items) - work_count - personal_count,
        suggestions=tuple(suggestions),
    )
