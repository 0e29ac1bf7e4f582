"""Rule-based work/personal classifier using domain and keyword matching."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from src.ingest.normalize import extract_domain
from src.tagging.rules import (
    CategoryRules, TaggingRules, DEFAULT_RULES, load_rules,
)

logger = logging.getLogger("readshelf.tagging.classifier")

NO_INDICATORS = "No clear work or personal indicators found"
EQUAL_INDICATORS = "Equal work and personal indicators found"
HIGH_CONFIDENCE_SCORE = 2
MAX_REASON_KEYWORDS = 3


class Taggable(Protocol):
    url: Optional[str]
    title: str
    content: Optional[str]


@dataclass(frozen=True)
class ClassificationResult:
    tag: Optional[str]
    confidence: str
    reasons: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"tag": self.tag, "confidence": self.confidence, "reasons": list(self.reasons)}


@dataclass(frozen=True)
class _Evidence:
    score: int
    reasons: tuple[str, ...]


def _collect_evidence(domain: str, text: str, rules: CategoryRules) -> _Evidence:
    reasons: list[str] = []
    score = 0

    matching_domain = next(
        (d for d in rules.domains if d and d.lower() in domain), None
    ) if domain else None
    if matching_domain:
        score += 1
        reasons.append(f"Domain: {matching_domain}")

    # Duplicate rules count once
    matching_keywords = list(dict.fromkeys(
        k.lower() for k in rules.keywords if k and k.lower() in text
    ))
    if matching_keywords:
        score += len(matching_keywords)
        reasons.append(f"Keywords: {', '.join(matching_keywords[:MAX_REASON_KEYWORDS])}")

    return _Evidence(score=score, reasons=tuple(reasons))


class RuleEngine:
    """Holds the work/personal rule sets and classifies articles against them.

    The engine is owned by whichever layer composes the application; rule
    additions and rule snapshots are serialized by an internal lock so one
    instance can be shared across request handlers.
    """

    def __init__(self, rules: Optional[TaggingRules] = None) -> None:
        self._rules = (rules or DEFAULT_RULES).copy()
        self._lock = threading.Lock()

    def classify(self, article: Taggable) -> ClassificationResult:
        """Classify an article as work, personal, or undecided (tag None).

        Priority: the higher score wins; equal scores are undecided.
        Total for all inputs: malformed URLs and empty text degrade to a
        low-confidence result.
        """
        domain = extract_domain(getattr(article, "url", None))
        title = getattr(article, "title", "") or ""
        content = getattr(article, "content", "") or ""
        text = f"{title} {content}".lower()

        rules = self.get_rules()
        work = _collect_evidence(domain, text, rules.work)
        personal = _collect_evidence(domain, text, rules.personal)

        if work.score > personal.score:
            return self._decided("work", work)
        if personal.score > work.score:
            return self._decided("personal", personal)
        if work.score == 0:
            return ClassificationResult(tag=None, confidence="low", reasons=(NO_INDICATORS,))
        return ClassificationResult(tag=None, confidence="low", reasons=(EQUAL_INDICATORS,))

    @staticmethod
    def _decided(tag: str, evidence: _Evidence) -> ClassificationResult:
        confidence = "high" if evidence.score >= HIGH_CONFIDENCE_SCORE else "medium"
        return ClassificationResult(tag=tag, confidence=confidence, reasons=evidence.reasons)

    def add_rule(self, rule_type: str, category: str, value: str) -> None:
        """Append a domain or keyword pattern to a category.

        Values are not checked for duplicates; an unknown category raises KeyError.
        """
        with self._lock:
            target = self._rules.category(category)
            if rule_type == "domain":
                target.domains.append(value)
            else:
                target.keywords.append(value)
        logger.info("Added %s rule to %s: %s", rule_type, category, value)

    def get_rules(self) -> TaggingRules:
        """Snapshot of the current rules; safe to read while others add rules."""
        with self._lock:
            return self._rules.copy()

    def knows_domain(self, domain: str) -> bool:
        """True if any configured domain pattern already matches ``domain``."""
        return self.get_rules().knows_domain(domain)


def build_rule_engine(rules_path: Optional[Path] = None) -> RuleEngine:
    """Engine seeded from a rules file, or the built-in defaults."""
    rules = load_rules(rules_path)
    logger.info(
        "Loaded tagging rules from %s", rules_path if rules_path else "defaults"
    )
    return RuleEngine(rules)
