"""Rule sets for work/personal auto-tagging.

Rules are plain substring patterns: a domain pattern matches when it occurs
anywhere in an article's hostname, a keyword when it occurs anywhere in the
lowercased title + content.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

CATEGORIES: tuple[str, ...] = ("work", "personal")
RULE_TYPES: tuple[str, ...] = ("domain", "keyword")


class RulesFileError(ValueError):
    """Raised when a rules file cannot be parsed."""


@dataclass
class CategoryRules:
    domains: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    def copy(self) -> "CategoryRules":
        return CategoryRules(domains=list(self.domains), keywords=list(self.keywords))


@dataclass
class TaggingRules:
    work: CategoryRules = field(default_factory=CategoryRules)
    personal: CategoryRules = field(default_factory=CategoryRules)

    def category(self, name: str) -> CategoryRules:
        if name == "work":
            return self.work
        if name == "personal":
            return self.personal
        raise KeyError(f"Unknown category: {name}")

    def copy(self) -> "TaggingRules":
        return TaggingRules(work=self.work.copy(), personal=self.personal.copy())

    def knows_domain(self, domain: str) -> bool:
        """True if any domain pattern of either category occurs in ``domain``."""
        if not domain:
            return False
        return any(
            d and d.lower() in domain
            for name in CATEGORIES
            for d in self.category(name).domains
        )

    def to_dict(self) -> dict:
        return {
            name: {
                "domains": list(self.category(name).domains),
                "keywords": list(self.category(name).keywords),
            }
            for name in CATEGORIES
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaggingRules":
        """Build rules from parsed JSON; raises RulesFileError on a bad shape."""
        def _patterns(name: str, key: str, raw: dict) -> list[str]:
            values = raw.get(key, [])
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise RulesFileError(f"{name}.{key} must be a list of strings")
            return list(values)

        def _category(name: str) -> CategoryRules:
            raw = data.get(name)
            if raw is None:
                return CategoryRules()
            if not isinstance(raw, dict):
                raise RulesFileError(f"{name} must be an object with domains and keywords")
            return CategoryRules(
                domains=_patterns(name, "domains", raw),
                keywords=_patterns(name, "keywords", raw),
            )

        return cls(work=_category("work"), personal=_category("personal"))


DEFAULT_RULES = TaggingRules(
    work=CategoryRules(
        domains=[
            "linkedin.com", "medium.com", "substack.com", "techcrunch.com",
            "venturebeat.com", "firstround.com", "a16z.com", "hbr.org",
            "mckinsey.com", "stratechery.com", "github.com", "stackoverflow.com",
        ],
        keywords=[
            "ai", "artificial intelligence", "machine learning",
            "product management", "product manager", "pm",
            "startup", "saas", "growth", "metrics",
            "roadmap", "user experience", "ux",
            "analytics", "strategy", "business",
            "technology", "software", "development",
            "marketing", "sales", "revenue",
            "javascript", "programming",
        ],
    ),
    personal=CategoryRules(
        domains=[
            "allrecipes.com", "foodnetwork.com", "tripadvisor.com", "booking.com",
            "airbnb.com", "strava.com", "myfitnesspal.com", "peloton.com",
            "nytimes.com/section/food", "seriouseats.com", "mayoclinic.org",
        ],
        keywords=[
            "recipe", "recipes", "cooking", "food",
            "travel", "vacation", "trip", "hotel",
            "workout", "exercise", "fitness", "gym",
            "kids", "children", "family", "parenting",
            "restaurant", "dining", "meal",
            "health", "wellness", "meditation",
            "hobby", "leisure", "entertainment",
        ],
    ),
)


def load_rules(path: Optional[Path]) -> TaggingRules:
    """Load rules from a JSON file, falling back to the defaults.

    A missing file (or no path) yields a copy of DEFAULT_RULES.
    """
    if path is None or not path.exists():
        return DEFAULT_RULES.copy()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RulesFileError(f"Invalid rules file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RulesFileError(f"Invalid rules file {path}: expected a JSON object")
    try:
        return TaggingRules.from_dict(data)
    except RulesFileError as exc:
        raise RulesFileError(f"Invalid rules file {path}: {exc}") from exc


def save_rules(rules: TaggingRules, path: Path) -> Path:
    """Write rules as JSON, replacing ``path`` only once the write is complete."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(
        json.dumps(rules.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    tmp_path.replace(path)
    return path
