"""Tests for tag analytics and domain rule suggestions."""
from unittest.mock import patch

from src.storage.dao import Article
from src.tagging.analytics import (
    Suggestion,
    TaggingStats,
    generate_analytics,
    suggest_domain_rules,
)


def _articles(url_prefix: str, tags: list[str]) -> list[Article]:
    return [
        Article(
            id=f"{url_prefix}-{i}",
            user_id="u1",
            title=f"Post {i}",
            url=f"{url_prefix}/p{i}",
            tag=tag,
        )
        for i, tag in enumerate(tags)
    ]


# ── Tag counts ──────────────────────────────────────────────────


class TestTagCounts:
    def test_empty_history(self, engine):
        stats = generate_analytics([], engine)
        assert stats == TaggingStats(
            total_articles=0, work_count=0, personal_count=0,
            untagged_count=0, suggestions=(),
        )

    def test_catch_all_bucket(self, engine):
        tags = ["work", "personal", "untagged", "uncertain", "reading-list", "", "work"]
        stats = generate_analytics(_articles("https://a.example", tags), engine)
        assert stats.total_articles == 7
        assert stats.work_count == 2
        assert stats.personal_count == 1
        assert stats.untagged_count == 4

    def test_counts_partition_total(self, engine):
        tags = ["work"] * 4 + ["personal"] * 2 + ["untagged"] * 3 + ["books"]
        stats = generate_analytics(_articles("https://b.example", tags), engine)
        assert (
            stats.work_count + stats.personal_count + stats.untagged_count
            == stats.total_articles
        )

    def test_accepts_generator(self, engine):
        stats = generate_analytics(
            (a for a in _articles("https://c.example", ["work", "work"])), engine
        )
        assert stats.total_articles == 2
        assert stats.work_count == 2

    def test_to_dict_uses_api_keys(self, engine):
        stats = generate_analytics(
            _articles("https://blog.example.org", ["work"] * 3), engine
        )
        data = stats.to_dict()
        assert data["totalArticles"] == 3
        assert data["workCount"] == 3
        assert data["personalCount"] == 0
        assert data["untaggedCount"] == 0
        assert data["suggestions"][0]["id"] == "domain-blog.example.org"


# ── Suggestions ─────────────────────────────────────────────────


class TestSuggestions:
    def test_three_pure_work_articles_suggest_domain(self, engine):
        articles = _articles("https://blog.example.org", ["work", "work", "work"])
        stats = generate_analytics(articles, engine)
        assert stats.suggestions == (
            Suggestion(
                id="domain-blog.example.org",
                type="domain",
                category="work",
                value="blog.example.org",
                count=3,
                description="Add blog.example.org to work domains (3/3 articles tagged as work)",
            ),
        )

    def test_two_articles_are_below_threshold(self, engine):
        articles = _articles("https://blog.example.org", ["work", "work"])
        assert generate_analytics(articles, engine).suggestions == ()

    def test_mixed_domain_below_purity(self, engine):
        articles = _articles("https://mixed.example", ["work"] * 3 + ["personal"] * 2)
        assert suggest_domain_rules(articles, engine) == []

    def test_purity_boundary_is_inclusive(self, engine):
        articles = _articles("https://edge.example", ["work"] * 7 + ["personal"] * 3)
        suggestions = suggest_domain_rules(articles, engine)
        assert len(suggestions) == 1
        assert suggestions[0].count == 7
        assert "(7/10 articles tagged as work)" in suggestions[0].description

    def test_personal_dominant_domain(self, engine):
        articles = _articles("https://www.bakery.example", ["personal"] * 4 + ["work"])
        suggestions = suggest_domain_rules(articles, engine)
        assert len(suggestions) == 1
        assert suggestions[0].category == "personal"
        assert suggestions[0].value == "bakery.example"
        assert suggestions[0].count == 4
        assert suggestions[0].description == (
            "Add bakery.example to personal domains (4/5 articles tagged as personal)"
        )

    def test_known_domains_are_skipped(self, engine):
        articles = _articles("https://github.com/someone", ["work"] * 5)
        assert suggest_domain_rules(articles, engine) == []

    def test_undecided_tags_are_ignored(self, engine):
        articles = _articles("https://blog.example.org", ["untagged", "uncertain", "reading"])
        assert suggest_domain_rules(articles, engine) == []

    def test_notes_without_url_are_ignored(self, engine):
        notes = [
            Article(id=f"n{i}", user_id="u1", title="Note", tag="work")
            for i in range(4)
        ]
        assert suggest_domain_rules(notes, engine) == []

    def test_malformed_urls_are_ignored(self, engine):
        articles = [
            Article(id=f"m{i}", user_id="u1", title="x", url="not-a-valid-url", tag="work")
            for i in range(4)
        ]
        assert suggest_domain_rules(articles, engine) == []

    def test_sorted_by_count_then_domain_and_limited(self, engine):
        counts = {
            "d1.example": 3, "d2.example": 3, "d3.example": 4,
            "d4.example": 5, "d5.example": 3, "d6.example": 6, "d7.example": 3,
        }
        articles = []
        for domain, n in counts.items():
            articles.extend(_articles(f"https://{domain}", ["work"] * n))

        suggestions = suggest_domain_rules(articles, engine)
        assert [s.value for s in suggestions] == [
            "d6.example", "d4.example", "d3.example", "d1.example", "d2.example",
        ]

    def test_custom_thresholds(self, engine):
        articles = _articles("https://small.example", ["work", "work"])
        stats = generate_analytics(articles, engine, min_articles=2, min_purity=1.0, limit=1)
        assert [s.value for s in stats.suggestions] == ["small.example"]

    def test_applied_suggestion_is_not_suggested_again(self, engine):
        articles = _articles("https://blog.example.org", ["work"] * 3)
        suggestion = generate_analytics(articles, engine).suggestions[0]

        engine.add_rule(suggestion.type, suggestion.category, suggestion.value)

        assert generate_analytics(articles, engine).suggestions == ()

    def test_does_not_modify_rules(self, engine):
        before = engine.get_rules()
        generate_analytics(_articles("https://blog.example.org", ["work"] * 3), engine)
        assert engine.get_rules() == before

    def test_rules_snapshot_taken_once(self, engine):
        articles = _articles("https://blog.example.org", ["work"] * 20)
        with patch.object(engine, "get_rules", wraps=engine.get_rules) as spy:
            generate_analytics(articles, engine)
        assert spy.call_count == 1
