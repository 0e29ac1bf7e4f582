"""Tests for the readshelf CLI."""
import sys

import pytest

from src.cli.main import main
from src.storage.dao import Article, ArticleDAO, UserDAO


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["readshelf", *argv])
    # Handlers bound to captured streams would outlive the test
    monkeypatch.setattr("src.cli.main.setup_logging", lambda: None)
    main()


class TestCli:
    def test_create_user_prints_key(self, tmp_settings, monkeypatch, capsys):
        _run(monkeypatch, "create-user", "--email", "Reader@Example.com")

        user = UserDAO().find_by_email("reader@example.com")
        out = capsys.readouterr().out
        assert "Created user reader@example.com" in out
        assert user.api_key in out

    def test_create_user_twice_exits(self, user, monkeypatch):
        with pytest.raises(SystemExit):
            _run(monkeypatch, "create-user", "--email", user.email)

    def test_unknown_user_exits(self, tmp_settings, monkeypatch):
        with pytest.raises(SystemExit):
            _run(monkeypatch, "retag", "--email", "ghost@example.com")

    def test_save_note(self, user, monkeypatch, capsys):
        _run(monkeypatch, "save", "--email", user.email, "--title", "Family Vacation Ideas")

        out = capsys.readouterr().out
        assert "tag=personal" in out
        assert "confidence=high" in out
        assert ArticleDAO().count_by_user(user.id) == 1

    def test_analytics_lists_suggestions(self, user, monkeypatch, capsys):
        for i in range(3):
            ArticleDAO().upsert(Article(
                id=f"a{i}", user_id=user.id, title="Post",
                url=f"https://blog.example.org/p{i}", tag="work",
            ))

        _run(monkeypatch, "analytics", "--email", user.email)

        out = capsys.readouterr().out
        assert "work:     3" in out
        assert "Add blog.example.org to work domains (3/3 articles tagged as work)" in out

    def test_rules(self, tmp_settings, monkeypatch, capsys):
        _run(monkeypatch, "rules")
        out = capsys.readouterr().out
        assert "[work]" in out
        assert "github.com" in out
