"""CLI entry point for readshelf."""
import argparse
import sys

from src.app.config import get_settings
from src.app.logging import setup_logging
from src.app.paths import ensure_dirs
from src.storage.db import init_db


def _require_user(email: str):
    from src.storage.dao import UserDAO

    user = UserDAO().find_by_email(email)
    if user is None:
        print(f"No user with email {email}. Run create-user first.")
        sys.exit(1)
    return user


def _engine():
    from src.tagging.classifier import build_rule_engine

    return build_rule_engine(get_settings().rules_path)


def cmd_serve(args):
    """Start the web server."""
    import uvicorn
    from src.web.server import app

    settings = get_settings()
    port = args.port or settings.web_port
    host = settings.web_host

    print(f"Starting server at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


def cmd_create_user(args):
    """Create a user and print its API key."""
    from src.ingest.dedupe import make_user_id
    from src.storage.dao import UserDAO

    dao = UserDAO()
    if dao.find_by_email(args.email) is not None:
        print(f"User {args.email} already exists.")
        sys.exit(1)

    user = dao.create(make_user_id(args.email), args.email)
    print(f"Created user {user.email}")
    print(f"  API key: {user.api_key}")


def cmd_rotate_key(args):
    """Replace a user's API key."""
    from src.storage.dao import UserDAO

    user = _require_user(args.email)
    new_key = UserDAO().rotate_api_key(user.id)
    print(f"  API key: {new_key}")


def cmd_save(args):
    """Save a URL or note with auto-tagging."""
    from src.ingest.saver import save_article

    if not args.url and not args.title:
        print("Provide --url or --title")
        return

    user = _require_user(args.email)
    article, result = save_article(
        user.id, _engine(),
        url=args.url, title=args.title, content=args.content, tag=args.tag,
    )
    print(f"Saved: {article.title}")
    print(f"  tag={article.tag}  domain={article.domain or '-'}")
    if result is not None:
        print(f"  confidence={result.confidence}")
        for reason in result.reasons:
            print(f"    {reason}")


def cmd_retag(args):
    """Auto-tag all untagged articles."""
    from src.ingest.saver import retag_untagged

    user = _require_user(args.email)
    updated = retag_untagged(user.id, _engine())
    print(f"Retagged {updated} articles.")


def cmd_analytics(args):
    """Print tag counts and rule suggestions."""
    from src.storage.dao import ArticleDAO
    from src.tagging.analytics import generate_analytics

    settings = get_settings()
    user = _require_user(args.email)
    stats = generate_analytics(
        ArticleDAO().find_by_user(user.id),
        _engine(),
        min_articles=settings.suggestion_min_articles,
        min_purity=settings.suggestion_min_purity,
        limit=settings.suggestion_limit,
    )

    print(f"  total:    {stats.total_articles}")
    print(f"  work:     {stats.work_count}")
    print(f"  personal: {stats.personal_count}")
    print(f"  untagged: {stats.untagged_count}")
    if not stats.suggestions:
        print("No suggestions.")
        return
    print("Suggestions:")
    for s in stats.suggestions:
        print(f"  - {s.description}")


def cmd_rules(args):
    """Show the active tagging rules."""
    rules = _engine().get_rules()
    for name, category in rules.to_dict().items():
        print(f"[{name}]")
        print(f"  domains:  {', '.join(category['domains'])}")
        print(f"  keywords: {', '.join(category['keywords'])}")


def main():
    setup_logging()
    ensure_dirs()
    init_db()

    parser = argparse.ArgumentParser(
        prog="readshelf",
        description="readshelf: read-it-later with work/personal auto-tagging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = subparsers.add_parser("serve", help="Start web server")
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    # create-user
    p_user = subparsers.add_parser("create-user", help="Create a user with an API key")
    p_user.add_argument("--email", required=True)
    p_user.set_defaults(func=cmd_create_user)

    # rotate-key
    p_rotate = subparsers.add_parser("rotate-key", help="Rotate a user's API key")
    p_rotate.add_argument("--email", required=True)
    p_rotate.set_defaults(func=cmd_rotate_key)

    # save
    p_save = subparsers.add_parser("save", help="Save a URL or note")
    p_save.add_argument("--email", required=True)
    p_save.add_argument("--url", default=None)
    p_save.add_argument("--title", default=None)
    p_save.add_argument("--content", default=None)
    p_save.add_argument("--tag", default=None, help="Manual tag (skips auto-tagging)")
    p_save.set_defaults(func=cmd_save)

    # retag
    p_retag = subparsers.add_parser("retag", help="Auto-tag untagged articles")
    p_retag.add_argument("--email", required=True)
    p_retag.set_defaults(func=cmd_retag)

    # analytics
    p_analytics = subparsers.add_parser("analytics", help="Tag counts and rule suggestions")
    p_analytics.add_argument("--email", required=True)
    p_analytics.set_defaults(func=cmd_analytics)

    # rules
    p_rules = subparsers.add_parser("rules", help="Show tagging rules")
    p_rules.set_defaults(func=cmd_rules)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
