"""FastAPI JSON API for readshelf."""
import logging
import threading
from contextlib import asynccontextmanager
from typing import Literal, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from pydantic import BaseModel

from src.app.config import get_settings
from src.app.paths import ensure_dirs
from src.ingest.saver import retag_untagged, save_article
from src.search.ranked import search_articles
from src.storage.dao import ArticleDAO, User, UserDAO
from src.storage.db import init_db
from src.tagging.analytics import generate_analytics
from src.tagging.classifier import RuleEngine, build_rule_engine
from src.tagging.rules import save_rules

logger = logging.getLogger("readshelf.web")

# Serializes rule additions with their write to the rules file
_rules_lock = threading.Lock()


class ArticleCreate(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    tag: Optional[str] = None


class ShortcutSave(BaseModel):
    url: str


class TagUpdate(BaseModel):
    tag: str


class StateUpdate(BaseModel):
    state: Literal["inbox", "reference"]


class AnnotationUpdate(BaseModel):
    annotation: Optional[str] = None


class RuleSuggestion(BaseModel):
    type: Literal["domain", "keyword"]
    category: Literal["work", "personal"]
    value: str
    id: Optional[str] = None
    count: Optional[int] = None
    description: Optional[str] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_dirs()
    init_db()
    app.state.rule_engine = build_rule_engine(get_settings().rules_path)
    logger.info("readshelf API ready")
    yield


app = FastAPI(title="readshelf", lifespan=lifespan)


def get_rule_engine(request: Request) -> RuleEngine:
    return request.app.state.rule_engine


def get_current_user(authorization: Optional[str] = Header(None)) -> User:
    api_key = (authorization or "").removeprefix("Bearer ").strip()
    user = UserDAO().find_by_api_key(api_key)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.post("/api/auth/generate-key")
def generate_key(user: User = Depends(get_current_user)):
    return {"apiKey": UserDAO().rotate_api_key(user.id)}


# ── Articles ────────────────────────────────────────────────────


@app.get("/api/articles")
def list_articles(
    tag: Optional[str] = None,
    state: Optional[str] = None,
    q: Optional[str] = None,
    user: User = Depends(get_current_user),
):
    if q:
        results = search_articles(user.id, q, tag=tag, state=state)
        return [a.to_dict() for a, _score in results]
    return [a.to_dict() for a in ArticleDAO().find_by_user(user.id, tag=tag, state=state)]


@app.get("/api/articles/{article_id}")
def get_article(article_id: str, user: User = Depends(get_current_user)):
    article = ArticleDAO().find_by_id(article_id, user.id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return article.to_dict()


@app.post("/api/articles", status_code=201)
def create_article(
    body: ArticleCreate,
    user: User = Depends(get_current_user),
    engine: RuleEngine = Depends(get_rule_engine),
):
    if not (body.url or "").strip() and not (body.title or "").strip():
        raise HTTPException(status_code=400, detail="URL or title required")
    article, result = save_article(
        user.id, engine,
        url=body.url, title=body.title, content=body.content, tag=body.tag,
    )
    return {
        "article": article.to_dict(),
        "taggingResult": result.to_dict() if result else None,
    }


@app.post("/api/save", status_code=201)
def shortcut_save(
    body: ShortcutSave,
    user: User = Depends(get_current_user),
    engine: RuleEngine = Depends(get_rule_engine),
):
    """Endpoint for the iOS Shortcut: save a shared URL."""
    if not body.url.strip():
        raise HTTPException(status_code=400, detail="URL required")
    article, result = save_article(user.id, engine, url=body.url)
    return {
        "success": True,
        "article": article.to_dict(),
        "taggingResult": result.to_dict() if result else None,
    }


@app.delete("/api/articles/{article_id}")
def delete_article(article_id: str, user: User = Depends(get_current_user)):
    if not ArticleDAO().delete(article_id, user.id):
        raise HTTPException(status_code=404, detail="Article not found")
    return {"message": "Article deleted successfully"}


@app.patch("/api/articles/{article_id}/tag")
def update_tag(article_id: str, body: TagUpdate, user: User = Depends(get_current_user)):
    tag = body.tag.strip()
    if not tag:
        raise HTTPException(status_code=400, detail="Tag must not be empty")
    article = ArticleDAO().update_tag(article_id, user.id, tag)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return article.to_dict()


@app.patch("/api/articles/{article_id}/state")
def update_state(article_id: str, body: StateUpdate, user: User = Depends(get_current_user)):
    article = ArticleDAO().update_state(article_id, user.id, body.state)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return article.to_dict()


@app.patch("/api/articles/{article_id}/annotation")
def update_annotation(
    article_id: str, body: AnnotationUpdate, user: User = Depends(get_current_user)
):
    article = ArticleDAO().update_annotation(article_id, user.id, body.annotation)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return article.to_dict()


@app.get("/api/tags")
def list_tags(user: User = Depends(get_current_user)):
    return ArticleDAO().distinct_tags(user.id)


# ── Auto-tagging ────────────────────────────────────────────────


@app.get("/api/auto-tag/analytics")
def auto_tag_analytics(
    user: User = Depends(get_current_user),
    engine: RuleEngine = Depends(get_rule_engine),
):
    settings = get_settings()
    stats = generate_analytics(
        ArticleDAO().find_by_user(user.id),
        engine,
        min_articles=settings.suggestion_min_articles,
        min_purity=settings.suggestion_min_purity,
        limit=settings.suggestion_limit,
    )
    return stats.to_dict()


@app.get("/api/auto-tag/rules")
def auto_tag_rules(
    user: User = Depends(get_current_user),
    engine: RuleEngine = Depends(get_rule_engine),
):
    return engine.get_rules().to_dict()


@app.post("/api/auto-tag/apply-suggestion")
def apply_suggestion(
    body: RuleSuggestion,
    user: User = Depends(get_current_user),
    engine: RuleEngine = Depends(get_rule_engine),
):
    value = body.value.strip().lower()
    if not value:
        raise HTTPException(status_code=400, detail="Rule value must not be empty")
    settings = get_settings()
    with _rules_lock:
        engine.add_rule(body.type, body.category, value)
        if settings.rules_path is not None:
            save_rules(engine.get_rules(), settings.rules_path)

    return {"message": f"{value} added to {body.category} {body.type}s"}


@app.post("/api/auto-tag/retag-existing")
def retag_existing(
    user: User = Depends(get_current_user),
    engine: RuleEngine = Depends(get_rule_engine),
):
    updated = retag_untagged(user.id, engine)
    return {"message": "Retagged untagged articles", "updated": updated}
