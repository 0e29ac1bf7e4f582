"""Stable ID helpers using content hashing."""
import hashlib
import uuid


def make_article_id(user_id: str, url: str) -> str:
    """Stable hash ID from user + url, so re-saving a URL updates one row."""
    raw = f"{user_id.strip()}:{url.strip().rstrip('/')}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def make_note_id() -> str:
    """Random ID for notes created without a URL."""
    return uuid.uuid4().hex[:16]


def make_user_id(email: str) -> str:
    """Stable hash ID for users."""
    raw = f"user:{email.lower().strip()}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]
