"""Data Access Objects for users and saved articles."""
import secrets
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

from src.storage.db import connection

UNTAGGED = "untagged"
ARTICLE_STATES = ("inbox", "reference")


@dataclass(frozen=True)
class User:
    id: str
    email: str
    created_at: str
    api_key: Optional[str] = None


@dataclass(frozen=True)
class Article:
    """A saved article or a manually written note (``url`` is None)."""

    id: str
    user_id: str
    title: str
    url: Optional[str] = None
    domain: str = ""
    content: Optional[str] = None
    tag: str = UNTAGGED
    state: str = "inbox"
    annotation: Optional[str] = None
    saved_at: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["userId"] = data.pop("user_id")
        data["savedAt"] = data.pop("saved_at")
        return data


def generate_api_key() -> str:
    return secrets.token_urlsafe(32)


class UserDAO:
    def create(self, user_id: str, email: str) -> User:
        user = User(
            id=user_id,
            email=email.strip().lower(),
            created_at=datetime.now().isoformat(),
            api_key=generate_api_key(),
        )
        with connection(commit=True) as conn:
            conn.execute(
                """INSERT INTO users (id, email, api_key, created_at)
                   VALUES (?, ?, ?, ?)""",
                (user.id, user.email, user.api_key, user.created_at),
            )
        return user

    def find_by_id(self, uid: str) -> Optional[User]:
        with connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (uid,)).fetchone()
        return User(**dict(row)) if row else None

    def find_by_email(self, email: str) -> Optional[User]:
        with connection() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
            ).fetchone()
        return User(**dict(row)) if row else None

    def find_by_api_key(self, api_key: str) -> Optional[User]:
        if not api_key:
            return None
        with connection() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE api_key = ?", (api_key,)
            ).fetchone()
        return User(**dict(row)) if row else None

    def rotate_api_key(self, uid: str) -> Optional[str]:
        """Replace the user's API key; returns the new key or None if unknown."""
        new_key = generate_api_key()
        with connection(commit=True) as conn:
            cur = conn.execute(
                "UPDATE users SET api_key = ? WHERE id = ?", (new_key, uid)
            )
        return new_key if cur.rowcount else None


class ArticleDAO:
    def upsert(self, article: Article) -> None:
        with connection(commit=True) as conn:
            conn.execute(
                """INSERT INTO articles
                   (id, user_id, url, title, domain, content, tag, state,
                    annotation, saved_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                     title=excluded.title,
                     domain=excluded.domain,
                     content=excluded.content,
                     tag=excluded.tag,
                     saved_at=excluded.saved_at
                """,
                (article.id, article.user_id, article.url, article.title,
                 article.domain, article.content, article.tag, article.state,
                 article.annotation, article.saved_at),
            )

    def find_by_id(self, aid: str, user_id: Optional[str] = None) -> Optional[Article]:
        """Find an article; with ``user_id`` only if that user owns it."""
        sql = "SELECT * FROM articles WHERE id = ?"
        params: list = [aid]
        if user_id is not None:
            sql += " AND user_id = ?"
            params.append(user_id)
        with connection() as conn:
            row = conn.execute(sql, params).fetchone()
        return Article(**dict(row)) if row else None

    def find_by_user(
        self,
        user_id: str,
        tag: Optional[str] = None,
        state: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Article]:
        clauses = ["user_id = ?"]
        params: list = [user_id]
        if tag and tag != "all":
            clauses.append("tag = ?")
            params.append(tag)
        if state:
            clauses.append("state = ?")
            params.append(state)

        sql = f"SELECT * FROM articles WHERE {' AND '.join(clauses)} ORDER BY saved_at DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [Article(**dict(r)) for r in rows]

    def search(
        self,
        user_id: str,
        keyword: Optional[str] = None,
        tag: Optional[str] = None,
        state: Optional[str] = None,
        days: Optional[int] = None,
        limit: int = 50,
    ) -> list[Article]:
        clauses = ["user_id = ?"]
        params: list = [user_id]

        if tag:
            clauses.append("tag = ?")
            params.append(tag)
        if state:
            clauses.append("state = ?")
            params.append(state)
        if keyword:
            clauses.append("(title LIKE ? OR content LIKE ? OR annotation LIKE ?)")
            params.extend([f"%{keyword}%"] * 3)
        if days:
            cutoff = datetime.now().isoformat()[:10]
            clauses.append("saved_at >= date(?, ?)")
            params.extend([cutoff, f"-{days} days"])

        where = " AND ".join(clauses)
        sql = f"""
            SELECT * FROM articles
            WHERE {where}
            ORDER BY saved_at DESC
            LIMIT ?
        """
        params.append(limit)

        with connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [Article(**dict(r)) for r in rows]

    def _update_field(
        self, aid: str, user_id: str, column: str, value: Optional[str]
    ) -> Optional[Article]:
        with connection(commit=True) as conn:
            cur = conn.execute(
                f"UPDATE articles SET {column} = ? WHERE id = ? AND user_id = ?",
                (value, aid, user_id),
            )
        if not cur.rowcount:
            return None
        return self.find_by_id(aid, user_id)

    def update_tag(self, aid: str, user_id: str, tag: str) -> Optional[Article]:
        return self._update_field(aid, user_id, "tag", tag)

    def update_state(self, aid: str, user_id: str, state: str) -> Optional[Article]:
        if state not in ARTICLE_STATES:
            raise ValueError(f"Unknown article state: {state}")
        return self._update_field(aid, user_id, "state", state)

    def update_annotation(
        self, aid: str, user_id: str, annotation: Optional[str]
    ) -> Optional[Article]:
        return self._update_field(aid, user_id, "annotation", annotation or None)

    def delete(self, aid: str, user_id: str) -> bool:
        with connection(commit=True) as conn:
            cur = conn.execute(
                "DELETE FROM articles WHERE id = ? AND user_id = ?", (aid, user_id)
            )
        return cur.rowcount > 0

    def distinct_tags(self, user_id: str) -> list[str]:
        with connection() as conn:
            rows = conn.execute(
                "SELECT DISTINCT tag FROM articles WHERE user_id = ? ORDER BY tag",
                (user_id,),
            ).fetchall()
        return [r["tag"] for r in rows]

    def count_by_user(self, user_id: str) -> int:
        with connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM articles WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0]
