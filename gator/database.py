"""Storage of users, feeds, follows and posts in an SQLite database."""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Sequence

from .models import (
    Feed,
    FeedFollow,
    FeedFollowDetails,
    FeedSummary,
    Post,
    PostWithFeed,
    User,
)


class DatabaseError(Exception):
    """A query failed."""


class NotFoundError(DatabaseError):
    """A query that must return a row returned none."""


class DuplicateError(DatabaseError):
    """An insert broke a uniqueness constraint."""


_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS feeds (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    last_fetched_at TEXT
);
CREATE TABLE IF NOT EXISTS feed_follows (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    feed_id TEXT NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
    UNIQUE (user_id, feed_id)
);
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    description TEXT NOT NULL,
    published_at TEXT,
    feed_id TEXT NOT NULL REFERENCES feeds(id) ON DELETE CASCADE
);
"""

_FEED_COLUMNS = "id, created_at, updated_at, name, url, user_id, last_fetched_at"


def _time_in(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.isoformat()


def _time_out(text: str | None) -> datetime | None:
    return None if text is None else datetime.fromisoformat(text)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _user(row: Sequence) -> User:
    return User(uuid.UUID(row[0]), _time_out(row[1]), _time_out(row[2]), row[3])


def _feed(row: Sequence) -> Feed:
    return Feed(uuid.UUID(row[0]), _time_out(row[1]), _time_out(row[2]), row[3],
                row[4], uuid.UUID(row[5]), _time_out(row[6]))


def _follow(row: Sequence) -> FeedFollow:
    return FeedFollow(uuid.UUID(row[0]), _time_out(row[1]), _time_out(row[2]),
                      uuid.UUID(row[3]), uuid.UUID(row[4]))


def _post(row: Sequence) -> Post:
    return Post(uuid.UUID(row[0]), _time_out(row[1]), _time_out(row[2]), row[3],
                row[4], row[5], _time_out(row[6]), uuid.UUID(row[7]))


def _sqlite_path(url: str) -> str:
    if not url:
        raise DatabaseError("no database url configured")
    if url.startswith("sqlite://"):
        rest = url[len("sqlite://"):]
        if rest in ("", "/"):
            return ":memory:"
        return rest[1:] if rest.startswith("/") else rest
    if "://" in url:
        raise DatabaseError(f"unsupported database url: {url}")
    return url


class Queries:
    """Named queries over an open SQLite connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._depth = 0
        self._conn.execute("PRAGMA foreign_keys = ON")

    def __enter__(self) -> "Queries":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def create_schema(self) -> None:
        """Create the tables if they do not exist yet."""
        try:
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise DatabaseError(str(exc)) from exc

    @contextmanager
    def transaction(self) -> Iterator["Queries"]:
        """Group writes so that they are committed or rolled back together."""
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self._conn.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def _execute(self, sql: str, params: Sequence = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, tuple(params))
        except sqlite3.IntegrityError as exc:
            if self._depth == 0:
                self._conn.rollback()
            if "UNIQUE constraint failed" in str(exc):
                raise DuplicateError(str(exc)) from exc
            raise DatabaseError(str(exc)) from exc
        except sqlite3.Error as exc:
            if self._depth == 0:
                self._conn.rollback()
            raise DatabaseError(str(exc)) from exc

    def _write(self, sql: str, params: Sequence = ()) -> None:
        self._execute(sql, params)
        if self._depth == 0:
            self._conn.commit()

    def _one(self, sql: str, params: Sequence = ()) -> Sequence:
        row = self._execute(sql, params).fetchone()
        if row is None:
            raise NotFoundError("no rows in result set")
        return row

    # users

    def create_user(self, id: uuid.UUID, created_at: datetime,
                    updated_at: datetime, name: str) -> User:
        self._write(
            "INSERT INTO users (id, created_at, updated_at, name) VALUES (?, ?, ?, ?)",
            (str(id), _time_in(created_at), _time_in(updated_at), name),
        )
        return self._one_user("id = ?", str(id))

    def _one_user(self, condition: str, value: str) -> User:
        return _user(self._one(
            f"SELECT id, created_at, updated_at, name FROM users WHERE {condition}",
            (value,),
        ))

    def get_user(self, name: str) -> User:
        return self._one_user("name = ?", name)

    def get_users(self) -> list[User]:
        rows = self._execute("SELECT id, created_at, updated_at, name FROM users")
        return [_user(row) for row in rows.fetchall()]

    def reset_users(self) -> None:
        self._write("DELETE FROM users")

    # feeds

    def create_feed(self, id: uuid.UUID, created_at: datetime, updated_at: datetime,
                    name: str, url: str, user_id: uuid.UUID) -> Feed:
        self._write(
            "INSERT INTO feeds (id, created_at, updated_at, name, url, user_id) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (str(id), _time_in(created_at), _time_in(updated_at), name, url, str(user_id)),
        )
        return _feed(self._one(f"SELECT {_FEED_COLUMNS} FROM feeds WHERE id = ?", (str(id),)))

    def get_feed_by_url(self, url: str) -> Feed:
        return _feed(self._one(f"SELECT {_FEED_COLUMNS} FROM feeds WHERE url = ?", (url,)))

    def get_feeds(self) -> list[FeedSummary]:
        rows = self._execute(
            "SELECT feeds.name, feeds.url, users.name FROM feeds "
            "JOIN users ON feeds.user_id = users.id"
        )
        return [FeedSummary(*row) for row in rows.fetchall()]

    def get_next_feed_to_fetch(self) -> Feed:
        """Return the feed fetched longest ago, never-fetched feeds first."""
        return _feed(self._one(
            f"SELECT {_FEED_COLUMNS} FROM feeds "
            "ORDER BY last_fetched_at IS NOT NULL, last_fetched_at LIMIT 1"
        ))

    def mark_feed_fetched(self, id: uuid.UUID) -> None:
        now = _time_in(_now())
        self._write(
            "UPDATE feeds SET last_fetched_at = ?, updated_at = ? WHERE id = ?",
            (now, now, str(id)),
        )

    # follows

    def create_feed_follow(self, id: uuid.UUID, created_at: datetime,
                           updated_at: datetime, user_id: uuid.UUID,
                           feed_id: uuid.UUID) -> FeedFollowDetails:
        self._write(
            "INSERT INTO feed_follows (id, created_at, updated_at, user_id, feed_id) "
            "VALUES (?, ?, ?, ?, ?)",
            (str(id), _time_in(created_at), _time_in(updated_at), str(user_id), str(feed_id)),
        )
        row = self._one(
            "SELECT feed_follows.id, feed_follows.created_at, feed_follows.updated_at, "
            "feed_follows.user_id, feed_follows.feed_id, feeds.name, users.name "
            "FROM feed_follows "
            "JOIN users ON feed_follows.user_id = users.id "
            "JOIN feeds ON feed_follows.feed_id = feeds.id "
            "WHERE feed_follows.id = ?",
            (str(id),),
        )
        follow = _follow(row[:5])
        return FeedFollowDetails(follow.id, follow.created_at, follow.updated_at,
                                 follow.user_id, follow.feed_id, row[5], row[6])

    def delete_feed_follow(self, user_id: uuid.UUID, feed_id: uuid.UUID) -> None:
        self._write(
            "DELETE FROM feed_follows WHERE user_id = ? AND feed_id = ?",
            (str(user_id), str(feed_id)),
        )

    def get_feed_follows_for_user(self, user_id: uuid.UUID) -> list[FeedFollowDetails]:
        rows = self._execute(
            "SELECT users.name, feeds.name, feed_follows.id, feed_follows.created_at, "
            "feed_follows.updated_at, feed_follows.user_id, feed_follows.feed_id "
            "FROM users "
            "JOIN feed_follows ON users.id = feed_follows.user_id "
            "JOIN feeds ON feed_follows.feed_id = feeds.id "
            "WHERE users.id = ?",
            (str(user_id),),
        )
        details = []
        for row in rows.fetchall():
            follow = _follow(row[2:])
            details.append(FeedFollowDetails(
                follow.id, follow.created_at, follow.updated_at,
                follow.user_id, follow.feed_id, row[1], row[0],
            ))
        return details

    # posts

    def create_post(self, id: uuid.UUID, title: str, url: str, description: str,
                    published_at: datetime | None, feed_id: uuid.UUID) -> Post:
        now = _time_in(_now())
        self._write(
            "INSERT INTO posts (id, created_at, updated_at, title, url, description, "
            "published_at, feed_id) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (str(id), now, now, title, url, description,
             _time_in(published_at), str(feed_id)),
        )
        return _post(self._one(
            "SELECT id, created_at, updated_at, title, url, description, published_at, "
            "feed_id FROM posts WHERE id = ?",
            (str(id),),
        ))

    def get_posts_for_user(self, user_id: uuid.UUID, limit: int) -> list[PostWithFeed]:
        """Return the newest posts from feeds the user follows, undated first."""
        if limit < 0:
            raise DatabaseError("LIMIT must not be negative")
        rows = self._execute(
            "SELECT posts.id, posts.created_at, posts.updated_at, posts.title, posts.url, "
            "posts.description, posts.published_at, posts.feed_id, "
            "feeds.id, feeds.created_at, feeds.updated_at, feeds.name, feeds.url, "
            "feeds.user_id, feeds.last_fetched_at, "
            "feed_follows.id, feed_follows.created_at, feed_follows.updated_at, "
            "feed_follows.user_id, feed_follows.feed_id "
            "FROM posts "
            "JOIN feeds ON posts.feed_id = feeds.id "
            "JOIN feed_follows ON feeds.id = feed_follows.feed_id "
            "WHERE feed_follows.user_id = ? "
            "ORDER BY posts.published_at IS NULL DESC, posts.published_at DESC LIMIT ?",
            (str(user_id), limit),
        )
        return [
            PostWithFeed(_post(row[:8]), _feed(row[8:15]), _follow(row[15:20]))
            for row in rows.fetchall()
        ]


def open_database(url: str) -> Queries:
    """Open the SQLite database named by *url* and make sure its tables exist."""
    path = _sqlite_path(url)
    try:
        connection = sqlite3.connect(path)
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc
    queries = Queries(connection)
    queries.create_schema()
    return queries