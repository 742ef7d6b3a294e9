"""Records stored in and read from the feed database."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_SEPARATOR = "====================================="


def _short_date(moment: datetime | None) -> str:
    if moment is None:
        moment = datetime(1, 1, 1)
    return f"{_WEEKDAYS[moment.weekday()]} {_MONTHS[moment.month - 1]} {moment.day}"


@dataclass
class User:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    name: str


@dataclass
class Feed:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    name: str
    url: str
    user_id: uuid.UUID
    last_fetched_at: datetime | None = None


@dataclass
class FeedFollow:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    user_id: uuid.UUID
    feed_id: uuid.UUID


@dataclass
class Post:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    title: str
    url: str
    description: str
    published_at: datetime | None
    feed_id: uuid.UUID


@dataclass
class FeedSummary:
    """A feed together with the name of the user who added it."""

    name: str
    url: str
    username: str

    def describe(self) -> str:
        return f"- Feed: {self.name}, URL: {self.url}, User: {self.username}"


@dataclass
class FeedFollowDetails:
    """A follow joined with the names of its feed and user."""

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    user_id: uuid.UUID
    feed_id: uuid.UUID
    feed_name: str
    user_name: str


@dataclass
class PostWithFeed:
    """A post with the feed it came from and the follow that selected it."""

    post: Post
    feed: Feed
    follow: FeedFollow

    @property
    def name(self) -> str:
        return self.feed.name

    def render(self) -> str:
        """Format the post the way the browse listing shows it."""
        lines = [
            f"{_short_date(self.post.published_at)} from {self.feed.name}",
            f"--- {self.post.title} ---",
            f"    {self.post.description}",
            f"Link: {self.post.url}",
            _SEPARATOR,
        ]
        return "\n".join(lines) + "\n"