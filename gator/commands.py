"""Command dispatch and the handlers for each command."""

from __future__ import annotations

import re
import sys
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, TextIO

from .config import Config
from .database import DatabaseError, DuplicateError, NotFoundError, Queries
from .models import User


class CommandError(Exception):
    """A command could not be carried out."""


@dataclass
class Command:
    name: str
    args: list[str] = field(default_factory=list)


@dataclass
class State:
    db: Queries
    config: Config
    out: TextIO = field(default_factory=lambda: sys.stdout)

    def say(self, text: str, end: str = "\n") -> None:
        print(text, end=end, file=self.out)


Handler = Callable[[State, Command], None]
UserHandler = Callable[[State, Command, User], None]


class Commands:
    """Registry of command handlers by name."""

    def __init__(self) -> None:
        self.handlers: dict[str, Handler] = {}

    def register(self, name: str, handler: Handler) -> None:
        self.handlers[name] = handler

    def run(self, state: State, cmd: Command) -> None:
        handler = self.handlers.get(cmd.name)
        if handler is None:
            raise CommandError("command not found")
        handler(state, cmd)


def middleware_logged_in(handler: UserHandler) -> Handler:
    """Wrap *handler* so that it receives the logged-in user."""
    def wrapped(state: State, cmd: Command) -> None:
        user = state.db.get_user(state.config.current_user_name)
        handler(state, cmd, user)
    return wrapped


def _now() -> datetime:
    return datetime.now(timezone.utc)


def handler_login(state: State, cmd: Command) -> None:
    if not cmd.args:
        raise CommandError("no username provided")
    try:
        user = state.db.get_user(cmd.args[0])
    except NotFoundError as exc:
        raise CommandError("Error: User not found") from exc
    state.config.set_user(user.name)
    state.say(f"User {user.name} has been set")


def handler_register(state: State, cmd: Command) -> None:
    if not cmd.args:
        raise CommandError("no username provided")
    now = _now()
    try:
        user = state.db.create_user(uuid.uuid4(), now, now, cmd.args[0])
    except DuplicateError as exc:
        raise CommandError("Error: Duplicate User") from exc
    state.config.set_user(user.name)
    state.say(f"User: {user.name} was created.")


def handler_reset(state: State, cmd: Command) -> None:
    state.db.reset_users()
    state.say("Users successfully reset")


def handler_get_users(state: State, cmd: Command) -> None:
    for user in state.db.get_users():
        if user.name == state.config.current_user_name:
            state.say(f"* {user.name} (current)")
        else:
            state.say(f"* {user.name}")


def _follow(state: State, user: User, feed_id: uuid.UUID) -> None:
    now = _now()
    try:
        state.db.create_feed_follow(uuid.uuid4(), now, now, user.id, feed_id)
    except DuplicateError as exc:
        raise CommandError("Error: Duplicate Follow") from exc


def handler_add_feed(state: State, cmd: Command, user: User) -> None:
    if len(cmd.args) < 2:
        raise CommandError("error: missing name/url")
    now = _now()
    try:
        feed = state.db.create_feed(uuid.uuid4(), now, now, cmd.args[0], cmd.args[1], user.id)
    except DuplicateError as exc:
        raise CommandError("Error: Duplicate Feed") from exc
    _follow(state, user, feed.id)
    state.say(f"Feed {feed.name} was created by User {user.name}.")


def handler_get_feeds(state: State, cmd: Command) -> None:
    for summary in state.db.get_feeds():
        state.say(summary.describe())


def handler_follow(state: State, cmd: Command, user: User) -> None:
    if not cmd.args:
        raise CommandError("error: missing url")
    feed = state.db.get_feed_by_url(cmd.args[0])
    _follow(state, user, feed.id)
    state.say(f"Feed {feed.name} now followed by User {user.name}.", end="")


def handler_following(state: State, cmd: Command, user: User) -> None:
    follows = state.db.get_feed_follows_for_user(user.id)
    state.say("Current user is following:")
    for follow in follows:
        state.say(f"- Feed: {follow.feed_name}")


def handler_unfollow(state: State, cmd: Command, user: User) -> None:
    if not cmd.args:
        raise CommandError("error: missing url")
    feed = state.db.get_feed_by_url(cmd.args[0])
    state.db.delete_feed_follow(user.id, feed.id)
    state.say(f"Feed at {feed.url} successfully deleted.")


_INTEGER = re.compile(r"[+-]?[0-9]+")


def handler_browse(state: State, cmd: Command, user: User) -> None:
    limit = 2
    if len(cmd.args) == 1:
        if not _INTEGER.fullmatch(cmd.args[0]):
            raise CommandError(f"invalid limit: invalid syntax: {cmd.args[0]!r}")
        limit = int(cmd.args[0])
    try:
        posts = state.db.get_posts_for_user(user.id, limit)
    except DatabaseError as exc:
        raise CommandError(f"couldn't get posts for user: {exc}") from exc
    state.say(f"Found {len(posts)} posts for user {user.name}:")
    for post in posts:
        state.say(post.render(), end="")