"""Periodic collection of posts from stored feeds."""

from __future__ import annotations

import logging
import re
import time
import uuid
from datetime import timedelta
from fractions import Fraction
from typing import Callable

from .commands import Command, CommandError, State
from .database import DatabaseError, DuplicateError, NotFoundError
from .rss import RSSFeed, fetch_feed, parse_pub_date

logger = logging.getLogger(__name__)

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_PART = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)(ns|us|µs|μs|ms|h|m|s)")


def _invalid(text: str) -> ValueError:
    return ValueError(f'time: invalid duration "{text}"')


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``1h30m`` or ``300ms``."""
    body = text
    sign = 1
    if body[:1] in "+-" and body:
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise _invalid(text)
    total = Fraction(0)
    pos = 0
    while pos < len(body):
        match = _PART.match(body, pos)
        if match is None:
            raise _invalid(text)
        total += Fraction(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    return timedelta(microseconds=float(sign * total / 1000))


def _decimal(value: int, scale: int) -> str:
    whole, rest = divmod(value, scale)
    if not rest:
        return str(whole)
    digits = str(rest).rjust(len(str(scale)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def _format_duration(duration: timedelta) -> str:
    ns = (duration // timedelta(microseconds=1)) * 1000
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1_000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_decimal(ns, 1_000)}µs"
    if ns < 1_000_000_000:
        return f"{sign}{_decimal(ns, 1_000_000)}ms"
    hours, rest = divmod(ns, _UNITS["h"])
    minutes, rest = divmod(rest, _UNITS["m"])
    seconds = _decimal(rest, _UNITS["s"])
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def scrape_feeds(state: State, fetch: Callable[[str], RSSFeed] = fetch_feed) -> None:
    """Fetch the stalest feed and store its posts."""
    try:
        feed = state.db.get_next_feed_to_fetch()
    except NotFoundError:
        state.say("No feeds to fetch, waiting for the next tick…")
        return
    try:
        rss_feed = fetch(feed.url)
    except Exception as exc:  # any fetch or parse failure skips this feed
        state.say(f"feed at {feed.url} encountered error: {exc}")
        return
    state.db.mark_feed_fetched(feed.id)
    for item in rss_feed.items:
        state.say(item.title)
        try:
            state.db.create_post(uuid.uuid4(), item.title, item.link, item.description,
                                 parse_pub_date(item.pub_date), feed.id)
        except DuplicateError:
            continue
        except DatabaseError as exc:
            logger.error("Couldn't create post: %s", exc)


def handler_aggregate(state: State, cmd: Command) -> None:
    """Scrape feeds now and then once every interval, forever."""
    if not cmd.args:
        raise CommandError("no duration provided")
    try:
        interval = parse_duration(cmd.args[0])
    except ValueError as exc:
        raise CommandError(str(exc)) from exc
    if interval <= timedelta(0):
        raise CommandError("non-positive interval for ticker")
    state.say(f"Collecting feeds every {_format_duration(interval)}")
    seconds = interval.total_seconds()
    deadline = time.monotonic()
    while True:
        try:
            scrape_feeds(state)
        except DatabaseError as exc:
            state.say(f"Error scraping feeds: {exc}")
        deadline += seconds
        time.sleep(max(0.0, deadline - time.monotonic()))