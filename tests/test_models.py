import uuid
from datetime import datetime, timezone

from gator.models import Feed, FeedFollow, FeedSummary, Post, PostWithFeed

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _post_with_feed(published_at):
    user_id = uuid.uuid4()
    feed = Feed(uuid.uuid4(), NOW, NOW, "Tech Blog", "https://example.com/rss", user_id)
    post = Post(uuid.uuid4(), NOW, NOW, "Hello", "https://example.com/hello",
                "First post", published_at, feed.id)
    follow = FeedFollow(uuid.uuid4(), NOW, NOW, user_id, feed.id)
    return PostWithFeed(post, feed, follow)


def test_feed_summary_describe():
    summary = FeedSummary("Tech Blog", "https://example.com/rss", "kahya")
    assert summary.describe() == "- Feed: Tech Blog, URL: https://example.com/rss, User: kahya"


def test_feed_default_last_fetched_is_none():
    feed = Feed(uuid.uuid4(), NOW, NOW, "n", "u", uuid.uuid4())
    assert feed.last_fetched_at is None


def test_post_with_feed_name_is_feed_name():
    assert _post_with_feed(NOW).name == "Tech Blog"


def test_render_layout():
    lines = _post_with_feed(datetime(2024, 3, 5, 12, 0)).render().splitlines()
    assert lines[0] == "Tue Mar 5 from Tech Blog"
    assert lines[1] == "--- Hello ---"
    assert lines[2] == "    First post"
    assert lines[3] == "Link: https://example.com/hello"
    assert lines[4] == "====================================="
    assert len(lines) == 5


def test_render_without_date_uses_zero_time():
    first = _post_with_feed(None).render().splitlines()[0]
    assert first == "Mon Jan 1 from Tech Blog"


def test_render_ends_with_newline():
    assert _post_with_feed(NOW).render().endswith("=\n")