# gator

`gator` is a small command-line RSS aggregator. Users register, add feeds,
follow feeds that other users have added, and browse the newest posts from the
feeds they follow. A long-running `agg` command fetches feeds in turn and stores
their posts in a local SQLite database.

## Installation

```
pip install .
```

This installs the `gator` command. It needs nothing beyond the Python standard
library.

## Configuration

`gator` reads its settings from `~/.gatorconfig.json`:

```json
{
  "db_url": "/home/me/gator.db",
  "current_user_name": ""
}
```

- `db_url` is the path of the SQLite database file. The tables are created the
  first time the file is opened. A `sqlite://` prefix is accepted; any other
  `scheme://` URL is rejected with `unsupported database url`.
- `current_user_name` is the logged-in user. `gator` rewrites the file itself
  when you run `register` or `login`.

If the file cannot be read, the error is printed and, with no database
configured, the command stops with `no database url configured`.

## Commands

```
gator register <name>        create a user and log in as them
gator login <name>           log in as an existing user
gator users                  list all users, marking the current one
gator reset                  delete all users, with their feeds, follows and posts

gator addfeed <name> <url>   add a feed and follow it as the current user
gator feeds                  list all feeds with the user who added them
gator follow <url>           follow an existing feed
gator following              list the feeds the current user follows
gator unfollow <url>         stop following a feed

gator agg <interval>         fetch one feed per interval, forever (e.g. 30s, 1m, 1h30m)
gator browse [limit]         show the newest posts from followed feeds (default 2)
```

A typical session:

```
gator register alice
gator addfeed "Example News" https://example.com/feed.xml
gator agg 1m            # leave running in another terminal
gator browse 10
```

`agg` takes a duration made of numbers with the units `ns`, `us`, `ms`, `s`,
`m` and `h`; it must be positive. On each tick it picks the feed that was
fetched least recently (feeds never fetched come first), downloads it, marks it
as fetched and stores every item as a post, printing each item's title. Items
whose link is already stored are skipped. A feed that cannot be downloaded or
parsed is reported and skipped until its next turn. Publication dates in
RFC 1123 form with a numeric zone (`Mon, 02 Jan 2006 15:04:05 -0700`) are
recorded; other dates are left empty.

`browse` lists posts from the feeds the current user follows, posts without a
date first and then the newest first.

Commands that act for the current user (`addfeed`, `follow`, `following`,
`unfollow`, `browse`) fail if the configured user does not exist. Registering a
name that is taken, adding a feed URL that exists, or following a feed twice is
refused. Any error is printed and the command exits with status 1.

## Limits

- Storage is a local SQLite file only; `gator` does not connect to database
  servers.
- Feeds are parsed as RSS (`channel` with `item` elements); other feed formats
  yield no posts.

## Using it as a library

The pieces behind the command are importable:

- `gator.config` — `read`, `config_file_path` and the `Config` class
- `gator.models` — the record classes `User`, `Feed`, `FeedFollow`, `Post`,
  `FeedSummary`, `FeedFollowDetails` and `PostWithFeed`
- `gator.database` — `open_database`, the `Queries` class and the errors
  `DatabaseError`, `NotFoundError` and `DuplicateError`
- `gator.rss` — `fetch_feed`, `parse_feed`, `parse_pub_date`, `RSSFeed` and `RSSItem`
- `gator.aggregation` — `scrape_feeds`, `parse_duration` and `handler_aggregate`
- `gator.commands` — `Commands`, `Command`, `State`, `CommandError`,
  `middleware_logged_in` and the command handlers
- `gator.cli` — `build_commands` and `main`

`scrape_feeds(state, fetch)` takes the function used to download a feed, so a
feed can be supplied without network access.

## Running the tests

```
pip install ".[test]"
pytest
```