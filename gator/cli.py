"""Command-line entry point."""

from __future__ import annotations

import sys

from .aggregation import handler_aggregate
from .commands import (
    Command,
    CommandError,
    Commands,
    State,
    handler_add_feed,
    handler_browse,
    handler_follow,
    handler_following,
    handler_get_feeds,
    handler_get_users,
    handler_login,
    handler_register,
    handler_reset,
    handler_unfollow,
    middleware_logged_in,
)
from .config import Config, read
from .database import DatabaseError, open_database


def build_commands() -> Commands:
    """Return the registry of every command the program knows."""
    cmds = Commands()
    cmds.register("login", handler_login)
    cmds.register("register", handler_register)
    cmds.register("reset", handler_reset)
    cmds.register("users", handler_get_users)
    cmds.register("agg", handler_aggregate)
    cmds.register("addfeed", middleware_logged_in(handler_add_feed))
    cmds.register("feeds", handler_get_feeds)
    cmds.register("follow", middleware_logged_in(handler_follow))
    cmds.register("following", middleware_logged_in(handler_following))
    cmds.register("unfollow", middleware_logged_in(handler_unfollow))
    cmds.register("browse", middleware_logged_in(handler_browse))
    return cmds


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        config = read()
    except (OSError, ValueError) as exc:
        print(exc)
        config = Config()
    try:
        db = open_database(config.db_url)
    except DatabaseError as exc:
        print(exc)
        return 1
    try:
        if not args:
            print("error: no command entered")
            return 1
        state = State(db, config)
        build_commands().run(state, Command(args[0], args[1:]))
    except (CommandError, DatabaseError, OSError, ValueError) as exc:
        print(exc)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())