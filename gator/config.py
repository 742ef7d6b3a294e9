"""Reading and writing the user's gator configuration file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILE_NAME = ".gatorconfig.json"

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def config_file_path() -> Path:
    """Return the location of the configuration file in the home directory."""
    return Path.home() / CONFIG_FILE_NAME


@dataclass
class Config:
    """Database location and the name of the logged-in user."""

    db_url: str = ""
    current_user_name: str = ""
    path: Path | None = field(default=None, compare=False, repr=False)

    def to_json(self) -> str:
        """Serialise the configuration as compact JSON."""
        text = json.dumps(
            {"db_url": self.db_url, "current_user_name": self.current_user_name},
            separators=(",", ":"),
            ensure_ascii=False,
        )
        for char, escaped in _JSON_ESCAPES.items():
            text = text.replace(char, escaped)
        return text

    def set_user(self, user_name: str) -> None:
        """Record *user_name* as the current user and save the file."""
        target = self.path if self.path is not None else config_file_path()
        self.current_user_name = user_name
        Path(target).write_text(self.to_json(), encoding="utf-8")


def _string_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"config field {key!r} must be a string")
    return value


def read(path: str | Path | None = None) -> Config:
    """Load the configuration from *path*, or from the home directory."""
    target = Path(path) if path is not None else config_file_path()
    data = json.loads(target.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("config file must hold a JSON object")
    return Config(
        db_url=_string_field(data, "db_url"),
        current_user_name=_string_field(data, "current_user_name"),
        path=target,
    )