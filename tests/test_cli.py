import json

import pytest

from gator.cli import build_commands, main
from gator.config import read


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / ".gatorconfig.json").write_text(
        json.dumps({"db_url": str(tmp_path / "gator.db"), "current_user_name": ""})
    )
    return tmp_path


def test_build_commands_names():
    assert set(build_commands().handlers) == {
        "login", "register", "reset", "users", "agg", "addfeed",
        "feeds", "follow", "following", "unfollow", "browse",
    }


def test_main_without_command(home, capsys):
    assert main([]) == 1
    assert "error: no command entered" in capsys.readouterr().out


def test_main_unknown_command(home, capsys):
    assert main(["frobnicate"]) == 1
    assert "command not found" in capsys.readouterr().out


def test_main_register_and_list(home, capsys):
    assert main(["register", "alice"]) == 0
    assert read(home / ".gatorconfig.json").current_user_name == "alice"
    assert main(["users"]) == 0
    assert "* alice (current)" in capsys.readouterr().out


def test_main_missing_database_url(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert main(["users"]) == 1
    assert "no database url configured" in capsys.readouterr().out