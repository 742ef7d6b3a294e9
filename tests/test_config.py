import json

import pytest

from gator import config
from gator.config import Config


def test_config_file_path_is_in_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert config.config_file_path() == tmp_path / ".gatorconfig.json"


def test_read_loads_fields(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"db_url": "sqlite:///feeds.db", "current_user_name": "kahya"}))
    cfg = config.read(path)
    assert cfg.db_url == "sqlite:///feeds.db"
    assert cfg.current_user_name == "kahya"
    assert cfg.path == path


def test_read_defaults_missing_fields(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"db_url": "sqlite://"}))
    cfg = config.read(path)
    assert cfg.current_user_name == ""
    assert cfg.db_url == "sqlite://"


def test_read_uses_home_by_default(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / ".gatorconfig.json").write_text('{"db_url":"x.db"}')
    assert config.read().db_url == "x.db"


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        config.read(tmp_path / "absent.json")


def test_read_invalid_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        config.read(path)


def test_read_rejects_non_string_field(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text('{"db_url": 5}')
    with pytest.raises(ValueError):
        config.read(path)


def test_to_json_field_order():
    cfg = Config(db_url="sqlite://", current_user_name="lane")
    assert cfg.to_json() == '{"db_url":"sqlite://","current_user_name":"lane"}'


def test_to_json_escapes_html_characters():
    text = Config(db_url="a<b>&c").to_json()
    assert "<" not in text and ">" not in text and "&" not in text
    assert json.loads(text)["db_url"] == "a<b>&c"


def test_set_user_round_trip(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text('{"db_url":"sqlite:///f.db","current_user_name":""}')
    cfg = config.read(path)
    cfg.set_user("holgith")
    assert cfg.current_user_name == "holgith"
    again = config.read(path)
    assert again == cfg
    assert again.db_url == "sqlite:///f.db"