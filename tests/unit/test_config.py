"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from notify_slack.core.config import (
    ConfigError,
    find_toml_file,
    load_env_config,
    load_toml_config,
    parse_duration,
)
from notify_slack.types.config import DEFAULT_INTERVAL, Config

FULL_TOML = """\
[slack]
url = "https://hooks.slack.com/aaaaa"
token = "xoxp-token"
channel = "#test"
file_channel_id = "C12345678"
username = "deploy!"
icon_emoji = ":rocket:"
interval = "2s"
"""

FULL_ENV = {
    "NOTIFY_SLACK_WEBHOOK_URL": "https://hooks.slack.com/aaaaa",
    "NOTIFY_SLACK_TOKEN": "xoxp-token",
    "NOTIFY_SLACK_CHANNEL": "#test",
    "NOTIFY_SLACK_FILE_CHANNEL_ID": "C12345678",
    "NOTIFY_SLACK_USERNAME": "deploy!",
    "NOTIFY_SLACK_ICON_EMOJI": ":rocket:",
    "NOTIFY_SLACK_INTERVAL": "2s",
}


def _expected_full(config: Config) -> None:
    assert config.slack_url == "https://hooks.slack.com/aaaaa"
    assert config.token == "xoxp-token"
    assert config.channel == "#test"
    assert config.channel_id == "C12345678"
    assert config.username == "deploy!"
    assert config.icon_emoji == ":rocket:"
    assert config.duration == 2.0


class TestParseDuration:
    @pytest.mark.parametrize(
        ("text", "seconds"),
        [
            ("2s", 2.0),
            ("500ms", 0.5),
            ("1m30s", 90.0),
            ("1.5h", 5400.0),
            ("0", 0.0),
            ("-1s", -1.0),
        ],
    )
    def test_valid(self, text: str, seconds: float) -> None:
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize("text", ["", "2", "s", "2 s", "1d", "abc"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_duration(text)


class TestTOML:
    def test_load_all_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(FULL_TOML)

        config = Config()
        load_toml_config(config, path)
        _expected_full(config)

    def test_does_not_override_flags(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(FULL_TOML)

        config = Config(channel="#from-flag", interval=5.0)
        load_toml_config(config, path)
        assert config.channel == "#from-flag"
        assert config.duration == 5.0
        assert config.username == "deploy!"

    def test_deprecated_snippet_channel(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[slack]\nurl = "https://hooks.slack.com/aaaaa"\nsnippet_channel = "#general"\n')

        with pytest.raises(ConfigError, match="the snippet_channel option is deprecated"):
            load_toml_config(Config(), path)

    def test_bad_interval(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[slack]\ninterval = "soon"\n')

        with pytest.raises(ConfigError, match="incorrect value to interval option"):
            load_toml_config(Config(), path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[slack\n")

        with pytest.raises(ConfigError, match="invalid config file"):
            load_toml_config(Config(), path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="can't read config file"):
            load_toml_config(Config(), tmp_path / "nope.toml")

    def test_no_slack_table(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[other]\nkey = "value"\n')

        config = Config()
        load_toml_config(config, path)
        assert config == Config()


class TestEnv:
    def test_load_all_fields(self, clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
        for key, value in FULL_ENV.items():
            monkeypatch.setenv(key, value)

        config = Config()
        load_env_config(config)
        _expected_full(config)

    def test_lower_precedence_than_existing_values(
        self, clean_env, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("NOTIFY_SLACK_WEBHOOK_URL", "https://hooks.slack.com/env")
        monkeypatch.setenv("NOTIFY_SLACK_INTERVAL", "3s")

        config = Config(slack_url="https://hooks.slack.com/flag", interval=1.5)
        load_env_config(config)
        assert config.slack_url == "https://hooks.slack.com/flag"
        assert config.duration == 1.5

    def test_deprecated_snippet_channel(self, clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOTIFY_SLACK_SNIPPET_CHANNEL", "#general")

        with pytest.raises(ConfigError, match="NOTIFY_SLACK_SNIPPET_CHANNEL option is deprecated"):
            load_env_config(Config())

    def test_bad_interval(self, clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOTIFY_SLACK_INTERVAL", "fast")

        with pytest.raises(ConfigError, match="NOTIFY_SLACK_INTERVAL"):
            load_env_config(Config())

    def test_default_interval(self, clean_env) -> None:
        config = Config()
        load_env_config(config)
        assert config.interval is None
        assert config.duration == DEFAULT_INTERVAL


class TestFindTOMLFile:
    def test_explicit_path_wins(self, fake_home: Path) -> None:
        (fake_home / ".notify_slack.toml").write_text("")
        assert find_toml_file("custom.toml") == Path("custom.toml")

    def test_home_dotfile(self, fake_home: Path) -> None:
        dotfile = fake_home / ".notify_slack.toml"
        dotfile.write_text("")
        assert find_toml_file() == dotfile

    def test_home_etc(self, fake_home: Path) -> None:
        etc = fake_home / "etc"
        etc.mkdir()
        (etc / "notify_slack.toml").write_text("")
        assert find_toml_file() == etc / "notify_slack.toml"

    def test_dotfile_preferred_over_home_etc(self, fake_home: Path) -> None:
        etc = fake_home / "etc"
        etc.mkdir()
        (etc / "notify_slack.toml").write_text("")
        dotfile = fake_home / ".notify_slack.toml"
        dotfile.write_text("")
        assert find_toml_file() == dotfile
