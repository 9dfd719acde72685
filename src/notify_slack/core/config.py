"""Configuration loading (TOML, env vars, .env)."""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from notify_slack.types.config import Config

# Load .env from current directory (and parents), won't override existing env vars
load_dotenv()

ENV_MAP = {
    "slack_url": "NOTIFY_SLACK_WEBHOOK_URL",
    "token": "NOTIFY_SLACK_TOKEN",
    "channel": "NOTIFY_SLACK_CHANNEL",
    "channel_id": "NOTIFY_SLACK_FILE_CHANNEL_ID",
    "username": "NOTIFY_SLACK_USERNAME",
    "icon_emoji": "NOTIFY_SLACK_ICON_EMOJI",
}

# [slack] table key -> Config field
TOML_MAP = {
    "url": "slack_url",
    "token": "token",
    "channel": "channel",
    "file_channel_id": "channel_id",
    "username": "username",
    "icon_emoji": "icon_emoji",
}

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


class ConfigError(Exception):
    """Invalid or deprecated configuration."""


def parse_duration(text: str) -> float:
    """Parse a duration such as ``"2s"``, ``"500ms"`` or ``"1m30s"`` into seconds."""
    s = text.strip()
    sign = 1.0
    if s[:1] in ("+", "-"):
        sign = -1.0 if s[0] == "-" else 1.0
        s = s[1:]
    if s == "0":
        return 0.0
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _DURATION_PART.match(s, pos)
        if m is None:
            raise ValueError(f"invalid duration {text!r}")
        total += float(m.group(1)) * _UNITS[m.group(2)]
        pos = m.end()
    return sign * total


def load_env_config(config: Config) -> None:
    """Fill empty fields of *config* from NOTIFY_SLACK_* environment variables."""
    for field_name, env_var in ENV_MAP.items():
        if not getattr(config, field_name):
            setattr(config, field_name, os.environ.get(env_var, ""))

    if os.environ.get("NOTIFY_SLACK_SNIPPET_CHANNEL"):
        raise ConfigError("the NOTIFY_SLACK_SNIPPET_CHANNEL option is deprecated")

    interval = os.environ.get("NOTIFY_SLACK_INTERVAL", "")
    if interval and config.interval is None:
        try:
            config.interval = parse_duration(interval)
        except ValueError as exc:
            raise ConfigError(
                f"incorrect value to interval option from NOTIFY_SLACK_INTERVAL: {interval}: {exc}"
            ) from exc


def load_toml_config(config: Config, path: str | Path) -> None:
    """Fill empty fields of *config* from the ``[slack]`` table of a TOML file."""
    try:
        with open(path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except OSError as exc:
        raise ConfigError(f"can't read config file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid config file {path}: {exc}") from exc

    section = data.get("slack", {})
    if not isinstance(section, dict):
        raise ConfigError(f"invalid config file {path}: [slack] must be a table")

    for key, field_name in TOML_MAP.items():
        value = section.get(key)
        if value and not getattr(config, field_name):
            setattr(config, field_name, str(value))

    if section.get("snippet_channel"):
        raise ConfigError("the snippet_channel option is deprecated")

    interval = section.get("interval")
    if interval and config.interval is None:
        try:
            config.interval = parse_duration(str(interval))
        except ValueError as exc:
            raise ConfigError(f"incorrect value to interval option: {interval}: {exc}") from exc


def find_toml_file(explicit: str | None = None) -> Path | None:
    """Resolve which TOML file to load.

    An explicit path always wins. Otherwise the first existing of
    ``~/.notify_slack.toml``, ``~/etc/notify_slack.toml`` and
    ``/etc/notify_slack.toml`` is used.
    """
    if explicit:
        return Path(explicit)

    candidates: list[Path] = []
    try:
        home = Path.home()
    except RuntimeError:
        home = None
    if home is not None:
        candidates.append(home / ".notify_slack.toml")
        candidates.append(home / "etc" / "notify_slack.toml")
    candidates.append(Path("/etc/notify_slack.toml"))

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None
