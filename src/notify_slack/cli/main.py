"""CLI entry point for notify_slack."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import platform
import signal
import sys
from pathlib import Path
from typing import Any, BinaryIO, NoReturn

import click

from notify_slack import __version__
from notify_slack.cli.source import StdinSource
from notify_slack.core.config import (
    ConfigError,
    find_toml_file,
    load_env_config,
    load_toml_config,
    parse_duration,
)
from notify_slack.core.log import configure_logging
from notify_slack.slack.client import SlackClient, SlackError
from notify_slack.throttle.exec import Exec, ReadError, ticker
from notify_slack.types.config import Config
from notify_slack.types.slack import PostFileParam, PostTextParam

logger = logging.getLogger(__name__)

EXIT_FAIL = 1


class DurationType(click.ParamType):
    """Click parameter for durations like ``1s`` or ``500ms``."""

    name = "duration"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> float:
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return parse_duration(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid duration (e.g. 1s, 500ms, 1m30s)", param, ctx)


DURATION = DurationType()


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    raise SystemExit(EXIT_FAIL)


@click.command(name="notify_slack")
@click.argument("files", nargs=-1, metavar="[FILE]")
@click.option("--channel", default="", help="Specify channel (unavailable for new Incoming Webhooks)")
@click.option("--channel-id", default="", help="Specify channel id (for uploading a file)")
@click.option("--slack-url", default="", help="Slack url (Incoming Webhooks URL)")
@click.option("--token", default="", help="Token (for uploading a file)")
@click.option("--username", default="", help="Specify username (unavailable for new Incoming Webhooks)")
@click.option("--icon-emoji", default="", help="Specify icon emoji (unavailable for new Incoming Webhooks)")
@click.option("--interval", type=DURATION, default=None, help="Flush interval (default: 1s)")
@click.option("-c", "config_file", default=None, help="Config file name")
@click.option("--filename", "upload_filename", default="", help="Specify a file name (for uploading a file)")
@click.option("--filetype", default="", help="Specify a filetype (for uploading a file)")
@click.option("--snippet", is_flag=True, help="Switch to file uploading mode")
@click.option("--debug", is_flag=True, help="Debug mode (for developers)")
@click.option("--version", "show_version", is_flag=True, help="Print version information and quit")
def cli(
    files: tuple[str, ...],
    channel: str,
    channel_id: str,
    slack_url: str,
    token: str,
    username: str,
    icon_emoji: str,
    interval: float | None,
    config_file: str | None,
    upload_filename: str,
    filetype: str,
    snippet: bool,
    debug: bool,
    show_version: bool,
) -> None:
    """Post standard input to Slack, batched every --interval.

    \b
    Usage:
      some_command | notify_slack
      notify_slack --snippet --filename out.log < out.log
      notify_slack --filetype diff changes.diff
    """
    if show_version:
        click.echo(f"notify_slack version {__version__}; Python {platform.python_version()}", err=True)
        return

    if len(files) > 1:
        _fail("You cannot pass multiple files")
    filename = files[0] if files else ""

    stdin = sys.stdin.buffer
    if not filename and stdin.isatty():
        _fail("No input file specified")

    conf = Config(
        slack_url=slack_url,
        token=token,
        channel=channel,
        channel_id=channel_id,
        username=username,
        icon_emoji=icon_emoji,
        interval=interval,
    )
    try:
        toml_path = find_toml_file(config_file)
        if toml_path is not None:
            load_toml_config(conf, toml_path)
        load_env_config(conf)
    except ConfigError as e:
        _fail(str(e))

    configure_logging(debug)

    if filename or snippet:
        if not conf.token:
            _fail("must specify Slack token for uploading to snippet")
        _upload_snippet(conf, filename, upload_filename or filename, filetype, stdin)
        return

    if not conf.slack_url:
        _fail("must specify Slack URL")
    if conf.duration <= 0:
        _fail(f"interval must be positive: {conf.duration}s")

    try:
        asyncio.run(_stream(conf, stdin, sys.stdout.buffer))
    except (ValueError, ReadError) as e:
        _fail(str(e))


def _upload_snippet(
    conf: Config, filename: str, upload_filename: str, snippet_type: str, stdin: BinaryIO,
) -> None:
    if filename:
        path = Path(filename)
        if not path.exists():
            _fail(f"{filename} does not exist")
        try:
            content = path.read_bytes()
        except OSError as e:
            _fail(f"can't open {filename}: {e}")
    else:
        content = stdin.read()

    param = PostFileParam(
        filename=upload_filename,
        channel_id=conf.channel_id,
        snippet_type=snippet_type,
    )
    try:
        asyncio.run(_upload(conf.token, param, content))
    except (ValueError, SlackError) as e:
        _fail(str(e))


async def _upload(token: str, param: PostFileParam, content: bytes) -> None:
    async with SlackClient.for_file(token) as client:
        await client.post_file(param, content)


async def _stream(conf: Config, stdin: BinaryIO, stdout: BinaryIO) -> None:
    """Tee stdin to stdout and post it to the webhook in batches."""
    loop = asyncio.get_running_loop()
    cancel = asyncio.Event()
    installed = _install_signal_handlers(loop, cancel)

    base = PostTextParam(channel=conf.channel, username=conf.username, icon_emoji=conf.icon_emoji)

    try:
        async with SlackClient.for_webhook(conf.slack_url) as client:

            async def flush(output: str) -> None:
                await client.post_text(dataclasses.replace(base, text=output))

            ex = Exec(StdinSource(stdin, echo=stdout))
            await ex.run(cancel, ticker(conf.duration), flush, flush)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop, cancel: asyncio.Event,
) -> list[signal.Signals]:
    """Map SIGINT/SIGTERM onto *cancel*. Returns the signals actually installed."""

    def _on_signal(sig: signal.Signals) -> None:
        logger.debug("received %s; flushing", sig.name)
        cancel.set()

    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except (NotImplementedError, RuntimeError) as e:
            logger.debug("cannot handle %s: %s", sig.name, e)
            continue
        installed.append(sig)
    return installed


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
