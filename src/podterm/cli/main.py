"""Root CLI group for podterm."""

from __future__ import annotations

from pathlib import Path

import click
from pydantic import ValidationError

from podterm import __version__
from podterm.cli.context import AppContext
from podterm.models.config import DEFAULT_CONFIG_PATH, load_config
from podterm.services.paths import EpisodePaths
from podterm.utils.progress import log_error


@click.group()
@click.version_option(version=__version__, prog_name="podterm")
@click.option(
    "--config", "-c", "config_path",
    default=DEFAULT_CONFIG_PATH,
    type=click.Path(),
    help="Path to podterm.yaml",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """Play, transcribe and chat about podcast episodes."""
    path = Path(config_path)
    try:
        config = load_config(path)
    except ValidationError as e:
        log_error(f"Invalid config {path}: {e}")
        raise SystemExit(1)
    root = path.resolve().parent if path.exists() else Path.cwd()
    ctx.obj = AppContext(config=config, paths=EpisodePaths(config.paths, root=root))


# Import and register subcommands
from podterm.cli.init_cmd import init_cmd  # noqa: E402
from podterm.cli.episodes_cmd import episodes_cmd  # noqa: E402
from podterm.cli.download_cmd import download_cmd  # noqa: E402
from podterm.cli.transcribe_cmd import transcribe_cmd  # noqa: E402
from podterm.cli.play_cmd import play_cmd  # noqa: E402
from podterm.cli.chat_cmd import chat_cmd  # noqa: E402

cli.add_command(init_cmd, "init")
cli.add_command(episodes_cmd, "episodes")
cli.add_command(download_cmd, "download")
cli.add_command(transcribe_cmd, "transcribe")
cli.add_command(play_cmd, "play")
cli.add_command(chat_cmd, "chat")
