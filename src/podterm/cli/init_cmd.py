"""podterm init — write a default config and create the data directories."""

from __future__ import annotations

from pathlib import Path

import click

from podterm.models.config import DEFAULT_CONFIG_PATH, AppConfig
from podterm.services.paths import EpisodePaths
from podterm.utils.io import write_yaml
from podterm.utils.progress import log, log_error, log_success


@click.command()
@click.option(
    "--output", "-o",
    default=".",
    type=click.Path(file_okay=False),
    help="Directory to initialize",
)
@click.option("--force", is_flag=True, help="Overwrite an existing podterm.yaml")
def init_cmd(output: str, force: bool) -> None:
    """Scaffold podterm.yaml and the download/transcript directories."""
    project_dir = Path(output).resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    config_path = project_dir / DEFAULT_CONFIG_PATH
    if config_path.exists() and not force:
        log_error(f"Config already exists: {config_path} (use --force to overwrite)")
        raise SystemExit(1)

    config = AppConfig()
    write_yaml(config_path, config.model_dump(mode="json"))

    paths = EpisodePaths(config.paths, root=project_dir)
    paths.ensure_directories()

    log_success(f"Config: {config_path}")
    log_success(f"Downloads: {paths.downloads_dir}")
    log_success(f"Transcripts: {paths.transcripts_dir}")
    log(f"Sync your episode list to {paths.catalog_path}, then run `podterm episodes`.", style="")
