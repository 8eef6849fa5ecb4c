"""Command-line interface for artifactlens."""

import logging
from pathlib import Path

import click
import yaml

from . import __version__
from .artifact import LocalArtifact
from .config import (
    CONFIG_FILENAME,
    config_to_dict,
    create_default_config,
    find_config_file,
    load_config,
)
from .errors import LensError
from .lenses import build_registry, resource_dir_for_lens
from .tail import last_n_lines, last_n_lines_chunked

config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)


@click.group()
@click.version_option(version=__version__, prog_name="artifactlens")
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for debug)")
def main(verbose):
    """Tail large job artifacts and render them with lenses.

    \b
    Quick start:
      artifactlens config init            # Create .artifactlens.yaml
      artifactlens tail build-log.txt     # Last 100 lines
      artifactlens tail build-log.txt -n 20
      artifactlens lenses                 # List available lenses
      artifactlens render buildlog build-log.txt
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-n", "--lines", type=click.IntRange(min=0), help="Number of lines")
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    help="Bytes per backward read (default: 300 per line + 1)",
)
@config_option
def tail(file, lines, chunk_size, config_path):
    """Print the last lines of FILE.

    Only the end of the file is read, in chunks, until enough lines
    have been found.

    \b
    Examples:
      artifactlens tail build-log.txt
      artifactlens tail build-log.txt -n 500 --chunk-size 65536
    """
    cfg = _load(config_path)
    n = lines if lines is not None else cfg.tail.lines
    chunk_size = chunk_size or cfg.tail.chunk_size
    artifact = LocalArtifact(Path(file), size_limit=cfg.size_limit)

    try:
        if chunk_size:
            result = last_n_lines_chunked(artifact, n, chunk_size)
        else:
            result = last_n_lines(artifact, n)
    except LensError as e:
        raise click.ClickException(f"{_relative_path(Path(file))}: {e}")

    for line in result:
        click.echo(line)


@main.command("lenses")
@config_option
def list_lenses(config_path):
    """List available lenses, highest priority first."""
    registry = build_registry(_load(config_path))
    found = registry.lenses()
    if not found:
        click.echo("No lenses registered")
        return

    for lens in found:
        cfg = lens.config()
        flags = " (title hidden)" if cfg.hide_title else ""
        click.echo(f"{cfg.name:<16} {cfg.priority:>4}  {cfg.title}{flags}")


@main.command()
@click.argument("lens_name")
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--part",
    type=click.Choice(["header", "body", "callback"]),
    default="body",
    show_default=True,
    help="Lens output to render",
)
@click.option("--data", default="", help="Data string passed to body/callback")
@click.option(
    "--resources",
    "resources_dir",
    type=click.Path(file_okay=False),
    default="resources",
    show_default=True,
    help="Base directory of lens resources",
)
@config_option
def render(lens_name, files, part, data, resources_dir, config_path):
    """Render FILES with the lens LENS_NAME.

    \b
    Examples:
      artifactlens render buildlog build-log.txt
      artifactlens render buildlog build-log.txt --data '{"lines": 20}'
      artifactlens render links artifacts/*.xml
    """
    if not files:
        raise click.UsageError("No files specified")

    cfg = _load(config_path)
    registry = build_registry(cfg)
    try:
        lens = registry.get(lens_name)
    except LensError as e:
        names = ", ".join(registry.names()) or "none"
        raise click.ClickException(f"{e} (available: {names})")

    artifacts = [
        LocalArtifact(
            Path(f), job_path=_relative_path(Path(f)), size_limit=cfg.size_limit
        )
        for f in files
    ]
    resource_dir = resource_dir_for_lens(Path(resources_dir), lens_name)

    if part == "header":
        output = lens.header(artifacts, resource_dir)
    elif part == "callback":
        output = lens.callback(artifacts, resource_dir, data)
    else:
        output = lens.body(artifacts, resource_dir, data)
    click.echo(output)


@main.group()
def config():
    """Manage artifactlens configuration."""
    pass


@config.command("init")
@click.option(
    "-d",
    "--directory",
    type=click.Path(),
    default=".",
    help="Directory to create config in",
)
def config_init(directory):
    """Create a new .artifactlens.yaml configuration file."""
    try:
        config_path = create_default_config(Path(directory))
    except LensError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created: {config_path}")


@config.command("show")
@config_option
def config_show(config_path):
    """Display current configuration.

    Shows merged configuration from file, environment, and defaults.
    """
    cfg = _load(config_path)
    data = config_to_dict(cfg)
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))


@config.command("where")
@click.option(
    "-d",
    "--directory",
    type=click.Path(exists=True),
    help="Directory to search from",
)
def config_where(directory):
    """Show which config file would be used.

    Searches up the directory tree for .artifactlens.yaml.
    """
    start = Path(directory) if directory else Path.cwd()
    config_path = find_config_file(start)

    if config_path:
        click.echo(f"Config file: {config_path}")
    else:
        click.echo(f"No {CONFIG_FILENAME} found (searched from {start})")


def _load(config_path: str | None):
    """Load config, converting errors for click."""
    try:
        return load_config(config_path=Path(config_path) if config_path else None)
    except LensError as e:
        raise click.ClickException(str(e))


def _relative_path(path: Path) -> str:
    """Get a relative path for display."""
    try:
        return str(path.resolve().relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main()
