"""Command-line interface for sitekit.

Commands:
- build: Build the site into the output directory.
- serve: Serve the site locally and rebuild on change.
- url: Print the ImageKit URL for a background image.
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __version__
from .config import ConfigError, load_config
from .images import ImageUrlBuilder


@click.group()
@click.version_option(version=__version__, prog_name="sitekit")
def cli():
    """sitekit static site builder."""


@cli.command()
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Write the site here instead of the configured output directory",
)
def build(output: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, build_site

    try:
        result = build_site(project_root, output_dir_override=output)
    except ConfigError as exc:
        _report_failure(project_root, exc.path, exc.message)
        raise SystemExit(1) from None
    except BuildError as exc:
        _report_failure(project_root, exc.source_path, exc.message)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.pages)} pages into {result.output_dir}")


@cli.command()
@click.option(
    "--port",
    type=int,
    required=False,
    help="Port to run the dev server (overrides sitekit.yaml)",
)
def serve(port: int | None):
    """Serve the site locally and rebuild on change."""
    project_root = Path.cwd()
    from .server import DevServer

    try:
        server = DevServer(project_root, http_port=port)
    except ConfigError as exc:
        _report_failure(project_root, exc.path, exc.message)
        raise SystemExit(1) from None
    server.start()


@cli.command()
@click.argument("src")
@click.option("--width", default=None, help="Image width (default 1920)")
def url(src: str, width: str | None):
    """Print the ImageKit URL for SRC, as used for CSS backgrounds."""
    try:
        config = load_config(Path.cwd())
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None
    click.echo(ImageUrlBuilder(config.imagekit).background_image_url(src, width))


def _report_failure(project_root: Path, path: Path, message: str) -> None:
    try:
        shown = path.relative_to(project_root)
    except ValueError:
        shown = path
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {shown}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)


def main():
    """Entry point for the CLI application."""
    cli()
