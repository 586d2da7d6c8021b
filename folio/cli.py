"""Command-line interface for Folio.

This module defines the CLI commands using Click framework. Every command is
a thin wrapper around the library: load config, load documents, build the
index, and (for build) invoke the renderer.

Commands:
- build: Build the site into the publish directory.
- check: Validate configuration and content without rendering.
- tags: List tags with their document counts.
- new: Create a new markdown document with front matter.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import NoReturn

import click
import questionary
import yaml

from . import __version__
from .config import read_config
from .content import FileContentLoader, logical_path
from .errors import FolioError

_source_option = click.option(
    "--source",
    "-s",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root containing the site configuration",
)
_drafts_option = click.option("--drafts", is_flag=True, help="Include draft content")


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def cli():
    """Folio static site content toolkit."""


@cli.command()
@_source_option
@_drafts_option
@click.option(
    "--destination",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (overrides publishDir)",
)
def build(source: Path, drafts: bool, destination: Path | None):
    """Build the site into the publish directory."""
    from .build import build_site

    project_root = source.resolve()
    try:
        result = build_site(
            project_root, include_drafts=drafts, output_dir_override=destination
        )
    except FolioError as exc:
        _report_failure("Build failed:", exc, project_root)
    for url in result.missing_menu_targets():
        click.echo(
            click.style(f"Warning: menu entry {url} has no rendered page", fg="yellow"),
            err=True,
        )
    click.echo(f"Built {len(result.urls)} pages into {result.output_dir}")


@cli.command()
@_source_option
@_drafts_option
def check(source: Path, drafts: bool):
    """Validate configuration and content without rendering."""
    from .build import load_site

    project_root = source.resolve()
    try:
        site = load_site(project_root, include_drafts=drafts)
    except FolioError as exc:
        _report_failure("Check failed:", exc, project_root)
    index = site.index
    click.echo(
        f"{site.config.title}: {len(index.all_posts())} posts, "
        f"{len(index.all_pages())} pages, {len(index.tags())} tags"
    )


@cli.command()
@_source_option
@_drafts_option
def tags(source: Path, drafts: bool):
    """List tags with their document counts."""
    from .build import load_site

    project_root = source.resolve()
    try:
        site = load_site(project_root, include_drafts=drafts)
    except FolioError as exc:
        _report_failure("Cannot list tags:", exc, project_root)
    for tag, count in site.index.tags().counts().items():
        click.echo(f"{tag} ({count})")


@cli.command()
@click.argument("path")
@_source_option
@click.option("--title", "-t", default=None, help="Document title (prompted if omitted)")
@click.option("--tag", "tag_names", multiple=True, help="Tag to attach, repeatable")
@click.option("--page", is_flag=True, help="Create a page instead of a post")
@click.option("--draft", is_flag=True, help="Mark the document as a draft")
def new(
    path: str,
    source: Path,
    title: str | None,
    tag_names: tuple[str, ...],
    page: bool,
    draft: bool,
):
    """Create a new markdown document at PATH inside the content directory."""
    project_root = source.resolve()
    try:
        config = read_config(project_root)
    except FolioError as exc:
        _report_failure("Cannot create document:", exc, project_root)
    content_dir = project_root / config.content_dir

    rel = Path(path)
    if rel.suffix != ".md":
        rel = rel.with_name(f"{rel.name}.md")
    if rel.is_absolute() or ".." in rel.parts:
        raise click.ClickException(f"PATH must be inside the content directory: {path}")
    target = content_dir / rel
    if target.exists():
        raise click.ClickException(
            f"File already exists: {target.relative_to(project_root)}"
        )

    slug_path = logical_path(rel)
    if content_dir.is_dir():
        for existing in FileContentLoader(content_dir).iter_files():
            if logical_path(existing.relative_to(content_dir)) == slug_path:
                raise click.ClickException(
                    f"A document with path '{slug_path}' already exists: "
                    f"{existing.relative_to(project_root)}"
                )

    if title is None:
        title = questionary.text(
            "Title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        ).ask()
        if title is None:
            raise click.Abort()
    title = title.strip()
    if not title:
        raise click.ClickException("Title cannot be empty")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(_new_document(title, tag_names, page, draft), encoding="utf-8")
    click.echo(f"Created {target.relative_to(project_root)}")


def _new_document(
    title: str, tag_names: tuple[str, ...], page: bool, draft: bool
) -> str:
    """Render the YAML front matter of a new document."""
    meta: dict = {"title": title}
    if page:
        meta["type"] = "page"
    else:
        meta["date"] = datetime.now().astimezone().isoformat(timespec="seconds")
    if tag_names:
        meta["tags"] = list(tag_names)
    if draft:
        meta["draft"] = True
    frontmatter = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True)
    return f"---\n{frontmatter}---\n\n"


def _report_failure(headline: str, exc: FolioError, project_root: Path) -> NoReturn:
    """Print a styled error report and exit with status 1."""
    click.echo(click.style(headline, fg="red", bold=True), err=True)
    source_path = getattr(exc, "source_path", None)
    if source_path is not None:
        try:
            shown = source_path.relative_to(project_root)
        except ValueError:
            shown = source_path
        click.echo(click.style(f"  File: {shown}", fg="yellow"), err=True)
        message = getattr(exc, "message", str(exc))
    else:
        message = str(exc)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)
    raise SystemExit(1)


def main():
    """Entry point for the CLI application."""
    cli()
