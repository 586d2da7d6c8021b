"""Site building functionality for Folio.

This module wires the stages of a build together: load the configuration,
load every content document, validate and index them, then hand the
validated Site to a renderer. The first error stops the build; nothing is
rendered from a collection that failed validation.

Key functions:
- load_site: Load and validate configuration and content into a Site.
- build_site: Load the site and render it into the output directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .collections import CollectionIndex, build_index
from .config import SiteConfig, read_config
from .content import ContentProcessor
from .errors import ConfigError
from .protocols import Renderer
from .renderers import SiteRenderer
from .utils import ensure_clean_dir

LAYOUTS_DIR = "layouts"


@dataclass(frozen=True)
class Site:
    """Validated configuration and content handed to a renderer.

    Attributes:
        config: Immutable site configuration.
        index: Read-only collection index.
    """

    config: SiteConfig
    index: CollectionIndex


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        site: The site that was rendered.
        output_dir: Directory where the site was built.
        urls: Site-relative URLs of the pages written.
    """

    site: Site
    output_dir: Path
    urls: list[str]

    def missing_menu_targets(self) -> list[str]:
        """Site-relative menu URLs that no rendered page answers."""
        written = set(self.urls)
        return [
            entry.url
            for entry in self.site.config.menu
            if not entry.is_external and entry.url not in written
        ]


def load_site(
    project_root: Path,
    include_drafts: bool = False,
    content_dir_override: Path | None = None,
) -> Site:
    """Load configuration and content and build the collection index.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to keep documents marked as drafts.
        content_dir_override: Optional content directory instead of the
            configured contentDir.

    Returns:
        Site ready for rendering.

    Raises:
        ConfigError: If the configuration is missing or invalid.
        ParseError: If a document cannot be parsed.
        CollectionIndexError: If the collection is inconsistent.
    """
    config = read_config(project_root)
    content_dir = content_dir_override or (project_root / config.content_dir)
    if not content_dir.is_dir():
        raise ConfigError(f"content directory {content_dir} does not exist")
    documents = ContentProcessor(content_dir).load(include_drafts=include_drafts)
    return Site(config=config, index=build_index(documents))


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    clean_output: bool = True,
    content_dir_override: Path | None = None,
    output_dir_override: Path | None = None,
    renderer: Renderer | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft documents.
        clean_output: Whether to wipe the output directory before building.
        content_dir_override: Optional content directory instead of contentDir.
        output_dir_override: Optional output directory instead of publishDir.
        renderer: Renderer to use, SiteRenderer with the project's layouts
            directory by default.

    Returns:
        BuildResult with the site, output directory and written URLs.
    """
    site = load_site(project_root, include_drafts, content_dir_override)
    output_dir = output_dir_override or (project_root / site.config.publish_dir)
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    renderer = renderer or SiteRenderer(project_root / LAYOUTS_DIR)
    urls = renderer.render(site, output_dir)
    return BuildResult(site=site, output_dir=output_dir, urls=urls)
