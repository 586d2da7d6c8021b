"""Feed generation for Folio.

This module generates the machine-readable files published next to the HTML
pages: an RSS feed of posts, a sitemap of every rendered URL, and robots.txt
when the configuration enables it.

Classes:
    FeedGenerator: Abstract base class for feed generators.
    SitemapGenerator: Generates sitemap.xml.
    RSSGenerator: Generates rss.xml over posts.
    RobotsTxtGenerator: Generates robots.txt.
    FeedRegistry: Registry for managing feed generators.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from email.utils import format_datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .html_utils import escape_html, is_absolute_url, join_root_url

if TYPE_CHECKING:
    from .build import Site


class FeedGenerator(ABC):
    """Abstract base class for feed generators."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(self, site: Site, urls: Sequence[str]) -> str | None:
        """Generate feed content.

        Args:
            site: Validated configuration and index.
            urls: Site-relative URLs of every rendered page.

        Returns:
            Feed content as a string, or None if the feed is skipped
            (e.g., the base URL is not absolute).
        """
        ...

    def write(self, output_dir: Path, site: Site, urls: Sequence[str]) -> bool:
        """Generate and write feed to the output directory.

        Returns:
            True if the feed was written, False if skipped.
        """
        content = self.generate(site, urls)
        if content is None:
            return False
        (output_dir / self.filename).write_text(content, encoding="utf-8")
        return True


def _absolute_base(site: Site) -> str | None:
    base_url = site.config.base_url
    return base_url.rstrip("/") if is_absolute_url(base_url) else None


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml listing every rendered URL.

    Document pages carry their date as lastmod.
    """

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(self, site: Site, urls: Sequence[str]) -> str | None:
        base_url = _absolute_base(site)
        if base_url is None:
            return None
        dates = {doc.url: doc.date for doc in site.index if doc.date is not None}
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        for url in urls:
            loc = escape_html(join_root_url(base_url, url))
            moment = dates.get(url)
            lastmod = f"<lastmod>{moment.date().isoformat()}</lastmod>" if moment else ""
            lines.append(f"  <url><loc>{loc}</loc>{lastmod}</url>")
        lines.append("</urlset>")
        return "\n".join(lines)


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed of posts, newest first."""

    @property
    def filename(self) -> str:
        return "rss.xml"

    def generate(self, site: Site, urls: Sequence[str]) -> str | None:
        base_url = _absolute_base(site)
        if base_url is None:
            return None
        config = site.config
        posts = site.index.all_posts()
        items = []
        for doc in posts:
            link = escape_html(join_root_url(base_url, doc.url))
            description = escape_html(doc.description or doc.summary or doc.title)
            items.append(
                f"<item><title>{escape_html(doc.title)}</title><link>{link}</link>"
                f"<guid>{link}</guid><description>{description}</description>"
                f"<pubDate>{format_datetime(doc.date)}</pubDate></item>"
            )
        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0"><channel>',
            f"<title>{escape_html(config.title)}</title>",
            f"<link>{escape_html(base_url)}/</link>",
            f"<description>{escape_html(config.description or config.title)}</description>",
            f"<language>{escape_html(config.language_code)}</language>",
        ]
        if posts:
            rss.append(f"<lastBuildDate>{format_datetime(posts[0].date)}</lastBuildDate>")
        rss.extend(items)
        rss.append("</channel></rss>")
        return "\n".join(rss)


class RobotsTxtGenerator(FeedGenerator):
    """Generates a permissive robots.txt when ``enableRobotsTXT`` is set."""

    @property
    def filename(self) -> str:
        return "robots.txt"

    def generate(self, site: Site, urls: Sequence[str]) -> str | None:
        if not site.config.enable_robots_txt:
            return None
        lines = ["User-agent: *", "Disallow:"]
        base_url = _absolute_base(site)
        if base_url is not None:
            lines.append(f"Sitemap: {base_url}/sitemap.xml")
        return "\n".join(lines) + "\n"


class FeedRegistry:
    """Registry for managing feed generators.

    Attributes:
        _generators: List of registered feed generators.
    """

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(self, output_dir: Path, site: Site, urls: Sequence[str]) -> list[str]:
        """Generate all registered feeds.

        Returns:
            List of filenames that were generated.
        """
        generated = []
        for generator in self._generators:
            if generator.write(output_dir, site, urls):
                generated.append(generator.filename)
        return generated


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with sitemap, RSS and robots.txt generators."""
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator())
    registry.register(RobotsTxtGenerator())
    return registry
