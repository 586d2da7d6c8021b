"""Default site renderer for Folio.

This module turns a validated Site (configuration plus collection index)
into HTML pages. Markdown bodies are rendered with mistune, fenced code is
highlighted with Pygments, and pages are laid out with Jinja2 templates.
Templates in a project's ``layouts/`` directory override the built-in ones
shipped in ``folio/layouts``.

Key classes:
- Heading: A heading extracted from a markdown body for TOC generation.
- MarkdownRenderer: Renders markdown to HTML and collects headings.
- SiteRenderer: Writes home, listing, tag and document pages plus feeds.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import mistune
from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    TemplateSyntaxError,
    select_autoescape,
)
from markupsafe import Markup
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .config import DEFAULT_TOC, TocSettings
from .errors import BuildError
from .feeds import FeedRegistry, create_default_feed_registry
from .html_utils import base_path, escape_html, join_root_url
from .utils import slugify

if TYPE_CHECKING:
    from .build import Site
    from .content import ContentDocument

TAGS_URL = "/tags/"
POSTS_URL = "/posts/"


def tag_url(tag: str) -> str:
    """Return the site-relative URL of a tag page."""
    return f"{TAGS_URL}{slugify(tag)}/"


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text, possibly containing inline HTML.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = re.sub(r"<[^>]+>", "", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


@dataclass
class Heading:
    """Represents a heading extracted from markdown content for TOC generation.

    Attributes:
        id: Anchor ID for the heading (URL-friendly slug).
        text: The text content of the heading.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


class _HighlightRenderer(mistune.HTMLRenderer):
    """Markdown renderer with heading anchors and syntax highlighting.

    Attributes:
        headings: List of Heading objects extracted during rendering.
    """

    def __init__(self, formatter: HtmlFormatter):
        super().__init__(escape=False)
        self.formatter = formatter
        self.headings: list[Heading] = []
        self._heading_id_counts: dict[str, int] = {}
        self._used_ids: set[str] = set()

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text) or "section"
        count = self._heading_id_counts.get(base_id, 0)
        heading_id = base_id
        # "Part 1" may already hold the id a second "Part" would get
        while heading_id in self._used_ids:
            count += 1
            heading_id = f"{base_id}-{count}"
        self._heading_id_counts[base_id] = count
        self._used_ids.add(heading_id)
        self.headings.append(Heading(id=heading_id, text=text, level=level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block, highlighted when the language is known."""
        lang = info.split()[0] if info and info.strip() else ""
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                return highlight(code, lexer, self.formatter)
        lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"


class MarkdownRenderer:
    """Renders markdown bodies to HTML.

    Attributes:
        style: Pygments style name used for highlighting CSS.
    """

    def __init__(self, style: str | None = None):
        self.style = style or "default"
        try:
            self.formatter = HtmlFormatter(cssclass="highlight", style=self.style)
        except ClassNotFound:
            self.style = "default"
            self.formatter = HtmlFormatter(cssclass="highlight")

    def render(self, body: str) -> tuple[str, list[Heading]]:
        """Render markdown to HTML.

        Args:
            body: Markdown source.

        Returns:
            Tuple of (rendered HTML, headings in document order).
        """
        renderer = _HighlightRenderer(self.formatter)
        markdown = mistune.create_markdown(
            renderer=renderer, plugins=["strikethrough", "footnotes", "table", "url"]
        )
        return markdown(body), renderer.headings

    def css(self) -> str:
        return self.formatter.get_style_defs(".highlight")


def render_toc(headings: list[Heading], toc: TocSettings = DEFAULT_TOC) -> Markup:
    """Render headings within the configured levels as a nested list.

    Args:
        headings: Headings in document order.
        toc: Level bounds and list style.

    Returns:
        Markup-safe HTML, empty when no heading is in range.
    """
    selected = [h for h in headings if toc.start_level <= h.level <= toc.end_level]
    if not selected:
        return Markup("")

    tag = "ol" if toc.ordered else "ul"
    html_parts: list[str] = []
    level_stack: list[int] = []

    for heading in selected:
        level = heading.level

        # Close nested lists if going to a shallower level
        while level_stack and level_stack[-1] > level:
            level_stack.pop()
            html_parts.append(f"</li></{tag}>")

        if level_stack and level_stack[-1] == level:
            html_parts.append("</li>")
        elif not level_stack or level > level_stack[-1]:  # pragma: no branch
            html_parts.append(f"<{tag}>")
            level_stack.append(level)

        text = escape_html(re.sub(r"<[^>]+>", "", heading.text))
        html_parts.append(f'<li><a href="#{escape_html(heading.id)}">{text}</a>')

    while level_stack:
        level_stack.pop()
        html_parts.append(f"</li></{tag}>")

    return Markup("".join(html_parts))


class SiteRenderer:
    """Renders a Site into an output directory.

    Produces one page per document, one per tag, a tags overview, a posts
    listing and the home page, then runs the feed generators.

    Attributes:
        layouts_dir: Optional project directory overriding built-in layouts.
        feeds: Feed generators run after the pages are written.
    """

    def __init__(
        self,
        layouts_dir: Path | None = None,
        feeds: FeedRegistry | None = None,
    ):
        loaders = []
        if layouts_dir is not None and layouts_dir.is_dir():
            loaders.append(FileSystemLoader(layouts_dir))
        loaders.append(PackageLoader("folio", "layouts"))
        self.layouts_dir = layouts_dir
        self.feeds = feeds or create_default_feed_registry()
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(self, site: Site, output_dir: Path) -> list[str]:
        """Render every page of the site.

        Args:
            site: Validated configuration and index.
            output_dir: Directory to write into.

        Returns:
            Site-relative URLs of the pages written, in write order.

        Raises:
            BuildError: If two pages would share a URL, or a template or
                markdown body fails to render. Clashes are detected before
                any page is written.
        """
        config, index = site.config, site.index
        _check_url_clashes(site)
        markdown = MarkdownRenderer(config.render_options.get("pygmentsStyle"))
        prefix = base_path(config.base_url)
        self.env.globals.update(
            site=config,
            index=index,
            tag_url=tag_url,
            url_for=lambda path: path if "://" in path else join_root_url(prefix, path),
            pygments_css=Markup(markdown.css()),
        )

        written: list[str] = []
        posts = index.all_posts()
        self._write(output_dir, "/", "list.html", written, documents=posts, heading=None)
        self._write(output_dir, POSTS_URL, "list.html", written, documents=posts, heading="Posts")
        self._write(output_dir, TAGS_URL, "tags.html", written, tags=index.tags())
        for tag, documents in index.tags().items():
            self._write(
                output_dir, tag_url(tag), "list.html", written, documents=documents, heading=tag
            )
        for doc in index:
            self._write_document(output_dir, site, doc, markdown, written)

        self.feeds.generate_all(output_dir, site, written)
        return written

    def _write_document(
        self,
        output_dir: Path,
        site: Site,
        doc: ContentDocument,
        markdown: MarkdownRenderer,
        written: list[str],
    ) -> None:
        try:
            content, headings = markdown.render(doc.body)
        except Exception as exc:
            raise BuildError(doc.source_path, f"cannot render markdown: {exc}", exc) from exc
        newer, older = site.index.neighbours(doc.path)
        self._write(
            output_dir,
            doc.url,
            "single.html",
            written,
            source_path=doc.source_path,
            doc=doc,
            content=Markup(content),
            toc=render_toc(headings, site.config.toc),
            newer=newer,
            older=older,
        )

    def _write(
        self,
        output_dir: Path,
        url: str,
        template_name: str,
        written: list[str],
        source_path: Path | None = None,
        **context: Any,
    ) -> None:
        try:
            rendered = self.env.get_template(template_name).render(**context)
        except Exception as exc:
            raise BuildError(
                source_path or Path(template_name), _format_error_message(exc), exc
            ) from exc
        _write_page(output_dir, url, rendered)
        written.append(url)


def _check_url_clashes(site: Site) -> None:
    """Fail if two pages of the site would be written to the same URL.

    Tags whose slugs coincide (``Solana`` and ``solana``, or two non-ASCII
    tags that both slugify to ``index``) share a URL, and a document can
    land on a listing URL such as ``/tags/``.

    Raises:
        BuildError: Naming the clashing tags or the document's source file.
    """
    owners: dict[str, str] = {
        "/": "the home page",
        POSTS_URL: "the posts listing",
        TAGS_URL: "the tags overview",
    }

    by_url: dict[str, list[str]] = {}
    for tag in site.index.tags():
        by_url.setdefault(tag_url(tag), []).append(tag)
    for url, tags in by_url.items():
        if len(tags) > 1:
            names = ", ".join(f"'{tag}'" for tag in tags)
            raise BuildError(None, f"tags {names} would share the page {url}")
        owners[url] = f"the page of tag '{tags[0]}'"

    for doc in site.index:
        if doc.url in owners:
            raise BuildError(
                doc.source_path,
                f"document URL {doc.url} clashes with {owners[doc.url]}",
            )
        owners[doc.url] = f"document '{doc.path}'"


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    if isinstance(exc, TemplateSyntaxError):
        return f"Template syntax error on line {exc.lineno}: {exc.message}"
    error_type = type(exc).__name__
    if error_type == "UndefinedError":
        return f"Undefined variable: {exc}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {exc}"
    return f"{error_type}: {exc}"


def _write_page(output_dir: Path, url: str, rendered: str) -> None:
    """Write a rendered page to ``<output_dir>/<url>/index.html``.

    Args:
        output_dir: Base output directory.
        url: Site-relative URL of the page.
        rendered: Rendered HTML content.
    """
    target_dir = output_dir / url.strip("/")
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / "index.html").write_text(rendered, encoding="utf-8")
