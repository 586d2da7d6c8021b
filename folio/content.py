"""Content processing for Folio.

This module handles loading and parsing of content documents (markdown files
with front matter) into immutable ContentDocument objects.

Key classes:
- DocType: Enumerated document variant, post or page.
- ContentDocument: Frozen dataclass representing one parsed source document.
- FileContentLoader: Discovers markdown files under the content directory.
- ContentProcessor: Loads every discovered file into a ContentDocument.

Key functions:
- parse_document: Pure conversion of raw text into a ContentDocument.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .errors import MalformedMetadataError, MissingRequiredFieldError, ParseError
from .extractors import extract_frontmatter
from .utils import first_paragraph, is_internal_path, is_markdown, slugify

if TYPE_CHECKING:
    from .protocols import ContentLoader

POST_SECTION = "posts"


class DocType(enum.Enum):
    """Kind of content document."""

    POST = "post"
    PAGE = "page"

    @classmethod
    def from_value(cls, value: str) -> DocType:
        """Map a front matter ``type`` value to a DocType.

        ``post`` and ``posts`` are posts, any other type is a page.
        """
        if value.strip().lower() in ("post", "posts"):
            return cls.POST
        return cls.PAGE


@dataclass(frozen=True)
class ContentDocument:
    """Represents one source document with its parsed metadata.

    Attributes:
        path: Unique logical location, e.g. ``posts/solana-accounts``.
        title: Human-readable title, never empty.
        doc_type: Post or page.
        body: Raw body text after the front matter, verbatim.
        date: Timezone-aware publication timestamp, None for undated pages.
        description: Optional short description.
        tags: Set of tag names.
        weight: Manual sort key, lower sorts first.
        show_table_of_contents: Whether the renderer shows a TOC.
        draft: Whether the document is a draft.
        source_path: File the document was read from.
        params: Every front matter key, read-only.
    """

    path: str
    title: str
    doc_type: DocType
    body: str
    date: datetime | None = None
    description: str | None = None
    tags: frozenset[str] = frozenset()
    weight: int = 0
    show_table_of_contents: bool = False
    draft: bool = False
    source_path: Path | None = field(default=None, compare=False)
    params: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}), compare=False
    )

    @property
    def url(self) -> str:
        return f"/{self.path}/"

    @property
    def slug(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def section(self) -> str:
        """First path segment for nested documents, empty for top-level ones."""
        parts = PurePosixPath(self.path).parts
        return parts[0] if len(parts) > 1 else ""

    @property
    def is_post(self) -> bool:
        return self.doc_type is DocType.POST

    @property
    def summary(self) -> str:
        return first_paragraph(self.body)


def parse_document(
    raw_text: str,
    path: str = "",
    default_type: DocType = DocType.POST,
    source_path: Path | None = None,
) -> ContentDocument:
    """Parse raw document text into a ContentDocument.

    The logical path is ``path`` when given, with its last segment replaced by
    a front matter ``slug`` if one is set. Without ``path`` it is the slug, or
    the slugified title.

    Args:
        raw_text: Front matter block followed by the body.
        path: Logical path derived from the document's location.
        default_type: Type used when the front matter has no ``type`` key.
        source_path: File the text was read from, for error context.

    Returns:
        Immutable ContentDocument.

    Raises:
        MalformedMetadataError: Block absent, unterminated, undecodable or a
            field of the wrong shape.
        MissingRequiredFieldError: ``title`` missing, or ``date`` missing on
            a post.
    """
    meta, body = extract_frontmatter(raw_text, source_path)
    fields = _FieldReader(meta, source_path)

    title = fields.string("title")
    if not title:
        raise MissingRequiredFieldError("title", source_path)

    type_value = fields.string("type")
    doc_type = DocType.from_value(type_value) if type_value else default_type

    published = fields.timestamp("date")
    if published is None and doc_type is DocType.POST:
        raise MissingRequiredFieldError("date", source_path)

    return ContentDocument(
        path=_resolve_path(path, fields.string("slug"), title),
        title=title,
        doc_type=doc_type,
        body=body,
        date=published,
        description=fields.string("description"),
        tags=fields.tags("tags"),
        weight=fields.integer("weight", 0),
        show_table_of_contents=fields.boolean("showTableOfContents", False),
        draft=fields.boolean("draft", False),
        source_path=source_path,
        params=MappingProxyType(dict(meta)),
    )


def _resolve_path(path: str, slug: str | None, title: str) -> str:
    path = path.strip("/")
    slug = slug.strip("/") if slug else ""
    if not path:
        return slug or slugify(title)
    if slug:
        parent = PurePosixPath(path).parent
        return slug if str(parent) == "." else f"{parent}/{slug}"
    return path


class _FieldReader:
    """Typed access to decoded front matter, raising on wrong shapes."""

    def __init__(self, meta: Mapping[str, Any], source_path: Path | None):
        self.meta = meta
        self.source_path = source_path

    def _malformed(self, key: str, expected: str) -> MalformedMetadataError:
        value = self.meta[key]
        return MalformedMetadataError(
            f"field '{key}' must be {expected}, got {type(value).__name__}",
            self.source_path,
        )

    def string(self, key: str) -> str | None:
        value = self.meta.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise self._malformed(key, "a string")
        return value.strip() or None

    def integer(self, key: str, default: int) -> int:
        value = self.meta.get(key)
        if value is None:
            return default
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._malformed(key, "an integer")
        return value

    def boolean(self, key: str, default: bool) -> bool:
        value = self.meta.get(key)
        if value is None:
            return default
        if not isinstance(value, bool):
            raise self._malformed(key, "true or false")
        return value

    def tags(self, key: str) -> frozenset[str]:
        value = self.meta.get(key)
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)) or not all(
            isinstance(tag, str) for tag in value
        ):
            raise self._malformed(key, "a list of strings")
        return frozenset(tag.strip() for tag in value if tag.strip())

    def timestamp(self, key: str) -> datetime | None:
        value = self.meta.get(key)
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            moment = value
        elif isinstance(value, date):
            moment = datetime(value.year, value.month, value.day)
        elif isinstance(value, str):
            try:
                moment = datetime.fromisoformat(value.strip())
            except ValueError as exc:
                raise MalformedMetadataError(
                    f"field '{key}' is not an ISO 8601 timestamp: {value!r}",
                    self.source_path,
                ) from exc
        else:
            raise self._malformed(key, "a timestamp")
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment


class FileContentLoader:
    """Loads content files from a directory.

    This class is responsible for discovering markdown files in the content
    directory. Files and directories starting with ``_`` or ``.`` are skipped.

    Attributes:
        content_dir: Directory containing site content.
    """

    def __init__(self, content_dir: Path):
        """Initialize the content loader.

        Args:
            content_dir: Path to the content directory.
        """
        self.content_dir = content_dir

    def iter_files(self) -> list[Path]:
        """Return all content files, sorted for a deterministic load order.

        Returns:
            List of paths to markdown files.
        """
        files: list[Path] = []
        for path in self.content_dir.rglob("*"):
            if path.is_dir() or not is_markdown(path):
                continue
            if is_internal_path(path.relative_to(self.content_dir)):
                continue
            files.append(path)
        return sorted(files)


def logical_path(rel: Path) -> str:
    """Derive the logical document path from a path relative to the content dir.

    The extension and any date prefix are dropped, and leaf bundles
    (``foo/index.md``) collapse to their directory.

    Examples:
        >>> logical_path(Path("posts/2024-08-10-solana-accounts.md"))
        'posts/solana-accounts'

        >>> logical_path(Path("about/index.md"))
        'about'
    """
    segments = [slugify(part) for part in rel.parent.parts]
    if rel.stem != "index" or not segments:
        segments.append(slugify(rel.stem))
    return "/".join(segments)


class ContentProcessor:
    """Loads every content file and builds ContentDocument objects.

    Attributes:
        content_dir: Directory containing site content.
    """

    def __init__(
        self,
        content_dir: Path,
        content_loader: ContentLoader | None = None,
    ):
        """Initialize the content processor.

        Args:
            content_dir: Path to the content directory.
            content_loader: Optional custom content loader.
        """
        self.content_dir = content_dir
        self._content_loader: ContentLoader = content_loader or FileContentLoader(
            content_dir
        )

    def load(self, include_drafts: bool = False) -> list[ContentDocument]:
        """Load all content files.

        Args:
            include_drafts: Whether to keep documents marked as drafts.

        Returns:
            List of ContentDocument objects in file order.

        Raises:
            ParseError: For the first document that cannot be parsed.
        """
        documents: list[ContentDocument] = []
        for path in self._content_loader.iter_files():
            document = self.load_file(path)
            if document.draft and not include_drafts:
                continue
            documents.append(document)
        return documents

    def load_file(self, path: Path) -> ContentDocument:
        """Parse a single content file.

        Args:
            path: Path to the markdown file inside the content directory.

        Returns:
            ContentDocument for the file.
        """
        rel = path.relative_to(self.content_dir)
        default_type = (
            DocType.POST
            if len(rel.parts) > 1 and rel.parts[0] == POST_SECTION
            else DocType.PAGE
        )
        try:
            raw_text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"file is not valid UTF-8: {exc}", path) from exc
        return parse_document(
            raw_text,
            path=logical_path(rel),
            default_type=default_type,
            source_path=path,
        )
