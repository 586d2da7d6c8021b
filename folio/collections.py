"""Collection indexing for Folio.

The CollectionIndex is built once per build from every loaded document. It
validates that logical paths are unique, partitions documents by type, buckets
them by tag, and keeps the master reverse-chronological ordering of posts.
Nothing mutates the index after construction; every query returns immutable
sequences.

Ordering is total: date descending, then weight ascending, then path
ascending. Undated documents sort after every dated one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from datetime import datetime

from .content import ContentDocument, DocType
from .errors import DuplicatePathError, NotFoundError


def sort_key(doc: ContentDocument) -> tuple:
    """Key implementing the date desc, weight asc, path asc comparator."""
    if doc.date is None:
        return (1, 0.0, doc.weight, doc.path)
    return (0, -doc.date.timestamp(), doc.weight, doc.path)


def sort_documents(docs: Iterable[ContentDocument]) -> list[ContentDocument]:
    return sorted(docs, key=sort_key)


class DocumentList(Sequence[ContentDocument]):
    """Immutable ordered sequence of documents with a few listing helpers."""

    def __init__(self, docs: Iterable[ContentDocument] = ()):
        self._docs = tuple(docs)

    def __iter__(self) -> Iterator[ContentDocument]:
        return iter(self._docs)

    def __len__(self) -> int:
        return len(self._docs)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return DocumentList(self._docs[item])
        return self._docs[item]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DocumentList):
            return self._docs == other._docs
        if isinstance(other, (list, tuple)):
            return list(self._docs) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def latest(self, count: int = 5) -> DocumentList:
        return self[:count]

    def with_tag(self, tag: str) -> DocumentList:
        return DocumentList(d for d in self._docs if tag in d.tags)

    def section(self, name: str) -> DocumentList:
        return DocumentList(d for d in self._docs if d.section == name)

    @property
    def paths(self) -> list[str]:
        return [d.path for d in self._docs]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"DocumentList({len(self._docs)} documents)"


class TagCollection(Mapping[str, DocumentList]):
    """Read-only mapping of tag name to ordered DocumentList.

    Keys iterate in alphabetical order.
    """

    def __init__(self, mapping: Mapping[str, Iterable[ContentDocument]]):
        self._mapping = {
            tag: DocumentList(sort_documents(mapping[tag])) for tag in sorted(mapping)
        }

    def __getitem__(self, key: str) -> DocumentList:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def counts(self) -> dict[str, int]:
        return {tag: len(docs) for tag, docs in self._mapping.items()}

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"


class CollectionIndex:
    """Read-only index over a validated document collection.

    Use build_index() to construct one.
    """

    def __init__(
        self,
        by_path: Mapping[str, ContentDocument],
        ordered: Sequence[ContentDocument],
        tags: TagCollection,
    ):
        self._by_path = dict(by_path)
        self._ordered = DocumentList(ordered)
        self._tags = tags
        self._by_type = {
            doc_type: DocumentList(d for d in self._ordered if d.doc_type is doc_type)
            for doc_type in DocType
        }

    def by_tag(self, tag: str) -> DocumentList:
        """Documents carrying ``tag`` in comparator order, empty when unknown."""
        return self._tags.get(tag, DocumentList())

    def all_posts(self) -> DocumentList:
        """Every post, newest first."""
        return self._by_type[DocType.POST]

    def all_pages(self) -> DocumentList:
        return self._by_type[DocType.PAGE]

    def by_type(self, doc_type: DocType) -> DocumentList:
        return self._by_type[doc_type]

    def by_path(self, path: str) -> ContentDocument:
        """Return the document at ``path``.

        Raises:
            NotFoundError: If no document has that path.
        """
        try:
            return self._by_path[path.strip("/")]
        except KeyError:
            raise NotFoundError(path) from None

    def tags(self) -> TagCollection:
        return self._tags

    def before(self, moment: datetime) -> DocumentList:
        """Posts dated strictly before ``moment``, newest first."""
        return DocumentList(
            d for d in self.all_posts() if d.date is not None and d.date < moment
        )

    def after(self, moment: datetime) -> DocumentList:
        """Posts dated strictly after ``moment``, newest first."""
        return DocumentList(
            d for d in self.all_posts() if d.date is not None and d.date > moment
        )

    def neighbours(
        self, path: str
    ) -> tuple[ContentDocument | None, ContentDocument | None]:
        """Return the (newer, older) posts around the post at ``path``.

        Pages have no neighbours.

        Raises:
            NotFoundError: If no document has that path.
        """
        doc = self.by_path(path)
        posts = self.all_posts()
        if not doc.is_post:
            return None, None
        position = posts.paths.index(doc.path)
        newer = posts[position - 1] if position > 0 else None
        older = posts[position + 1] if position + 1 < len(posts) else None
        return newer, older

    def __iter__(self) -> Iterator[ContentDocument]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and path.strip("/") in self._by_path

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return (
            f"CollectionIndex({len(self.all_posts())} posts, "
            f"{len(self.all_pages())} pages, {len(self._tags)} tags)"
        )


def build_index(documents: Iterable[ContentDocument]) -> CollectionIndex:
    """Validate a document collection and build its index.

    Args:
        documents: Every loaded document.

    Returns:
        CollectionIndex ready for queries.

    Raises:
        DuplicatePathError: If two documents share a logical path.
    """
    by_path: dict[str, ContentDocument] = {}
    tags: dict[str, list[ContentDocument]] = {}
    for doc in documents:
        existing = by_path.get(doc.path)
        if existing is not None:
            raise DuplicatePathError(doc.path, (existing.source_path, doc.source_path))
        by_path[doc.path] = doc
        for tag in doc.tags:
            tags.setdefault(tag, []).append(doc)
    return CollectionIndex(by_path, sort_documents(by_path.values()), TagCollection(tags))
