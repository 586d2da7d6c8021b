"""Error types for Folio.

Every failure during a build is fatal and is reported once, so each error
carries enough context (source file, logical path, field name or query key)
to be actionable on its own.

Hierarchy:
- FolioError: Base class for everything raised by Folio.
- ParseError: A single document's front matter is unusable.
- CollectionIndexError: The collection as a whole is inconsistent.
- ConfigError: The site configuration is unusable.
- NotFoundError: An index query named a key that does not exist.
- BuildError: Rendering failed for a specific source file.
"""

from __future__ import annotations

from pathlib import Path


class FolioError(Exception):
    """Base class for all Folio errors."""


class ParseError(FolioError):
    """Error parsing a content document.

    Attributes:
        message: Human-readable error message.
        source_path: File the document was read from, when known.
    """

    def __init__(self, message: str, source_path: Path | None = None):
        self.message = message
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")


class MalformedMetadataError(ParseError):
    """Front matter is absent, unterminated or not decodable."""


class MissingRequiredFieldError(ParseError):
    """A mandatory front matter field is absent.

    Attributes:
        field: Name of the missing field.
    """

    def __init__(self, field: str, source_path: Path | None = None):
        self.field = field
        super().__init__(f"missing required field '{field}'", source_path)


class CollectionIndexError(FolioError):
    """Structural violation across the whole document collection."""


class DuplicatePathError(CollectionIndexError):
    """Two documents resolve to the same logical path.

    Attributes:
        path: The duplicated logical path.
        sources: Source files of the clashing documents, when known.
    """

    def __init__(self, path: str, sources: tuple[Path | None, ...] = ()):
        self.path = path
        self.sources = sources
        known = [str(s) for s in sources if s is not None]
        detail = f" ({', '.join(known)})" if known else ""
        super().__init__(f"duplicate document path '{path}'{detail}")


class ConfigError(FolioError):
    """Site configuration cannot be loaded."""


class InvalidFieldError(ConfigError):
    """A configuration field is missing or has the wrong shape.

    Attributes:
        field: Dotted name of the offending field, e.g. ``menu.main[2].url``.
        reason: Short description of what is wrong.
    """

    def __init__(self, field: str, reason: str = "missing or invalid"):
        self.field = field
        self.reason = reason
        super().__init__(f"invalid config field '{field}': {reason}")


class NotFoundError(FolioError, LookupError):
    """Index query for a key that does not exist.

    Attributes:
        key: The key that was looked up.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"no document at path '{key}'")


class BuildError(FolioError):
    """Error during site rendering with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path | None,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}" if source_path else message)
