"""Front matter extraction for Folio.

A content document starts with a delimited metadata block followed by the
body. Two block styles are recognised, as Hugo does:

- ``---`` delimiters around YAML, decoded with PyYAML.
- ``+++`` delimiters around TOML, decoded with tomllib.

Key functions:
- split_frontmatter: Separate the raw metadata block from the body.
- extract_frontmatter: Split and decode the block into a dictionary.
"""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Any

import yaml

from .errors import MalformedMetadataError

FRONTMATTER_RE = re.compile(
    r"\A(?P<delim>---|\+\+\+)[ \t]*\r?\n"
    r"(?P<meta>.*?)(?:\r?\n)?"
    r"^(?P=delim)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

_OPENER_RE = re.compile(r"\A(---|\+\+\+)[ \t]*(?:\r?\n|\Z)")

FORMATS = {"---": "yaml", "+++": "toml"}


def split_frontmatter(
    text: str, source_path: Path | None = None
) -> tuple[str, str, str]:
    """Split raw document text into its metadata block and body.

    Args:
        text: Raw file content.
        source_path: File the text was read from, for error messages.

    Returns:
        Tuple of (format name, metadata block text, body text). The body is
        everything after the closing delimiter line, verbatim.

    Raises:
        MalformedMetadataError: If the block is absent or unterminated.
    """
    text = text.removeprefix("\ufeff")
    match = FRONTMATTER_RE.match(text)
    if match:
        fmt = FORMATS[match.group("delim")]
        return fmt, match.group("meta"), text[match.end() :]
    opener = _OPENER_RE.match(text)
    if opener:
        raise MalformedMetadataError(
            f"front matter opened with '{opener.group(1)}' is never closed",
            source_path,
        )
    raise MalformedMetadataError("document has no front matter block", source_path)


def decode_frontmatter(
    fmt: str, block: str, source_path: Path | None = None
) -> dict[str, Any]:
    """Decode a metadata block into a dictionary.

    Args:
        fmt: Either "yaml" or "toml".
        block: Metadata block text without delimiters.
        source_path: File the block was read from, for error messages.

    Returns:
        Decoded key/value mapping. An empty block decodes to an empty dict.

    Raises:
        MalformedMetadataError: If the block cannot be decoded into a mapping.
    """
    try:
        if fmt == "toml":
            data = tomllib.loads(block)
        else:
            data = yaml.safe_load(block)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise MalformedMetadataError(
            f"cannot decode {fmt.upper()} front matter: {exc}", source_path
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedMetadataError(
            f"front matter must be a mapping, got {type(data).__name__}",
            source_path,
        )
    return data


def extract_frontmatter(
    text: str, source_path: Path | None = None
) -> tuple[dict[str, Any], str]:
    """Extract and decode front matter from content.

    Args:
        text: Raw file content.
        source_path: File the text was read from, for error messages.

    Returns:
        Tuple of (frontmatter dict, remaining body).

    Raises:
        MalformedMetadataError: If the block is absent, unterminated or
            not decodable.
    """
    fmt, block, body = split_frontmatter(text, source_path)
    return decode_frontmatter(fmt, block, source_path), body
