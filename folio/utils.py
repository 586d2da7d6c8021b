"""Utility functions for Folio.

This module contains the string and path helpers used while loading content.

Key functions:
    slugify: Convert filenames and titles to URL slugs.
    strip_date_prefix: Drop a YYYY-MM-DD- prefix from a filename stem.
    first_paragraph: Extract the first prose paragraph of markdown text.
    is_markdown: Check if a path is a Markdown file.
    is_internal_path: Check if a path is hidden from content discovery.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")


def strip_date_prefix(name: str) -> str:
    """Remove a YYYY-MM-DD- prefix from a filename stem.

    Examples:
        >>> strip_date_prefix("2024-08-10-solana-accounts")
        'solana-accounts'

        >>> strip_date_prefix("about")
        'about'
    """
    stripped = _DATE_PREFIX_RE.sub("", name)
    return stripped or name


def slugify(name: str) -> str:
    """Convert a filename stem or title to a slug, dropping any date prefix.

    Args:
        name: Filename stem or free text.

    Returns:
        URL-friendly slug.

    Examples:
        >>> slugify("2024-08-23-Solana Programs: Part 3")
        'solana-programs-part-3'
    """
    cleaned = strip_date_prefix(name)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def first_paragraph(text: str) -> str:
    """Extract the first paragraph from markdown text.

    Skips headings, images, code fences and rules, and returns the first
    actual paragraph with whitespace collapsed.

    Args:
        text: Markdown text content.

    Returns:
        The first paragraph as plain text, or an empty string.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "![", "```", "---", "<")):
            continue
        return " ".join(para.split())
    return ""


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md or .markdown extension (case-insensitive).
    """
    return path.suffix.lower() in (".md", ".markdown")


def is_internal_path(path: Path) -> bool:
    """Check if a path is internal (contains components starting with _ or .).

    Internal paths include section metadata such as ``_index.md`` and hidden
    files left behind by editors.

    Args:
        path: Path to check, relative to the content directory.

    Returns:
        True if any path component starts with an underscore or a dot.
    """
    return any(part.startswith(("_", ".")) for part in path.parts)


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
