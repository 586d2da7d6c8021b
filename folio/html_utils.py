"""HTML utility functions for Folio.

This module provides the small amount of HTML and URL string handling the
renderer and feed generators share.

Functions:
    escape_html: Escape special HTML characters in a string.
    join_root_url: Join a base URL with a path.
    base_path: Path component of a base URL, used to prefix site links.
"""

from __future__ import annotations

from urllib.parse import urlsplit


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Converts the following characters to their HTML entity equivalents:
    - & becomes &amp;
    - < becomes &lt;
    - > becomes &gt;
    - " becomes &quot;

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML and XML.

    Examples:
        >>> escape_html('Tom & Jerry')
        'Tom &amp; Jerry'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/blog).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com', '/about/')
        'https://example.com/about/'

        >>> join_root_url('https://example.com/', 'about/')
        'https://example.com/about/'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def base_path(base_url: str) -> str:
    """Return the path component of a base URL without a trailing slash.

    Examples:
        >>> base_path('https://example.com/blog/')
        '/blog'

        >>> base_path('https://example.com')
        ''
    """
    return urlsplit(base_url).path.rstrip("/")


def is_absolute_url(url: str) -> bool:
    """Check whether a URL has a scheme and host, e.g. https://example.com."""
    parts = urlsplit(url)
    return bool(parts.scheme and parts.netloc)
