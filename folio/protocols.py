"""Protocol definitions for Folio.

These protocols describe the seams of a build: where documents come from
and what consumes the validated site. The default implementations are
FileContentLoader and SiteRenderer; tests and alternative front ends can
substitute their own.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .build import Site


@runtime_checkable
class ContentLoader(Protocol):
    """Protocol for discovering content files."""

    @abstractmethod
    def iter_files(self) -> list[Path]:
        """Return the content files to load, in load order."""
        ...


@runtime_checkable
class Renderer(Protocol):
    """Protocol for turning a validated site into output files.

    A renderer receives the configuration and the index only after both
    have been fully validated.
    """

    @abstractmethod
    def render(self, site: Site, output_dir: Path) -> list[str]:
        """Render the site.

        Args:
            site: Validated configuration and collection index.
            output_dir: Directory to write into.

        Returns:
            Site-relative URLs of the pages written.
        """
        ...
