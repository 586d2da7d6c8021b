"""Folio static site content toolkit.

This package loads a personal website made of markdown documents with front
matter and a Hugo-style site configuration, validates both, and builds a
read-only index (by tag, date, type and path) that a renderer turns into a
navigable static site.

The main entry point is the CLI module, which provides commands for building
the site, checking content, listing tags and creating new documents.

Modules, leaf first:
- errors: Exception hierarchy shared by every stage of a build.
- content: ContentDocument model and front matter parsing.
- collections: CollectionIndex and its query operations.
- config: SiteConfig loading and validation.
- renderers / feeds: Default HTML renderer, RSS, sitemap and robots.txt.
- build: Orchestration of config, content, index and renderer.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
