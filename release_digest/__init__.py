"""
Release digest package for the Docker documentation tool server.

This package contains the pipeline components:

- Splitting a markdown document into its top-level sections.
- Extracting versions, dates, products and CVE identifiers from each section.
- Normalising loosely written dates to YYYY-MM-DD.
- Ranking, truncating and rendering the records as a text digest.
- Fetching the source pages and exposing the digests as MCP tools.
"""

from .digest import render_releases, render_security_announcements

__all__ = ["render_releases", "render_security_announcements"]
