"""Fetcher modules for external data sources."""

from . import gemini, github, readme

__all__ = ["gemini", "github", "readme"]
