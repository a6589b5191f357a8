"""Pipeline modules for orchestrating the enrichment process."""

from . import batch, gallery, queue

__all__ = ["batch", "gallery", "queue"]
