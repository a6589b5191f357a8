"""Add-on Gallery - GitHub catalog with paced Gemini enrichment."""

__version__ = "0.1.0"

from .config import Settings
from .models import EnrichmentRecord, WorkItem
from .pipeline.queue import EnrichmentQueue

__all__ = ["Settings", "EnrichmentRecord", "WorkItem", "EnrichmentQueue"]
