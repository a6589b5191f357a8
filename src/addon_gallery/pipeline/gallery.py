"""Gallery pipeline: catalog fetch, media resolution, paced AI enrichment."""

import asyncio
from typing import Dict, List, Optional
import httpx
import polars as pl
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn

from ..config import settings
from ..logging_config import get_logger
from ..models import EnrichmentRecord, work_items_from_repos
from ..utils.typing import GithubRepo, ListingMedia, GalleryRow
from ..fetchers.github import GithubCatalog, filter_repos
from ..fetchers.readme import ReadmeImageScraper
from ..fetchers.gemini import GeminiProvider
from .queue import EnrichmentQueue, QueueEvent
from .batch import save_dataframe, ProgressTracker

logger = get_logger(__name__)
console = Console()


class GalleryBuilder:
    """Shares one HTTP client across catalog and media lookups."""

    def __init__(self, concurrency: Optional[int] = None, client: Optional[httpx.AsyncClient] = None):
        self.concurrency = concurrency or settings.max_concurrency
        self.semaphore = asyncio.Semaphore(self.concurrency)
        self.http_client: Optional[httpx.AsyncClient] = client
        self._owns_client = client is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(
                timeout=settings.http_timeout,
                limits=httpx.Limits(
                    max_keepalive_connections=10,
                    max_connections=20
                ),
                http2=True
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.http_client and self._owns_client:
            await self.http_client.aclose()

    @property
    def catalog(self) -> GithubCatalog:
        return GithubCatalog(self.http_client)

    async def fetch_repos(self) -> List[GithubRepo]:
        return await self.catalog.fetch_repos()

    async def resolve_media(self, repo: GithubRepo) -> ListingMedia:
        """Thumbnail, fork parent and documentation link for one repo."""
        async with self.semaphore:
            scraper = ReadmeImageScraper(self.http_client)
            thumbnail_url, source = await scraper.thumbnail(repo)
            parent = await self.catalog.get_fork_parent(repo)

        return {
            "repo_id": repo["id"],
            "thumbnail_url": thumbnail_url,
            "thumbnail_source": source,
            "fork_parent": parent["full_name"] if parent else None,
            "documentation_url": repo.get("homepage") or None,
        }

    async def resolve_all_media(self, repos: List[GithubRepo]) -> Dict[int, ListingMedia]:
        """Resolve media for every repo with bounded concurrency."""
        results = await asyncio.gather(
            *(self.resolve_media(repo) for repo in repos), return_exceptions=True
        )

        media: Dict[int, ListingMedia] = {}
        for repo, result in zip(repos, results):
            if isinstance(result, Exception):
                logger.error(f"Error resolving media for {repo['name']}: {result}")
                continue
            media[repo["id"]] = result
        return media


async def enrich_repos(
    repos: List[GithubRepo],
    provider: Optional[GeminiProvider] = None,
    pacing_seconds: Optional[float] = None,
    provider_timeout: Optional[float] = None,
    show_progress: bool = True,
) -> EnrichmentQueue:
    """
    Run the enrichment queue over a list of repositories.

    Args:
        repos: Catalog entries to enrich
        provider: Enrichment provider (Gemini by default)
        pacing_seconds: Delay before each request (settings default)
        provider_timeout: Per-request timeout (settings default)
        show_progress: Render a rich progress bar

    Returns:
        The drained queue, holding records and outcomes
    """
    items = work_items_from_repos(repos)
    queue = EnrichmentQueue(
        provider=(provider or GeminiProvider()).enrich,
        pacing_seconds=settings.pacing_seconds if pacing_seconds is None else pacing_seconds,
        provider_timeout=settings.provider_timeout if provider_timeout is None else provider_timeout,
    )
    tracker = ProgressTracker(len(items))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        disable=not show_progress,
    ) as progress:
        task = progress.add_task("Enriching add-ons...", total=len(items))
        names = {item.id: item.name for item in items}

        def on_event(event: QueueEvent) -> None:
            if event.kind == "started":
                progress.update(task, description=f"Analyzing {names.get(event.item_id, event.item_id)}")
                return
            tracker.update(success=event.kind == "completed")
            progress.update(task, advance=1)

        queue.subscribe(on_event)
        queue.enqueue_all(items)
        await queue.join()

    tracker.final_report()
    return queue


def build_rows(
    repos: List[GithubRepo],
    records: Dict[int, EnrichmentRecord],
    media: Optional[Dict[int, ListingMedia]] = None,
) -> List[GalleryRow]:
    """Flatten repositories, media and enrichment into export rows."""
    media = media or {}
    rows: List[GalleryRow] = []
    for repo in repos:
        record = records.get(repo["id"])
        extras = media.get(repo["id"])
        rows.append({
            "id": repo["id"],
            "name": repo["name"],
            "full_name": repo.get("full_name", ""),
            "html_url": repo.get("html_url", ""),
            "description": repo.get("description") or "",
            "language": repo.get("language") or "",
            "topics": ", ".join(repo.get("topics") or []),
            "stars": repo.get("stargazers_count", 0),
            "updated_at": repo.get("updated_at", ""),
            "thumbnail_url": extras["thumbnail_url"] if extras else "",
            "documentation_url": (extras["documentation_url"] if extras else repo.get("homepage")) or "",
            "fork_parent": (extras["fork_parent"] if extras else None) or "",
            "ai_summary": record.summary if record else "",
            "use_cases": "; ".join(record.use_cases) if record else "",
            "technical_complexity": record.complexity.value if record else "",
            "business_value": record.business_value if record else "",
        })
    return rows


async def build_gallery(
    output_path: str,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    with_images: bool = True,
    pacing_seconds: Optional[float] = None,
    provider_timeout: Optional[float] = None,
) -> pl.DataFrame:
    """
    Fetch, enrich and export the gallery.

    Args:
        output_path: File to write (.csv, .parquet or .json)
        limit: Only enrich the first N repositories
        search: Optional search term applied before enrichment
        with_images: Resolve readme thumbnails and fork parents
        pacing_seconds: Delay before each enrichment request
        provider_timeout: Per-request timeout in seconds

    Returns:
        The exported DataFrame
    """
    async with GalleryBuilder() as builder:
        repos = await builder.fetch_repos()
        if search:
            repos = filter_repos(repos, search)
        if limit is not None:
            repos = repos[:limit]

        console.print(f"[blue]Building gallery for {len(repos)} add-ons...")

        media: Dict[int, ListingMedia] = {}
        if with_images:
            media = await builder.resolve_all_media(repos)

        queue = await enrich_repos(
            repos,
            pacing_seconds=pacing_seconds,
            provider_timeout=provider_timeout,
        )

    df = pl.DataFrame(build_rows(repos, queue.records, media))
    save_dataframe(df, output_path)
    console.print(f"[green]Gallery saved to {output_path}")
    return df
