"""Command-line interface for the add-on gallery."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import settings
from .logging_config import setup_logging, get_logger
from .fetchers.github import SORT_OPTIONS, filter_repos, sort_repos
from .pipeline.batch import SUPPORTED_FORMATS
from .pipeline.gallery import GalleryBuilder, build_gallery
from .cache import cache_stats, clear_cache

# Initialize CLI app
app = typer.Typer(
    name="addon-gallery",
    help="Build an add-on gallery from GitHub repos with paced Gemini summaries",
    add_completion=False,
)
console = Console()
logger = get_logger(__name__)


@app.callback()
def main(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set logging level",
        case_sensitive=False,
    ),
    cache_dir: str = typer.Option(
        settings.cache_dir,
        "--cache-dir",
        help="Directory for disk cache",
    ),
) -> None:
    """Add-on Gallery CLI - list, enrich and export gallery listings."""
    settings.log_level = log_level.upper()
    settings.cache_dir = cache_dir

    setup_logging()


@app.command("list")
def list_addons(
    search: str = typer.Option("", "--search", "-s", help="Filter by name, description or topic"),
    sort: str = typer.Option("updated", "--sort", help=f"Sort order: {', '.join(SORT_OPTIONS)}"),
) -> None:
    """Display the gallery catalog."""
    if sort not in SORT_OPTIONS:
        console.print(f"[red]Error: Unknown sort option '{sort}'")
        console.print(f"Available options: {', '.join(SORT_OPTIONS)}")
        raise typer.Exit(1)

    async def fetch():
        async with GalleryBuilder() as builder:
            return await builder.fetch_repos()

    repos = sort_repos(filter_repos(asyncio.run(fetch()), search), sort)

    table = Table(title=f"Add-ons ({settings.github_org})")
    table.add_column("Name", style="cyan")
    table.add_column("Language", style="yellow")
    table.add_column("Stars", style="green", justify="right")
    table.add_column("Updated", style="magenta")
    table.add_column("Description")

    for repo in repos:
        table.add_row(
            repo["name"],
            repo.get("language") or "-",
            str(repo.get("stargazers_count", 0)),
            (repo.get("updated_at") or "")[:10],
            repo.get("description") or "",
        )

    console.print(table)
    if not repos:
        console.print("[yellow]No add-ons found matching your search.")


@app.command()
def enrich(
    output: str = typer.Option(
        "gallery.csv",
        "--out", "-o",
        help="Output file (.csv, .parquet or .json)",
    ),
    search: str = typer.Option("", "--search", "-s", help="Only enrich matching add-ons"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Only enrich the first N add-ons", min=1),
    pacing: float = typer.Option(
        settings.pacing_seconds,
        "--pacing",
        help="Seconds to wait before each Gemini request",
        min=0.0,
    ),
    timeout: Optional[float] = typer.Option(
        settings.provider_timeout,
        "--timeout",
        help="Per-request timeout in seconds (default: wait indefinitely)",
        min=0.1,
    ),
    images: bool = typer.Option(True, "--images/--no-images", help="Resolve readme thumbnails"),
) -> None:
    """
    Enrich every add-on with an AI summary, one request at a time.

    Adds columns: ai_summary, use_cases, technical_complexity, business_value,
    plus thumbnail_url and fork_parent when images are resolved.
    """
    if Path(output).suffix.lower() not in SUPPORTED_FORMATS:
        console.print(f"[red]Error: Unsupported output format '{Path(output).suffix}'")
        console.print(f"Supported formats: {', '.join(SUPPORTED_FORMATS)}")
        raise typer.Exit(1)

    if not settings.gemini_api_key:
        console.print("[yellow]Warning: GEMINI_API_KEY is not set; listings will get fallback summaries")

    table = Table(title="Enrichment Run")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Organisation", settings.github_org)
    table.add_row("Model", settings.gemini_model)
    table.add_row("Pacing", f"{pacing:.1f}s")
    table.add_row("Timeout", f"{timeout:.1f}s" if timeout else "none")
    table.add_row("Output file", output)
    console.print(table)

    try:
        df = asyncio.run(
            build_gallery(
                output,
                limit=limit,
                search=search or None,
                with_images=images,
                pacing_seconds=pacing,
                provider_timeout=timeout,
            )
        )

        enriched = df.filter(df["ai_summary"] != "").height if df.height else 0
        console.print("\n[green]✅ Enrichment completed!")
        console.print(f"[green]📄 Results saved to: {output}")
        console.print(f"[green]📊 Add-ons enriched: {enriched}/{df.height}")

    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Enrichment interrupted by user")
    except Exception as e:
        console.print(f"\n[red]❌ Enrichment failed: {e}")
        logger.exception("Enrichment failed")
        raise typer.Exit(1)


@app.command()
def images(
    search: str = typer.Option("", "--search", "-s", help="Filter by name, description or topic"),
) -> None:
    """Resolve thumbnails and fork parents for the catalog."""

    async def resolve():
        async with GalleryBuilder() as builder:
            repos = filter_repos(await builder.fetch_repos(), search)
            return repos, await builder.resolve_all_media(repos)

    repos, media = asyncio.run(resolve())

    table = Table(title="Listing Media")
    table.add_column("Name", style="cyan")
    table.add_column("Source", style="yellow")
    table.add_column("Thumbnail", style="green", overflow="fold")
    table.add_column("Fork of", style="magenta")

    for repo in repos:
        extras = media.get(repo["id"])
        if extras is None:
            table.add_row(repo["name"], "[red]error", "", "")
            continue
        table.add_row(
            repo["name"],
            extras["thumbnail_source"],
            extras["thumbnail_url"],
            extras["fork_parent"] or "",
        )

    console.print(table)


@app.command()
def cache(
    action: str = typer.Argument(..., help="Cache action: 'stats', 'clear'"),
) -> None:
    """Manage the application cache."""
    if action == "stats":
        stats = cache_stats()

        table = Table(title="Cache Statistics")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Cache entries", str(stats["size"]))
        table.add_row("Cache volume", f"{stats['volume'] / 1024 / 1024:.1f} MB")
        table.add_row("Cache directory", settings.cache_dir)

        console.print(table)

    elif action == "clear":
        if typer.confirm("Are you sure you want to clear the cache?"):
            clear_cache()
            console.print("[green]✅ Cache cleared successfully")
        else:
            console.print("Cancelled.")
    else:
        console.print(f"[red]Error: Unknown cache action '{action}'")
        console.print("Available actions: stats, clear")
        raise typer.Exit(1)


@app.command()
def config() -> None:
    """Display current configuration."""
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="yellow")

    # Mask sensitive values
    table.add_row(
        "Gemini API Key",
        "***" + settings.gemini_api_key[-4:] if settings.gemini_api_key else "[yellow]Not set (fallback summaries)",
        "Environment"
    )
    table.add_row(
        "GitHub Token",
        "***" + settings.github_token[-4:] if settings.github_token else "[yellow]Not set (optional)",
        "Environment"
    )

    table.add_row("GitHub Organisation", settings.github_org, "Config")
    table.add_row("Gemini Model", settings.gemini_model, "Config")
    table.add_row("Pacing", f"{settings.pacing_seconds:.1f}s", "Config")
    table.add_row(
        "Provider Timeout",
        f"{settings.provider_timeout:.1f}s" if settings.provider_timeout else "none",
        "Config"
    )
    table.add_row("Max Concurrency", str(settings.max_concurrency), "Config")
    table.add_row("Cache Directory", settings.cache_dir, "Config")
    table.add_row("Cache TTL", f"{settings.cache_ttl_days} days", "Config")
    table.add_row("HTTP Timeout", f"{settings.http_timeout}s", "Config")
    table.add_row("Log Level", settings.log_level, "Config")

    console.print(table)


if __name__ == "__main__":
    app()
