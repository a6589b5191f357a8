"""Readme scraping for listing thumbnails."""

import re
from typing import Optional
import httpx
from bs4 import BeautifulSoup
from ..cache import cached
from ..logging_config import get_logger
from ..config import settings
from ..utils.typing import GithubRepo

logger = get_logger(__name__)

MARKDOWN_IMAGE = re.compile(r'!\[.*?\]\((.*?)\)')

# Stock images used when a readme has none
IMAGES = {
    "python": "https://images.unsplash.com/photo-1526374965328-7f61d4dc18c5?auto=format&fit=crop&w=800&q=80",
    "charts": "https://images.unsplash.com/photo-1551288049-bebda4e38f71?auto=format&fit=crop&w=800&q=80",
    "industrial": "https://images.unsplash.com/photo-1581091226825-a6a2a5aee158?auto=format&fit=crop&w=800&q=80",
    "connector": "https://images.unsplash.com/photo-1451187580459-43490279c0fa?auto=format&fit=crop&w=800&q=80",
    "default": "https://images.unsplash.com/photo-1518770660439-4636190af475?auto=format&fit=crop&w=800&q=80",
    "docs": "https://images.unsplash.com/photo-1555066931-4365d14bab8c?auto=format&fit=crop&w=800&q=80",
}


def fallback_image(repo: GithubRepo) -> str:
    """Pick a stock image from the repo's name, topics and language."""
    topics = " ".join(repo.get("topics") or []).lower()
    lang = (repo.get("language") or "").lower()
    name = repo["name"].lower()

    if "documentation" in name or "docs" in topics:
        return IMAGES["docs"]
    if "python" in topics or "python" in lang or "spy" in topics:
        return IMAGES["python"]
    if "azure" in topics or "cloud" in topics or "connector" in name:
        return IMAGES["connector"]
    if "visualization" in topics or "plot" in name or "chart" in name:
        return IMAGES["charts"]
    if "industrial" in topics or "asset" in topics:
        return IMAGES["industrial"]

    return IMAGES["default"]


def resolve_relative_url(url: str, full_name: str, branch: str) -> str:
    """Turn a readme-relative image path into an absolute raw-content URL."""
    if url.startswith("http"):
        return url
    clean_path = url[2:] if url.startswith("./") else url.lstrip("/")
    return f"{settings.github_raw_url}/{full_name}/{branch}/{clean_path}"


def extract_image_url(readme_text: str) -> Optional[str]:
    """
    Find the first image referenced by a readme.

    Markdown image syntax wins over inline HTML ``<img>`` tags.

    Args:
        readme_text: Raw readme content

    Returns:
        Image URL as written in the readme, or None
    """
    match = MARKDOWN_IMAGE.search(readme_text)
    if match and match.group(1).strip():
        # Drop an optional title: ![alt](url "title")
        return match.group(1).split()[0]

    soup = BeautifulSoup(readme_text, "html.parser")
    for img in soup.find_all("img"):
        src = img.get("src")
        if src:
            return src.strip()

    return None


class ReadmeImageScraper:
    """Finds a display image for a repository from its readme."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def find_image(self, repo: GithubRepo) -> Optional[str]:
        """Return an absolute URL of the first readme image, or None."""
        branch = repo.get("default_branch") or "master"
        text = await fetch_readme(repo["full_name"], branch, client=self.client)
        if not text:
            return None

        url = extract_image_url(text)
        if not url:
            return None
        return resolve_relative_url(url, repo["full_name"], branch)

    async def thumbnail(self, repo: GithubRepo) -> tuple[str, str]:
        """Readme image if any, else a stock fallback. Returns (url, source)."""
        url = await self.find_image(repo)
        if url:
            return url, "readme"
        return fallback_image(repo), "fallback"


@cached(key_prefix="readme", ttl_seconds=7*24*60*60, ignore_kwargs=["client"])  # Cache for 7 days
async def fetch_readme(full_name: str, branch: str, *, client: httpx.AsyncClient) -> Optional[str]:
    """Download README.md from raw content hosting."""
    url = f"{settings.github_raw_url}/{full_name}/{branch}/README.md"
    try:
        response = await client.get(url, timeout=settings.http_timeout, follow_redirects=True)
        response.raise_for_status()
        return response.text

    except httpx.TimeoutException:
        logger.debug(f"Timeout fetching {url}")
        return None
    except httpx.HTTPError as e:
        logger.debug(f"HTTP error fetching {url}: {e}")
        return None


# Module-level function for convenience
async def grab_image(repo: GithubRepo, client: Optional[httpx.AsyncClient] = None) -> Optional[str]:
    """Find the readme image of a repository."""
    if client is None:
        async with httpx.AsyncClient() as client:
            return await ReadmeImageScraper(client).find_image(repo)
    return await ReadmeImageScraper(client).find_image(repo)
