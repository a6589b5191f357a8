"""GitHub REST API client supplying the gallery catalog."""

from datetime import datetime
from typing import Optional, Dict, Any, List
import httpx
from ..config import settings
from ..cache import cached
from ..logging_config import get_logger
from ..models import WorkItem, work_items_from_repos
from ..utils.typing import GithubRepo, ForkParent

logger = get_logger(__name__)

SORT_OPTIONS = ("updated", "stars", "name")

# Served when the API is unreachable or rate limited
SAMPLE_REPOS: List[GithubRepo] = [
    {
        "id": 1,
        "name": "seeq-python",
        "full_name": "seeq12/seeq-python",
        "html_url": "https://github.com/seeq12/seeq-python",
        "description": "The official Python SDK for Seeq Server.",
        "fork": False,
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2023-10-25T00:00:00Z",
        "pushed_at": "2023-10-25T00:00:00Z",
        "homepage": None,
        "stargazers_count": 45,
        "watchers_count": 45,
        "forks_count": 20,
        "open_issues_count": 5,
        "language": "Python",
        "has_pages": False,
        "archived": False,
        "license": {"key": "apache-2.0", "name": "Apache License 2.0", "spdx_id": "Apache-2.0", "url": ""},
        "topics": ["sdk", "data-science"],
        "default_branch": "master",
        "owner": {"login": "seeq12", "avatar_url": ""},
    },
]


class GithubCatalog:
    """Async client for the organisation's repository listing."""

    def __init__(self, client: httpx.AsyncClient, org: Optional[str] = None):
        self.client = client
        self.org = org or settings.github_org
        self.base_url = settings.github_api_url

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make GET request and return JSON, or None on failure."""
        try:
            response = await self.client.get(
                url,
                params=params,
                headers=settings.github_headers,
                timeout=settings.http_timeout
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.warning(f"HTTP error fetching {url}: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Invalid JSON from {url}: {e}")
            return None

    async def fetch_repos(self) -> List[GithubRepo]:
        """
        Fetch the organisation's repositories, newest update first.

        Falls back to a built-in sample catalog when the API call fails.
        """
        url = f"{self.base_url}/users/{self.org}/repos"
        data = await self._get_json(url, params={"per_page": 100, "sort": "updated"})

        if not isinstance(data, list):
            logger.warning(f"Using sample catalog for {self.org}")
            repos = [dict(repo) for repo in SAMPLE_REPOS]
        else:
            repos = data

        return sort_repos([_normalize_repo(repo) for repo in repos], "updated")

    async def fetch_work_items(self) -> List[WorkItem]:
        """Catalog source for the enrichment queue."""
        return work_items_from_repos(await self.fetch_repos())

    async def get_fork_parent(self, repo: GithubRepo) -> Optional[ForkParent]:
        """Return the upstream of a fork, looking it up when not in the payload."""
        if not repo.get("fork"):
            return None
        if repo.get("parent"):
            return repo["parent"]

        details = await fetch_repo_details(repo["full_name"], client=self.client)
        parent = (details or {}).get("parent")
        if not parent:
            return None
        return {"full_name": parent["full_name"], "html_url": parent["html_url"]}


@cached(key_prefix="gh_repo", ttl_seconds=24*60*60, ignore_kwargs=["client"])  # Cache for 24 hours
async def fetch_repo_details(full_name: str, *, client: httpx.AsyncClient) -> Optional[Dict[str, Any]]:
    """Fetch the full repository payload (includes fork parent)."""
    url = f"{settings.github_api_url}/repos/{full_name}"
    try:
        response = await client.get(url, headers=settings.github_headers, timeout=settings.http_timeout)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch repo details for {full_name}: {e}")
        return None


def _normalize_repo(repo: GithubRepo) -> GithubRepo:
    """Fill defaults and point Pages-enabled repos without a homepage at their Pages site."""
    repo = dict(repo)
    repo.setdefault("topics", [])
    repo.setdefault("description", None)
    repo.setdefault("language", None)
    if repo.get("has_pages") and not repo.get("homepage"):
        repo["homepage"] = f"https://{repo['owner']['login']}.github.io/{repo['name']}/"
    return repo


def _parse_timestamp(value: Optional[str]) -> datetime:
    if not value:
        return datetime.min
    return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)


def sort_repos(repos: List[GithubRepo], option: str = "updated") -> List[GithubRepo]:
    """Sort by last update (newest first), star count (highest first) or name."""
    if option == "stars":
        return sorted(repos, key=lambda r: r.get("stargazers_count", 0), reverse=True)
    if option == "name":
        return sorted(repos, key=lambda r: r["name"].lower())
    if option == "updated":
        return sorted(repos, key=lambda r: _parse_timestamp(r.get("updated_at")), reverse=True)
    raise ValueError(f"Unknown sort option '{option}', expected one of {SORT_OPTIONS}")


def filter_repos(repos: List[GithubRepo], term: str) -> List[GithubRepo]:
    """Case-insensitive search over name, description and topics."""
    needle = term.strip().lower()
    if not needle:
        return list(repos)

    def matches(repo: GithubRepo) -> bool:
        return (
            needle in repo["name"].lower()
            or needle in (repo.get("description") or "").lower()
            or any(needle in topic.lower() for topic in repo.get("topics") or [])
        )

    return [repo for repo in repos if matches(repo)]


# Module-level function for convenience
async def fetch_catalog(client: Optional[httpx.AsyncClient] = None) -> List[GithubRepo]:
    """Fetch the gallery catalog."""
    if client is None:
        async with httpx.AsyncClient() as client:
            return await GithubCatalog(client).fetch_repos()
    return await GithubCatalog(client).fetch_repos()
