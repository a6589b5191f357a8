"""Type definitions for GitHub API payloads and gallery rows."""

from typing import TypedDict, Optional, List


class RepoOwner(TypedDict):
    """Repository owner as returned by the GitHub API."""
    login: str
    avatar_url: str


class RepoLicense(TypedDict, total=False):
    """Repository licence summary."""
    key: str
    name: str
    spdx_id: str
    url: str


class ForkParent(TypedDict):
    """Upstream repository of a fork."""
    full_name: str
    html_url: str


class GithubRepo(TypedDict, total=False):
    """Subset of the GitHub repository payload used by the gallery."""
    id: int
    name: str
    full_name: str
    html_url: str
    description: Optional[str]
    fork: bool
    created_at: str
    updated_at: str
    pushed_at: str
    homepage: Optional[str]
    stargazers_count: int
    watchers_count: int
    forks_count: int
    open_issues_count: int
    language: Optional[str]
    has_pages: bool
    archived: bool
    license: Optional[RepoLicense]
    topics: List[str]
    default_branch: str
    owner: RepoOwner
    parent: ForkParent


class ListingMedia(TypedDict):
    """Display extras resolved for a listing."""
    repo_id: int
    thumbnail_url: str
    thumbnail_source: str
    fork_parent: Optional[str]
    documentation_url: Optional[str]


class GalleryRow(TypedDict):
    """Flattened export row: repository plus its enrichment."""
    id: int
    name: str
    full_name: str
    html_url: str
    description: str
    language: str
    topics: str
    stars: int
    updated_at: str
    thumbnail_url: str
    documentation_url: str
    fork_parent: str
    ai_summary: str
    use_cases: str
    technical_complexity: str
    business_value: str
