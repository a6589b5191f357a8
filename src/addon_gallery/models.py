"""Domain models for catalog items and their enrichment."""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .utils.typing import GithubRepo


class Complexity(str, Enum):
    """Technical complexity estimate for an add-on."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class WorkItem(BaseModel):
    """A catalog entry awaiting enrichment. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str = ""
    topics: Tuple[str, ...] = ()
    language: Optional[str] = None

    @classmethod
    def from_repo(cls, repo: GithubRepo) -> "WorkItem":
        """Build a work item from a GitHub repository payload."""
        return cls(
            id=repo["id"],
            name=repo["name"],
            description=repo.get("description") or "",
            topics=tuple(repo.get("topics") or ()),
            language=repo.get("language"),
        )


class EnrichmentRecord(BaseModel):
    """Structured AI enrichment for one catalog entry."""

    summary: str = Field(..., description="One-sentence pitch of the add-on")
    use_cases: List[str] = Field(..., description="Use cases for an industrial engineer")
    complexity: Complexity = Field(..., description="Technical complexity estimate")
    business_value: str = Field(..., description="Short business value statement")


def work_items_from_repos(repos: List[GithubRepo]) -> List[WorkItem]:
    """Map repository payloads to work items, dropping repeated ids."""
    seen: set[int] = set()
    items: List[WorkItem] = []
    for repo in repos:
        if repo["id"] in seen:
            continue
        seen.add(repo["id"])
        items.append(WorkItem.from_repo(repo))
    return items
