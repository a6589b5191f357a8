"""Tests for gallery assembly and export."""

import httpx
import polars as pl
import pytest
from addon_gallery.models import Complexity, EnrichmentRecord, WorkItem
from addon_gallery.pipeline.batch import ProgressTracker, save_dataframe
from addon_gallery.pipeline.gallery import GalleryBuilder, build_rows, enrich_repos


def repo(repo_id, name, **extra):
    data = {
        "id": repo_id,
        "name": name,
        "full_name": f"seeq12/{name}",
        "html_url": f"https://github.com/seeq12/{name}",
        "description": f"{name} description",
        "fork": False,
        "updated_at": "2024-01-01T00:00:00Z",
        "homepage": None,
        "stargazers_count": 3,
        "language": "Python",
        "topics": ["seeq", "addon"],
        "default_branch": "main",
        "owner": {"login": "seeq12", "avatar_url": ""},
    }
    data.update(extra)
    return data


RECORD = EnrichmentRecord(
    summary="Does things.",
    use_cases=["One", "Two"],
    complexity=Complexity.HIGH,
    business_value="Saves time.",
)


class FakeProvider:
    """Provider double exposing the ``enrich`` coroutine."""

    def __init__(self, fail_ids=()):
        self.fail_ids = set(fail_ids)
        self.seen = []

    async def enrich(self, item: WorkItem) -> EnrichmentRecord:
        self.seen.append(item.id)
        if item.id in self.fail_ids:
            raise RuntimeError("boom")
        return RECORD


class TestEnrichRepos:
    """Running the queue over catalog entries."""

    @pytest.mark.asyncio
    async def test_enriches_every_repo_in_order(self):
        provider = FakeProvider(fail_ids={2})
        repos = [repo(1, "a"), repo(2, "b"), repo(3, "c")]

        queue = await enrich_repos(repos, provider=provider, pacing_seconds=0, show_progress=False)

        assert provider.seen == [1, 2, 3]
        assert set(queue.records) == {1, 3}
        assert [o.ok for o in queue.outcomes] == [True, False, True]


class TestBuildRows:
    """Flattening listings for export."""

    def test_row_with_enrichment_and_media(self):
        media = {
            1: {
                "repo_id": 1,
                "thumbnail_url": "https://img/1.png",
                "thumbnail_source": "readme",
                "fork_parent": "upstream/a",
                "documentation_url": "https://docs/a",
            }
        }
        (row,) = build_rows([repo(1, "a")], {1: RECORD}, media)

        assert row["ai_summary"] == "Does things."
        assert row["use_cases"] == "One; Two"
        assert row["technical_complexity"] == "High"
        assert row["thumbnail_url"] == "https://img/1.png"
        assert row["fork_parent"] == "upstream/a"
        assert row["topics"] == "seeq, addon"

    def test_row_without_enrichment(self):
        (row,) = build_rows([repo(1, "a", homepage="https://home")], {})

        assert row["ai_summary"] == ""
        assert row["technical_complexity"] == ""
        assert row["documentation_url"] == "https://home"
        assert row["thumbnail_url"] == ""


class TestSaveDataframe:
    """Export formats."""

    def test_csv_roundtrip(self, tmp_path):
        path = tmp_path / "out" / "gallery.csv"
        rows = build_rows([repo(1, "a"), repo(2, "b")], {1: RECORD})

        save_dataframe(pl.DataFrame(rows), str(path))

        loaded = pl.read_csv(path)
        assert loaded.height == 2
        assert loaded["name"].to_list() == ["a", "b"]

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(ValueError):
            save_dataframe(pl.DataFrame({"a": [1]}), str(tmp_path / "gallery.xlsx"))


class TestGalleryBuilder:
    """Media resolution with a shared client."""

    @pytest.mark.asyncio
    async def test_resolve_all_media(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/seeq12/with-image/main/README.md":
                return httpx.Response(200, text="![shot](https://cdn.example.com/shot.png)")
            if request.url.path == "/repos/seeq12/forked":
                return httpx.Response(200, json={"parent": {"full_name": "up/forked", "html_url": "u"}})
            return httpx.Response(404)

        repos = [
            repo(1, "with-image", homepage="https://docs.example.com"),
            repo(2, "forked", fork=True, language=None, topics=[]),
        ]
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with GalleryBuilder(concurrency=2, client=client) as builder:
            media = await builder.resolve_all_media(repos)
        await client.aclose()

        assert media[1]["thumbnail_url"] == "https://cdn.example.com/shot.png"
        assert media[1]["thumbnail_source"] == "readme"
        assert media[1]["documentation_url"] == "https://docs.example.com"
        assert media[2]["thumbnail_source"] == "fallback"
        assert media[2]["fork_parent"] == "up/forked"


class TestProgressTracker:
    """Counters used for run reporting."""

    def test_counts_success_and_failure(self):
        tracker = ProgressTracker(total_items=3, report_every=2)
        tracker.update(success=True)
        tracker.update(success=False)
        tracker.update(success=True)

        assert tracker.processed == 3
        assert tracker.successful == 2
        assert tracker.failed == 1
