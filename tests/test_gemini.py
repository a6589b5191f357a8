"""Tests for the Gemini enrichment provider."""

import json
from types import SimpleNamespace
import pytest
from addon_gallery.fetchers.gemini import (
    FALLBACK_SUMMARY,
    FALLBACK_USE_CASES,
    GeminiProvider,
    build_prompt,
    fallback_record,
)
from addon_gallery.models import Complexity, WorkItem


class FakeModels:
    """Stands in for ``client.aio.models``."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def fake_client(text=None, error=None):
    models = FakeModels(text=text, error=error)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models


ITEM = WorkItem(
    id=42,
    name="seeq-correlation",
    description="Analyze correlations and lags amongst time series signals.",
    topics=("analytics", "python"),
    language="Python",
)

GOOD_RESPONSE = {
    "summary": "Find lagged correlations across process signals.",
    "use_cases": ["Root cause analysis", "Sensor validation", "Lag detection"],
    "complexity": "High",
    "business_value": "Cuts investigation time for process upsets.",
}


class TestPrompt:
    """Prompt rendering."""

    def test_prompt_includes_item_attributes(self):
        prompt = build_prompt(ITEM)
        assert "Repository: seeq-correlation" in prompt
        assert "Language: Python" in prompt
        assert "Topics: analytics, python" in prompt

    def test_prompt_defaults_for_missing_fields(self):
        prompt = build_prompt(WorkItem(id=1, name="bare"))
        assert "No description provided." in prompt
        assert "Language: Unknown" in prompt


class TestGeminiProvider:
    """Response parsing and fallback policy."""

    @pytest.mark.asyncio
    async def test_parses_structured_response(self):
        client, models = fake_client(text=json.dumps(GOOD_RESPONSE))
        provider = GeminiProvider(client=client, model_name="test-model")

        record = await provider.enrich(ITEM)

        assert record.summary == GOOD_RESPONSE["summary"]
        assert record.use_cases == GOOD_RESPONSE["use_cases"]
        assert record.complexity is Complexity.HIGH
        assert models.calls[0]["model"] == "test-model"
        assert models.calls[0]["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_truncates_extra_use_cases(self):
        payload = dict(GOOD_RESPONSE, use_cases=["a", "b", "c", "d", "e"])
        client, _ = fake_client(text=json.dumps(payload))
        provider = GeminiProvider(client=client, max_use_cases=3)

        record = await provider.enrich(ITEM)

        assert record.use_cases == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_zero_use_cases_is_respected(self):
        client, _ = fake_client(text=json.dumps(GOOD_RESPONSE))
        provider = GeminiProvider(client=client, max_use_cases=0)

        record = await provider.enrich(ITEM)

        assert provider.max_use_cases == 0
        assert record.use_cases == []

    @pytest.mark.asyncio
    async def test_service_error_returns_fallback(self):
        client, _ = fake_client(error=ConnectionError("unreachable"))
        provider = GeminiProvider(client=client)

        record = await provider.enrich(ITEM)

        assert record == fallback_record(ITEM)
        assert record.summary == ITEM.description
        assert record.complexity is Complexity.MEDIUM

    @pytest.mark.asyncio
    async def test_empty_response_returns_fallback(self):
        client, _ = fake_client(text="")
        record = await GeminiProvider(client=client).enrich(ITEM)
        assert record.use_cases == FALLBACK_USE_CASES

    @pytest.mark.asyncio
    async def test_malformed_response_returns_fallback(self):
        client, _ = fake_client(text=json.dumps({"summary": "only a summary"}))
        record = await GeminiProvider(client=client).enrich(ITEM)
        assert record == fallback_record(ITEM)

    @pytest.mark.asyncio
    async def test_unknown_complexity_returns_fallback(self):
        client, _ = fake_client(text=json.dumps(dict(GOOD_RESPONSE, complexity="Extreme")))
        record = await GeminiProvider(client=client).enrich(ITEM)
        assert record.complexity is Complexity.MEDIUM

    @pytest.mark.asyncio
    async def test_errors_propagate_when_fallback_disabled(self):
        client, _ = fake_client(text="not json")
        provider = GeminiProvider(client=client, fallback_on_error=False)

        with pytest.raises(ValueError):
            await provider.enrich(ITEM)

    def test_fallback_without_description_uses_stock_summary(self):
        record = fallback_record(WorkItem(id=3, name="bare"))
        assert record.summary == FALLBACK_SUMMARY
