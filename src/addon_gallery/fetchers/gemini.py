"""Gemini-backed enrichment provider for gallery listings."""

from typing import Any, Optional
from google import genai
from google.genai.types import GenerateContentConfig
from pydantic import ValidationError
from ..config import settings
from ..logging_config import get_logger
from ..models import Complexity, EnrichmentRecord, WorkItem

logger = get_logger(__name__)

PROMPT_TEMPLATE = """
Analyze the following Seeq software add-on/repository and provide a structured enhancement for the gallery listing.

Repository: {name}
Description: {description}
Language: {language}
Topics: {topics}

Please act as a Technical Product Manager at Seeq.
1. Write a concise, 1-sentence "summary" that sells the value.
2. List {use_case_count} potential "use_cases" for an industrial engineer.
3. Estimate "complexity" (Low/Medium/High) based on the language and nature of the tool.
4. Write a short "business_value" statement.
"""

FALLBACK_SUMMARY = "An essential tool for the Seeq ecosystem."
FALLBACK_USE_CASES = ["Data Analysis", "Process Improvement", "Automation"]
FALLBACK_BUSINESS_VALUE = "Improves operational efficiency through better data handling."


def build_prompt(item: WorkItem, use_case_count: int = 3) -> str:
    """Render the analysis prompt for a work item."""
    return PROMPT_TEMPLATE.format(
        name=item.name,
        description=item.description or "No description provided.",
        language=item.language or "Unknown",
        topics=", ".join(item.topics),
        use_case_count=use_case_count,
    ).strip()


def fallback_record(item: WorkItem) -> EnrichmentRecord:
    """Deterministic record used when the model call fails."""
    return EnrichmentRecord(
        summary=item.description or FALLBACK_SUMMARY,
        use_cases=list(FALLBACK_USE_CASES),
        complexity=Complexity.MEDIUM,
        business_value=FALLBACK_BUSINESS_VALUE,
    )


class GeminiProvider:
    """
    Produces enrichment records with the Gemini API.

    By default any failure (network, empty answer, malformed JSON, schema
    mismatch) is logged and replaced with ``fallback_record``. With
    ``fallback_on_error=False`` the error propagates to the caller instead.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        model_name: Optional[str] = None,
        fallback_on_error: bool = True,
        max_use_cases: Optional[int] = None,
    ):
        self._client = client
        self.model_name = model_name or settings.gemini_model
        self.fallback_on_error = fallback_on_error
        self.max_use_cases = settings.max_use_cases if max_use_cases is None else max_use_cases

    def _get_client(self) -> Any:
        """Get or create the GenAI client."""
        if self._client is None:
            self._client = genai.Client(api_key=settings.gemini_api_key)
        return self._client

    async def enrich(self, item: WorkItem) -> EnrichmentRecord:
        """Analyze a work item and return its enrichment record."""
        try:
            return await self._generate(item)
        except Exception as e:
            if not self.fallback_on_error:
                raise
            logger.warning(f"Gemini analysis failed for {item.name}: {e}")
            return fallback_record(item)

    async def _generate(self, item: WorkItem) -> EnrichmentRecord:
        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=self.model_name,
            contents=build_prompt(item, self.max_use_cases),
            config=GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=EnrichmentRecord,
            ),
        )

        text = (response.text or "").strip()
        if not text:
            raise ValueError("No response from Gemini")

        try:
            record = EnrichmentRecord.model_validate_json(text)
        except ValidationError as e:
            raise ValueError(f"Malformed Gemini response: {e.error_count()} validation errors") from e

        if len(record.use_cases) > self.max_use_cases:
            record = record.model_copy(update={"use_cases": record.use_cases[:self.max_use_cases]})

        logger.debug(f"Gemini enriched {item.name} ({record.complexity.value})")
        return record

    async def __call__(self, item: WorkItem) -> EnrichmentRecord:
        return await self.enrich(item)
