"""
Contract summarization through an OpenAI-compatible chat completions API.

The summarizer never raises for service problems: a missing API key or a failed
call resolves to a fixed placeholder wrapped in a degraded SummaryResult, so
callers always receive text.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import Settings
from app.schemas.contract import ContractMetadata

logger = logging.getLogger(__name__)

NOT_CONFIGURED_SUMMARY = "API key not configured. Summary not available."
ERROR_SUMMARY = "Error generating summary. Please try again later."
EMPTY_SUMMARY = "Summary generation failed."
NOT_CONFIGURED_METADATA_ERROR = "API key not configured."
ERROR_METADATA = "Error extracting metadata."
TRUNCATION_MARKER = "... [text truncated due to length]"

SUMMARY_SYSTEM_PROMPT = (
    "You are a legal assistant that summarizes contracts. "
    "Provide a concise {bullet_count}-bullet summary of the key points in the contract."
)
METADATA_SYSTEM_PROMPT = (
    "Extract the following information from the contract: effective date, expiry date, "
    "parties involved, contract type. Return as JSON with the keys effective_date, "
    "expiry_date, parties (a list of names) and contract_type."
)


@dataclass(frozen=True)
class SummaryResult:
    """Summary text plus whether it is a placeholder produced in degraded mode."""

    text: str
    degraded: bool = False
    reason: str | None = None


class Summarizer:
    """Single-request wrapper around the generative text service."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-3.5-turbo",
        max_text_length: int = 15000,
        max_output_tokens: int = 500,
        temperature: float = 0.3,
        bullet_count: int = 5,
        timeout: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_text_length = max_text_length
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.bullet_count = bullet_count
        self.timeout = timeout
        self.transport = transport
        if not api_key:
            logger.warning("OpenAI API key not found. Summaries will use a placeholder.")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Summarizer":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.OPENAI_MODEL,
            max_text_length=settings.OPENAI_MAX_TEXT_LENGTH,
            max_output_tokens=settings.OPENAI_MAX_TOKENS,
            temperature=settings.OPENAI_TEMPERATURE,
            bullet_count=settings.SUMMARY_BULLET_COUNT,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def truncate(self, text: str) -> str:
        if len(text) <= self.max_text_length:
            return text
        return text[: self.max_text_length] + TRUNCATION_MARKER

    async def summarize(
        self,
        text: str,
        bullet_count: int | None = None,
        max_output_tokens: int | None = None,
    ) -> SummaryResult:
        if not self.is_configured:
            return SummaryResult(NOT_CONFIGURED_SUMMARY, degraded=True, reason="not_configured")

        system_prompt = SUMMARY_SYSTEM_PROMPT.format(
            bullet_count=bullet_count or self.bullet_count
        )
        try:
            content = await self._call_llm(
                system_prompt,
                self.truncate(text),
                max_tokens=max_output_tokens or self.max_output_tokens,
            )
        except Exception as e:
            logger.error(f"Summary generation failed: {e}", exc_info=True)
            return SummaryResult(ERROR_SUMMARY, degraded=True, reason=str(e))

        if not content.strip():
            logger.warning("Language model returned an empty summary")
            return SummaryResult(EMPTY_SUMMARY, degraded=True, reason="empty_response")
        return SummaryResult(content.strip())

    async def extract_metadata(self, text: str) -> ContractMetadata:
        """Ask the model for dates, parties and type; errors come back in ``error``."""
        if not self.is_configured:
            return ContractMetadata(error=NOT_CONFIGURED_METADATA_ERROR)

        try:
            content = await self._call_llm(
                METADATA_SYSTEM_PROMPT,
                self.truncate(text),
                max_tokens=self.max_output_tokens,
                response_format={"type": "json_object"},
            )
            payload = json.loads(content or "{}")
            if not isinstance(payload, dict):
                raise ValueError("Metadata response is not a JSON object")
            return _metadata_from_payload(payload)
        except Exception as e:
            logger.error(f"Metadata extraction failed: {e}", exc_info=True)
            return ContractMetadata(error=ERROR_METADATA)

    async def _call_llm(
        self,
        system_prompt: str,
        user_text: str,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> str:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            "max_tokens": max_tokens,
            "temperature": self.temperature,
        }
        if response_format:
            body["response_format"] = response_format

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            logger.info(f"Calling LLM: {self.model} at {self.base_url}")
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=body,
            )
            response.raise_for_status()
            result = response.json()

        choices = result.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""


def _normalize_key(key: str) -> str:
    return re.sub(r"[^a-z]", "", key.lower())


def _metadata_from_payload(payload: dict[str, Any]) -> ContractMetadata:
    # Models are loose about key spelling ("effectiveDate", "Effective Date", ...)
    values = {_normalize_key(key): value for key, value in payload.items()}

    parties = values.get("parties") or values.get("partiesinvolved") or []
    if isinstance(parties, str):
        parties = [part.strip() for part in parties.split(",") if part.strip()]
    elif isinstance(parties, list):
        parties = [
            party.get("name", "") if isinstance(party, dict) else str(party)
            for party in parties
        ]
        parties = [party for party in parties if party]
    else:
        parties = []

    def _text(*keys: str) -> str | None:
        for key in keys:
            value = values.get(key)
            if value not in (None, ""):
                return str(value)
        return None

    return ContractMetadata(
        effective_date=_text("effectivedate"),
        expiry_date=_text("expirydate", "expirationdate"),
        parties=parties,
        contract_type=_text("contracttype", "type"),
    )
