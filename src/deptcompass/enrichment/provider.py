"""
Provider Module - External department enrichment via Gemini.
============================================================

Provides:
- EnrichmentProvider protocol consumed by the detail enricher
- GeminiEnrichmentProvider using the google-generativeai SDK with
  retries, a request timeout and tolerant JSON parsing

A provider never raises to its caller: transport failures, timeouts and
malformed output are logged and reported as "nothing returned" (None).
"""

import json
from typing import Optional, Protocol, runtime_checkable

from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from deptcompass.enrichment.prompts import PromptBuilder
from deptcompass.shared.config import get_settings
from deptcompass.shared.logging import get_logger
from deptcompass.shared.schemas import EnrichmentPayload, RecruitmentStats
from deptcompass.shared.utils import strip_code_fences

logger = get_logger(__name__)


@runtime_checkable
class EnrichmentProvider(Protocol):
    """Anything that can enrich a (university, department) pair."""

    def fetch(
        self,
        university_name: str,
        department_name: str,
        stats: Optional[RecruitmentStats] = None,
    ) -> Optional[EnrichmentPayload]:
        ...


def parse_payload(text: str) -> Optional[EnrichmentPayload]:
    """
    Parse raw model output into a payload.

    Returns:
        The payload, or None for empty, non-JSON or all-empty output
    """
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        return None

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(f"Enrichment output is not valid JSON: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Enrichment output is not a JSON object: {type(data).__name__}")
        return None

    try:
        payload = EnrichmentPayload.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Enrichment output failed validation: {e}")
        return None

    return None if payload.is_empty() else payload


# ─────────────────────────────────────────────────────────────────────────────
# Gemini Provider
# ─────────────────────────────────────────────────────────────────────────────


class GeminiEnrichmentProvider:
    """
    Enrichment provider backed by the Gemini API.

    Example:
        >>> provider = GeminiEnrichmentProvider()
        >>> payload = provider.fetch("서울대학교", "컴퓨터공학부")
        >>> payload.summary if payload else None
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        """
        Initialize the provider.

        Args:
            model_name: Gemini model name (default from config)
            temperature: Generation temperature (default from config)
            max_tokens: Maximum tokens to generate (default from config)
            api_key: Gemini API key (default from env)
            timeout: Per-request timeout in seconds (default from config)
            max_retries: Attempts after the first failure (default from config)
        """
        settings = get_settings()
        config = settings.enrichment

        self.model_name = model_name or settings.get_effective_model()
        self.temperature = temperature if temperature is not None else config.temperature
        self.max_tokens = max_tokens or config.max_output_tokens
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.timeout = timeout if timeout is not None else config.timeout_seconds
        self.max_retries = max_retries if max_retries is not None else config.max_retries

        self._client = None
        self._model = None
        self.prompt_builder = PromptBuilder()

    @property
    def is_available(self) -> bool:
        """A provider without an API key never calls out."""
        return bool(self.api_key)

    @property
    def client(self):
        """Lazy-load Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError(
                    "Gemini API key not found. Set GEMINI_API_KEY environment variable."
                )
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._client = genai
            logger.debug("Gemini client initialized")
        return self._client

    @property
    def model(self):
        """Lazy-load Gemini model."""
        if self._model is None:
            self._model = self.client.GenerativeModel(
                model_name=self.model_name,
                generation_config={
                    "temperature": self.temperature,
                    "max_output_tokens": self.max_tokens,
                    "response_mime_type": "application/json",
                },
            )
            logger.debug(f"Gemini model loaded: {self.model_name}")
        return self._model

    def _generate_content(self, prompt: str) -> str:
        """Call the model with retries; returns the raw response text."""

        @retry(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            reraise=True,
        )
        def _call() -> str:
            response = self.model.generate_content(
                prompt,
                request_options={"timeout": self.timeout},
            )
            return response.text

        return _call()

    def fetch(
        self,
        university_name: str,
        department_name: str,
        stats: Optional[RecruitmentStats] = None,
    ) -> Optional[EnrichmentPayload]:
        """
        Ask the model about one department.

        Args:
            university_name: University name
            department_name: Department name
            stats: Local recruitment stats for context

        Returns:
            Parsed payload, or None on any failure
        """
        if not self.is_available:
            logger.debug("Enrichment skipped: no Gemini API key")
            return None

        system_prompt, user_prompt = self.prompt_builder.build_prompt(
            university_name, department_name, stats
        )

        try:
            text = self._generate_content(f"{system_prompt}\n\n{user_prompt}")
        except Exception as e:
            logger.warning(f"Enrichment failed for {university_name} {department_name}: {e}")
            return None

        payload = parse_payload(text)
        if payload is None:
            logger.warning(f"Enrichment returned nothing usable for {university_name} {department_name}")
        return payload


# Global instance
_provider: Optional[GeminiEnrichmentProvider] = None


def get_provider() -> GeminiEnrichmentProvider:
    """Get or create the global Gemini provider."""
    global _provider
    if _provider is None:
        _provider = GeminiEnrichmentProvider()
    return _provider
