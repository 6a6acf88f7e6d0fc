import logging
from typing import Iterable, List, Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from farmhand.core.config import Settings, settings as default_settings
from farmhand.core.errors import (
    ConfigurationError,
    EmptyPlanResponseError,
    ModelUnavailableError,
    PlanAPIError,
    PlanGenerationError,
    PlanNetworkError,
)
from farmhand.models.plan import PlanProtocol, PlanRequest
from farmhand.services.plan_prompts import build_plan_prompt

logger = logging.getLogger(__name__)

RAW_ERROR_PREVIEW_CHARS = 300


def candidate_models(primary: Optional[str], fallbacks: Iterable[str]) -> List[str]:
    """Primary model first, then fallbacks, without blanks or duplicates."""
    models: List[str] = []
    for name in [primary, *fallbacks]:
        name = (name or "").strip()
        if name and name not in models:
            models.append(name)
    return models


def extract_response_text(response) -> str:
    """Concatenates every text-typed content block of a Messages API reply."""
    parts = []
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "text" and getattr(block, "text", None):
            parts.append(block.text)
    return "".join(parts).strip()


def _api_error_message(error: anthropic.APIStatusError) -> str:
    body = error.body
    if isinstance(body, dict):
        detail = body.get("error")
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        if body.get("message"):
            return str(body["message"])
    try:
        raw = error.response.text
    except httpx.ResponseNotRead:
        raw = ""
    return (raw or str(body or error.message or ""))[:RAW_ERROR_PREVIEW_CHARS]


def _is_model_not_found(status_code: int, message: str) -> bool:
    return status_code == 404 and "model" in message.lower()


class AIService:
    def __init__(self, async_client: Optional[AsyncAnthropic] = None, settings: Settings = default_settings):
        self.async_client = async_client
        self.settings = settings

    def _get_client(self) -> AsyncAnthropic:
        if self.async_client is None:
            if not self.settings.ANTHROPIC_API_KEY:
                raise ConfigurationError(
                    "Anthropic API key is missing. Set ANTHROPIC_API_KEY in your environment or .env file."
                )
            self.async_client = AsyncAnthropic(
                api_key=self.settings.ANTHROPIC_API_KEY,
                timeout=self.settings.ANTHROPIC_TIMEOUT_SECONDS,
                max_retries=self.settings.ANTHROPIC_MAX_RETRIES,
            )
        return self.async_client

    def plan_models(self) -> List[str]:
        return candidate_models(self.settings.ANTHROPIC_MODEL, self.settings.ANTHROPIC_FALLBACK_MODELS)

    async def request_plan_text(self, prompt: str, models: Optional[List[str]] = None) -> str:
        """
        Sends the prompt to each candidate model in turn until one returns text.

        Only an unknown model (404 mentioning 'model') or an empty reply moves on
        to the next candidate. Transport failures and every other API error are
        raised immediately.
        """
        client = self._get_client()
        models = candidate_models(None, models if models is not None else self.plan_models())

        last_error: Optional[PlanGenerationError] = None
        for model in models:
            logger.info("Requesting farming plan from model %s", model)
            try:
                response = await client.messages.create(
                    model=model,
                    max_tokens=self.settings.PLAN_MAX_TOKENS,
                    temperature=self.settings.PLAN_TEMPERATURE,
                    messages=[{"role": "user", "content": prompt}],
                )
            except anthropic.APIConnectionError as e:
                raise PlanNetworkError(str(e) or type(e).__name__) from e
            except anthropic.APIStatusError as e:
                message = _api_error_message(e)
                if _is_model_not_found(e.status_code, message):
                    logger.warning("Model %s not found, trying next candidate: %s", model, message)
                    last_error = ModelUnavailableError(model, message)
                    continue
                raise PlanAPIError(e.status_code, model, message) from e

            text = extract_response_text(response)
            if not text:
                logger.warning("Model %s returned no text, trying next candidate", model)
                last_error = EmptyPlanResponseError(model)
                continue
            return text

        if last_error is not None:
            raise last_error
        raise PlanGenerationError("All candidate AI models failed to generate a plan.")

    async def generate_farming_plan(
        self,
        request: PlanRequest,
        protocol: PlanProtocol = PlanProtocol.JSON,
    ) -> str:
        """Builds the plan prompt for a request and returns the model's raw reply."""
        prompt = build_plan_prompt(request, protocol)
        return await self.request_plan_text(prompt)


def get_ai_service(settings: Settings = default_settings) -> AIService:
    return AIService(settings=settings)
