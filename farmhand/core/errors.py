"""
Error taxonomy for plan generation, weather lookups and document access.

Only ModelUnavailableError and EmptyPlanResponseError are recoverable: the AI
service moves on to the next candidate model when it sees one of them.
"""

from typing import Optional, Tuple


class PlanGenerationError(Exception):
    """Base class for everything the plan request client can raise."""


class ConfigurationError(PlanGenerationError):
    """A required credential is missing. Raised before any request is sent."""


class PlanNetworkError(PlanGenerationError):
    """No response was received from the generative API."""

    def __init__(self, detail: str):
        super().__init__(f"Network error while contacting the AI service: {detail}")


class ModelUnavailableError(PlanGenerationError):
    """The API does not recognise the requested model (404 + 'model')."""

    def __init__(self, model: str, message: str):
        self.model = model
        super().__init__(f"Model '{model}' is not available: {message}")


class EmptyPlanResponseError(PlanGenerationError):
    """The API answered successfully but without any text."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"Model '{model}' returned an empty plan.")


class PlanAPIError(PlanGenerationError):
    """Any other non-success answer from the generative API."""

    def __init__(self, status_code: int, model: str, message: str):
        self.status_code = status_code
        self.model = model
        self.api_message = message
        super().__init__(f"AI plan generation failed (HTTP {status_code}, model {model}): {message}")


class WeatherServiceError(Exception):
    """Weather lookup failed; callers fall back to the unavailable sentinel."""


class DocumentNotFoundError(Exception):
    def __init__(self, collection: str, document_id: str):
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"{collection} document '{document_id}' not found")


_QUOTA_KEYWORDS = ("credit", "billing", "quota", "rate limit")


def describe_plan_error(exc: Optional[BaseException]) -> Tuple[str, str]:
    """
    Maps a plan generation failure onto a (title, message) pair for a single
    user-facing alert.
    """
    if isinstance(exc, ConfigurationError):
        return "AI Key Missing", str(exc)
    if isinstance(exc, PlanNetworkError):
        return "No Connection", f"{exc} Check your internet connection and try again."
    if isinstance(exc, (ModelUnavailableError, EmptyPlanResponseError)):
        return "AI Model Unavailable", f"{exc} Check the configured model name."
    if isinstance(exc, PlanAPIError):
        lowered = exc.api_message.lower()
        if exc.status_code in (402, 429) or any(k in lowered for k in _QUOTA_KEYWORDS):
            return "AI Quota Exceeded", f"{exc} Check your plan usage and billing."
        if exc.status_code in (401, 403):
            return "AI Key Rejected", f"{exc} Verify the API key."
        return "Plan Generation Failed", str(exc)
    if exc is not None and str(exc):
        return "Plan Generation Failed", str(exc)
    return "Plan Generation Failed", "Could not generate plan. Verify the AI API key, model, and internet connection."
