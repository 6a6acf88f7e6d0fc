"""
Canonical farming plan types.

Everything the generative API returns is coerced into these frozen models by
the plan normalizer; nothing downstream ever sees the raw response shape.
"""

from datetime import date
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


PHASES = ("soil", "planting", "water", "fertilizer", "protection", "harvest")
PRIORITIES = ("low", "medium", "high")
SEVERITIES = ("info", "warning", "critical")
RISK_LEVELS = ("low", "medium", "high")

DEFAULT_PHASE = "planting"
DEFAULT_PRIORITY = "medium"
DEFAULT_SEVERITY = "info"
DEFAULT_RISK_LEVEL = "medium"

WEATHER_UNAVAILABLE = "Weather data unavailable"


class PlanProtocol(str, Enum):
    """Output format the prompt asks the model for."""
    JSON = "json"
    PROSE = "prose"


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class PlanRequest(BaseModel):
    """Inputs for one plan generation. Built fresh on every generate action."""
    crop: str
    farm_area_hectares: float
    center_latitude: float
    center_longitude: float
    weather_summary: str = WEATHER_UNAVAILABLE
    request_date: date = Field(default_factory=date.today)


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    task: str
    why: str = ""
    when: str = ""
    warning: str = ""


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    phase: str = DEFAULT_PHASE
    start_day: Optional[int] = None
    end_day: Optional[int] = None
    priority: str = DEFAULT_PRIORITY
    reason: str = ""
    actions: Tuple[Action, ...]


class PlanSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    objective: str
    key_decision: str
    estimated_harvest_days: int
    expected_yield_kg: float
    risk_level: str = DEFAULT_RISK_LEVEL


class PlanAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    message: str
    severity: str = DEFAULT_SEVERITY


class StructuredPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: PlanSummary
    alerts: Tuple[PlanAlert, ...] = ()
    steps: Tuple[Step, ...]

    @property
    def action_count(self) -> int:
        return sum(len(step.actions) for step in self.steps)

    def to_json(self) -> str:
        """Serialised form stored on the planting plan document."""
        return self.model_dump_json()
