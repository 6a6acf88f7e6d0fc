"""
Turns whatever text the generative API returned into one StructuredPlan.

normalize_plan never raises. JSON replies are extracted and validated; prose
replies go through the heading/bullet classifier. When neither yields a single
usable action, a synthetic plan is built from line fragments of the reply or,
failing that, from a library of generic crop tasks, so the walkthrough always
has something to show.
"""

import json
import logging
import math
import re
from typing import Any, Dict, Iterable, List, Optional

from farmhand.models.plan import (
    DEFAULT_PHASE,
    DEFAULT_PRIORITY,
    DEFAULT_RISK_LEVEL,
    DEFAULT_SEVERITY,
    PHASES,
    PRIORITIES,
    RISK_LEVELS,
    SEVERITIES,
    WEATHER_UNAVAILABLE,
    Action,
    PlanAlert,
    PlanProtocol,
    PlanRequest,
    PlanSummary,
    Step,
    StructuredPlan,
)
from farmhand.services.plan_sections import infer_phase, parse_plan_sections

logger = logging.getLogger(__name__)

STEP_CADENCE_DAYS = 7
DEFAULT_HARVEST_DAYS = 90
YIELD_PER_HECTARE_KG = 1500
MIN_EXPECTED_YIELD_KG = 50
MIN_FRAGMENT_LENGTH = 12
MIN_FALLBACK_FRAGMENTS = 3
MAX_FALLBACK_FRAGMENTS = 6

PHASE_TITLES = {
    "soil": "Soil Preparation",
    "planting": "Planting",
    "water": "Water & Irrigation",
    "fertilizer": "Fertilizer",
    "protection": "Pest & Disease Control",
    "harvest": "Harvest",
}

_FENCED_BLOCK_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_FENCE_MARKER_RE = re.compile(r"```[A-Za-z]*")
_WHITESPACE_RE = re.compile(r"\s+")
_JSON_KEY_RE = re.compile(r'"[A-Za-z_ ]+"\s*:\s*')
_JSON_SYNTAX_RE = re.compile(r'[{}\[\]"]')
_LINE_PREFIX_RE = re.compile(r"^[\s,\-*#•\d.)]+")


# ── JSON extraction ────────────────────────────────────────────────────

def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def extract_plan_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Finds the plan object in a reply.

    Tries the whole text, then every fenced block, then the span between the
    first '{' and the last '}' (once more with trailing commas removed).
    Returns None when nothing parses to a JSON object.
    """
    text = (text or "").strip()
    if not text:
        return None

    data = _loads_object(text)
    if data is not None:
        return data

    for match in _FENCED_BLOCK_RE.finditer(text):
        data = _loads_object(match.group(1).strip())
        if data is not None:
            return data

    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        candidate = text[first_brace:last_brace + 1]
        data = _loads_object(candidate)
        if data is None:
            data = _loads_object(_TRAILING_COMMA_RE.sub(r"\1", candidate))
        return data
    return None


# ── Field coercion ─────────────────────────────────────────────────────

def sanitize_text(value: Any) -> str:
    """Plain single-line ASCII: no fences, backticks, exotic characters or whitespace runs."""
    if value is None or isinstance(value, (bool, dict, list)):
        return ""
    text = _FENCE_MARKER_RE.sub(" ", str(value)).replace("`", "")
    text = "".join(ch if " " <= ch <= "~" else " " for ch in text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _field(raw: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if raw.get(name) not in (None, ""):
            return raw[name]
    return None


def _choice(value: Any, allowed: Iterable[str], default: str) -> str:
    cleaned = sanitize_text(value).lower()
    return cleaned if cleaned in allowed else default


def _non_negative_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _non_negative_int(value: Any) -> Optional[int]:
    number = _non_negative_number(value)
    return int(round(number)) if number is not None else None


def default_expected_yield_kg(farm_area_hectares: float) -> float:
    return float(max(round(max(farm_area_hectares, 0) * YIELD_PER_HECTARE_KG), MIN_EXPECTED_YIELD_KG))


def _coerce_phase(value: Any) -> str:
    cleaned = sanitize_text(value).lower()
    if cleaned in PHASES:
        return cleaned
    return infer_phase(cleaned) or DEFAULT_PHASE


def _coerce_action(raw: Any) -> Optional[Action]:
    if isinstance(raw, str):
        task = sanitize_text(raw)
        return Action(task=task) if task else None
    if not isinstance(raw, dict):
        return None
    task = sanitize_text(_field(raw, "task", "action", "title"))
    if not task:
        return None
    return Action(
        task=task,
        why=sanitize_text(raw.get("why")),
        when=sanitize_text(raw.get("when")),
        warning=sanitize_text(raw.get("warning")),
    )


def _coerce_step(raw: Any, position: int) -> Optional[Step]:
    if not isinstance(raw, dict):
        return None
    actions_raw = _field(raw, "actions", "tasks") or []
    if not isinstance(actions_raw, list):
        actions_raw = [actions_raw]
    actions = tuple(a for a in (_coerce_action(item) for item in actions_raw) if a)
    if not actions:
        return None

    start_day = _non_negative_int(_field(raw, "start_day", "startDay"))
    if start_day is None:
        start_day = position * STEP_CADENCE_DAYS
    end_day = _non_negative_int(_field(raw, "end_day", "endDay"))
    if end_day is None or end_day < start_day:
        end_day = start_day + STEP_CADENCE_DAYS

    return Step(
        title=sanitize_text(raw.get("title")) or f"Step {position + 1}",
        phase=_coerce_phase(raw.get("phase")),
        start_day=start_day,
        end_day=end_day,
        priority=_choice(raw.get("priority"), PRIORITIES, DEFAULT_PRIORITY),
        reason=sanitize_text(raw.get("reason")),
        actions=actions,
    )


def _coerce_steps(raw_steps: Any) -> List[Step]:
    if not isinstance(raw_steps, list):
        return []
    steps: List[Step] = []
    for raw in raw_steps:
        step = _coerce_step(raw, len(steps))
        if step is not None:
            steps.append(step)
    return steps


def _coerce_alerts(raw_alerts: Any) -> List[PlanAlert]:
    if not isinstance(raw_alerts, list):
        return []
    alerts = []
    for raw in raw_alerts:
        if isinstance(raw, str):
            raw = {"message": raw}
        if not isinstance(raw, dict):
            continue
        title = sanitize_text(raw.get("title"))
        message = sanitize_text(raw.get("message"))
        if not title and not message:
            continue
        alerts.append(PlanAlert(
            title=title or "Notice",
            message=message or title,
            severity=_choice(raw.get("severity"), SEVERITIES, DEFAULT_SEVERITY),
        ))
    return alerts


def _build_summary(raw: Any, steps: List[Step], crop: str, farm_area_hectares: float) -> PlanSummary:
    raw = raw if isinstance(raw, dict) else {}
    last_day = max((s.end_day or 0 for s in steps), default=0)
    harvest_days = _non_negative_int(_field(raw, "estimated_harvest_days", "estimatedHarvestDays"))
    expected_yield = _non_negative_number(_field(raw, "expected_yield_kg", "expectedYieldKg"))
    return PlanSummary(
        objective=sanitize_text(raw.get("objective"))
        or f"Grow a healthy {crop} crop on ~{farm_area_hectares:.2f} hectares",
        key_decision=sanitize_text(_field(raw, "key_decision", "keyDecision"))
        or f"Prepare the soil and plant {crop} on schedule, then adjust watering to the weather",
        estimated_harvest_days=harvest_days or last_day or DEFAULT_HARVEST_DAYS,
        expected_yield_kg=expected_yield or default_expected_yield_kg(farm_area_hectares),
        risk_level=_choice(_field(raw, "risk_level", "riskLevel"), RISK_LEVELS, DEFAULT_RISK_LEVEL),
    )


# ── Prose protocol ─────────────────────────────────────────────────────

def steps_from_prose(text: str) -> List[Step]:
    steps: List[Step] = []
    for section in parse_plan_sections(text):
        actions = tuple(Action(task=t) for t in (sanitize_text(i) for i in section.action_items) if t)
        if not actions:
            continue
        title = sanitize_text(section.title)
        steps.append(Step(
            title=title or f"Step {len(steps) + 1}",
            phase=infer_phase(title) or DEFAULT_PHASE,
            reason=sanitize_text(section.content),
            actions=actions,
        ))
    return steps


# ── Fallback synthesis ─────────────────────────────────────────────────

def default_tasks(crop: str) -> List[str]:
    return [
        f"Clear weeds and loosen the soil where the {crop} will be planted",
        f"Plant {crop} at the recommended spacing and depth for your area",
        f"Water the {crop} early in the morning and keep the soil moist but not waterlogged",
        f"Apply compost or a balanced fertilizer around the {crop} plants",
        f"Inspect the {crop} every week for pests and disease and remove affected plants",
        f"Harvest the {crop} at maturity and store it in a cool, dry place",
    ]


def fallback_fragments(text: str) -> List[str]:
    """Line fragments of a reply with JSON syntax stripped, usable as ad hoc tasks."""
    fragments: List[str] = []
    for line in (text or "").replace("\r", "").split("\n"):
        line = _JSON_SYNTAX_RE.sub(" ", _JSON_KEY_RE.sub(" ", line))
        line = sanitize_text(_LINE_PREFIX_RE.sub("", line)).strip(" ,;:")
        if len(line) >= MIN_FRAGMENT_LENGTH and line not in fragments:
            fragments.append(line)
        if len(fragments) >= MAX_FALLBACK_FRAGMENTS:
            break
    return fragments


def _weather_alert(weather_summary: str) -> PlanAlert:
    summary = sanitize_text(weather_summary)
    if not summary or weather_summary == WEATHER_UNAVAILABLE:
        return PlanAlert(
            title="Weather",
            message="Weather data was unavailable for this plan. Check local conditions before field work.",
        )
    return PlanAlert(
        title="Weather",
        message=f"Current conditions: {summary}. Adjust watering and field work to the forecast.",
    )


def build_fallback_plan(raw: str, crop: str, farm_area_hectares: float, weather_summary: str) -> StructuredPlan:
    tasks = fallback_fragments(raw)
    if len(tasks) < MIN_FALLBACK_FRAGMENTS:
        tasks = default_tasks(crop)
    steps = []
    for index, task in enumerate(tasks):
        phase = PHASES[index % len(PHASES)]
        steps.append(Step(
            title=f"Step {index + 1}: {PHASE_TITLES[phase]}",
            phase=phase,
            start_day=index * STEP_CADENCE_DAYS,
            end_day=(index + 1) * STEP_CADENCE_DAYS,
            actions=(Action(task=task),),
        ))
    return StructuredPlan(
        summary=_build_summary({}, steps, crop, farm_area_hectares),
        alerts=(_weather_alert(weather_summary),),
        steps=tuple(steps),
    )


# ── Entry point ────────────────────────────────────────────────────────

def normalize_plan(
    raw: Optional[str],
    request: Optional[PlanRequest] = None,
    protocol: PlanProtocol = PlanProtocol.JSON,
) -> StructuredPlan:
    """Builds the canonical plan for a reply. Total: always at least one step with one action."""
    text = raw if isinstance(raw, str) else ""
    crop = sanitize_text(request.crop) if request else ""
    crop = crop or "crop"
    area = request.farm_area_hectares if request else 0.0
    weather = request.weather_summary if request else WEATHER_UNAVAILABLE

    if protocol == PlanProtocol.PROSE:
        steps = steps_from_prose(text)
        if steps:
            return StructuredPlan(
                summary=_build_summary({}, steps, crop, area),
                alerts=(_weather_alert(weather),),
                steps=tuple(steps),
            )
    else:
        data = extract_plan_json(text)
        if data is not None:
            steps = _coerce_steps(data.get("steps"))
            if steps:
                return StructuredPlan(
                    summary=_build_summary(data.get("summary"), steps, crop, area),
                    alerts=tuple(_coerce_alerts(data.get("alerts"))),
                    steps=tuple(steps),
                )
            logger.warning("Plan JSON had no usable steps, synthesising a fallback plan")
        else:
            logger.warning("Could not extract plan JSON from reply, synthesising a fallback plan")

    return build_fallback_plan(text, crop, area, weather)
