"""
Prompt templates for farming plan generation.

Two output protocols are supported. The JSON protocol is preferred: it asks
for one object matching PLAN_JSON_SCHEMA so the normalizer can skip the
heading/bullet heuristics the prose protocol needs.
"""

from datetime import date
from typing import Optional

from farmhand.models.plan import PlanProtocol, PlanRequest

PLAN_CONTEXT = """You are an expert agricultural advisor for African farming. Generate a practical farming plan for:

Crop: {crop}
Farm Area: ~{area:.2f} hectares
Location: {lat:.4f}°, {lon:.4f}°
Current Weather: {weather}
Date: {today}
"""

PLAN_JSON_SCHEMA = """{
  "summary": {
    "objective": "one sentence goal for this season",
    "key_decision": "the single most important decision",
    "estimated_harvest_days": 90,
    "expected_yield_kg": 2500,
    "risk_level": "low | medium | high"
  },
  "alerts": [
    {"title": "short title", "message": "what to watch for", "severity": "info | warning | critical"}
  ],
  "steps": [
    {
      "title": "Soil Preparation",
      "phase": "soil | planting | water | fertilizer | protection | harvest",
      "start_day": 0,
      "end_day": 7,
      "priority": "low | medium | high",
      "reason": "why this step matters",
      "actions": [
        {"task": "imperative sentence", "why": "reason", "when": "timing", "warning": "caution or empty"}
      ]
    }
  ]
}"""

JSON_INSTRUCTIONS = """
Respond with ONLY a JSON object that matches this schema exactly. No markdown, no commentary:
{schema}

Rules:
- 5 to 8 steps ordered from soil preparation to harvest, each with 1 to 4 actions.
- Every action "task" is a short imperative sentence a small-scale farmer can do.
- Days are counted from today. Use plain ASCII text only.
- Be specific with quantities, spacing and timing."""

PROSE_INSTRUCTIONS = """
Provide a guided walkthrough with these numbered sections:
1. **Timeline** - Week-by-week schedule from soil prep to harvest
2. **Soil Preparation** - What to do before planting
3. **Planting** - Spacing, depth, density
4. **Water & Irrigation** - Requirements and schedule
5. **Fertilizer** - Type, timing, quantities
6. **Pest & Disease Management** - Common threats and prevention
7. **Expected Yield** - Estimated kg per hectare
8. **Total Days to Harvest** - Realistic estimate

Under each section list the concrete actions as "- " bullet points.
Keep advice practical and suited for small-to-medium African farmers. Be specific with numbers."""


def format_prompt_date(day: date) -> str:
    """e.g. '18 October 2026'."""
    return f"{day.day} {day:%B %Y}"


def build_plan_prompt(
    request: PlanRequest,
    protocol: PlanProtocol = PlanProtocol.JSON,
    today: Optional[date] = None,
) -> str:
    """Renders the single user message sent to the generative API.

    The farm area is passed through as given; a degenerate boundary simply
    shows up as 0.00 hectares.
    """
    context = PLAN_CONTEXT.format(
        crop=request.crop,
        area=request.farm_area_hectares,
        lat=request.center_latitude,
        lon=request.center_longitude,
        weather=request.weather_summary,
        today=format_prompt_date(today or request.request_date),
    )
    if protocol == PlanProtocol.PROSE:
        return context + PROSE_INSTRUCTIONS
    return context + JSON_INSTRUCTIONS.format(schema=PLAN_JSON_SCHEMA)
