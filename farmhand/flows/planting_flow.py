"""
Plant screen controller: Draw Farm -> Select Crop -> AI Plan -> Review & Save.

Holds everything the screen renders. The walkthrough is owned here and reset
whenever a new plan arrives; results of a generation that the user has left
behind (navigated back, started another one, closed the screen) are dropped.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel

from farmhand.core.config import Settings, settings as default_settings
from farmhand.core.crops import get_crop
from farmhand.core.errors import PlanGenerationError, describe_plan_error
from farmhand.flows.walkthrough import WalkthroughState
from farmhand.models.plan import (
    WEATHER_UNAVAILABLE,
    Coordinate,
    PlanProtocol,
    PlanRequest,
    StructuredPlan,
)
from farmhand.models.planting_plan import PlantingPlan
from farmhand.models.planting_step import STEP_LABELS, PlantingStep
from farmhand.services.ai_service import AIService
from farmhand.services.plan_normalizer import normalize_plan
from farmhand.services.plant_service import (
    PlantService,
    boundary_center,
    calculate_farm_area,
    order_boundary_points,
)
from farmhand.services.weather_service import WeatherService

logger = logging.getLogger(__name__)

DEFAULT_REGION_CENTER = Coordinate(latitude=6.5244, longitude=3.3792)
MIN_BOUNDARY_POINTS = 3


class FlowAlert(BaseModel):
    title: str
    message: str
    return_step: Optional[PlantingStep] = None


class PlantingFlow:
    def __init__(
        self,
        ai_service: AIService,
        weather_service: WeatherService,
        plant_service: PlantService,
        settings: Settings = default_settings,
        protocol: PlanProtocol = PlanProtocol.JSON,
        region_center: Coordinate = DEFAULT_REGION_CENTER,
    ):
        self.ai_service = ai_service
        self.weather_service = weather_service
        self.plant_service = plant_service
        self.protocol = protocol
        self.region_center = region_center
        self.walkthrough = WalkthroughState(advance_delay=settings.WALKTHROUGH_ADVANCE_DELAY)
        self.step = PlantingStep.DRAW_FARM
        self.boundary: List[Coordinate] = []
        self.selected_crop: Optional[Dict[str, str]] = None
        self.plan: Optional[StructuredPlan] = None
        self.weather_summary: Optional[str] = None
        self.alert: Optional[FlowAlert] = None
        self.loading = False
        self.saving = False
        self._generation = 0

    # ── Boundary ──────────────────────────────────────────────────────

    @property
    def ordered_boundary(self) -> List[Coordinate]:
        return order_boundary_points(self.boundary)

    @property
    def farm_area(self) -> float:
        return calculate_farm_area(self.ordered_boundary)

    @property
    def farm_center(self) -> Optional[Coordinate]:
        return boundary_center(self.boundary)

    def add_point(self, latitude: float, longitude: float) -> None:
        self.boundary.append(Coordinate(latitude=latitude, longitude=longitude))

    def undo_last_point(self) -> None:
        self.boundary = self.boundary[:-1]

    def clear_boundary(self) -> None:
        self.boundary = []

    def boundary_hint(self) -> str:
        count = len(self.boundary)
        if count == 0:
            return "Tap on the map to mark your farm boundary"
        suffix = f" - Area: ~{self.farm_area:.2f} ha" if count >= MIN_BOUNDARY_POINTS else " (need at least 3)"
        return f"{count} point{'s' if count != 1 else ''} added{suffix}"

    # ── Navigation ────────────────────────────────────────────────────

    @property
    def step_label(self) -> str:
        return STEP_LABELS[self.step]

    def proceed_to_crop_selection(self) -> bool:
        if len(self.boundary) < MIN_BOUNDARY_POINTS:
            self.alert = FlowAlert(
                title="Draw Your Farm",
                message="Please tap at least 3 points on the map to outline your farm boundary.",
            )
            return False
        self.step = PlantingStep.SELECT_CROP
        return True

    def select_crop(self, crop_id: str) -> None:
        crop = get_crop(crop_id)
        if crop is None:
            raise ValueError(f"Unknown crop '{crop_id}'")
        self.selected_crop = crop

    def proceed_to_review(self) -> None:
        if self.step == PlantingStep.AI_PLAN and self.plan is not None and not self.loading:
            self.step = PlantingStep.REVIEW_SAVE

    def back(self) -> None:
        if self.step == PlantingStep.AI_PLAN:
            self._discard_pending()
        if self.step > PlantingStep.DRAW_FARM:
            self.step = PlantingStep(self.step - 1)

    def close(self) -> None:
        """The screen went away; late plan results must not land."""
        self._discard_pending()

    def acknowledge_alert(self) -> None:
        alert, self.alert = self.alert, None
        if alert is not None and alert.return_step is not None:
            self.step = alert.return_step

    def _discard_pending(self) -> None:
        self._generation += 1
        self.loading = False

    # ── Plan generation ───────────────────────────────────────────────

    def build_plan_request(self, weather_summary: str) -> PlanRequest:
        center = self.farm_center or self.region_center
        return PlanRequest(
            crop=self.selected_crop["name"],
            farm_area_hectares=self.farm_area,
            center_latitude=center.latitude,
            center_longitude=center.longitude,
            weather_summary=weather_summary,
        )

    async def generate_plan(self) -> Optional[StructuredPlan]:
        """
        Weather first (never fatal), then the AI call, then normalisation.
        Any plan generation failure becomes one alert that sends the user back
        to crop selection.
        """
        if not self.selected_crop:
            return None
        self._generation += 1
        token = self._generation
        self.step = PlantingStep.AI_PLAN
        self.loading = True
        self.alert = None

        try:
            weather_summary = WEATHER_UNAVAILABLE
            center = self.farm_center
            if center is not None:
                weather_summary = await self.weather_service.get_weather_summary(center.latitude, center.longitude)
            request = self.build_plan_request(weather_summary)
            raw_plan = await self.ai_service.generate_farming_plan(request, self.protocol)
        except PlanGenerationError as e:
            if token != self._generation:
                return None
            logger.error("Plan generation error: %s", e)
            title, message = describe_plan_error(e)
            self.alert = FlowAlert(title=title, message=message, return_step=PlantingStep.SELECT_CROP)
            return None
        finally:
            if token == self._generation:
                self.loading = False

        if token != self._generation:
            logger.info("Discarding plan for %s, the request was superseded", request.crop)
            return None

        self.plan = normalize_plan(raw_plan, request, self.protocol)
        self.weather_summary = None if weather_summary == WEATHER_UNAVAILABLE else weather_summary
        self.walkthrough.reset(self.plan)
        return self.plan

    # ── Save ──────────────────────────────────────────────────────────

    async def save_plan(self, farmer_id: str, farmer_name: Optional[str] = None) -> PlantingPlan:
        if self.plan is None or self.selected_crop is None:
            raise ValueError("Generate a plan before saving it")
        self.saving = True
        try:
            document = await self.plant_service.save_planting_plan(
                farmer_id=farmer_id,
                crop=self.selected_crop,
                boundary=self.boundary,
                center=self.farm_center or self.region_center,
                plan=self.plan,
                weather_summary=self.weather_summary,
                farmer_name=farmer_name or "Farmer",
            )
        finally:
            self.saving = False
        self.alert = FlowAlert(
            title="Plan Saved!",
            message="Your planting plan is now active. Track it in the Inventory tab.",
            return_step=PlantingStep.DRAW_FARM,
        )
        self.reset()
        return document

    def reset(self) -> None:
        self._discard_pending()
        self.step = PlantingStep.DRAW_FARM
        self.boundary = []
        self.selected_crop = None
        self.plan = None
        self.weather_summary = None
        self.walkthrough.reset(None)
