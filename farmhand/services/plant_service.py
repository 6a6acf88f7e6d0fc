"""
Farm boundary geometry and planting plan persistence.
"""

import logging
import math
from typing import List, Optional, Sequence

from farmhand.core.errors import DocumentNotFoundError
from farmhand.models.plan import WEATHER_UNAVAILABLE, Coordinate, PlanRequest, StructuredPlan
from farmhand.models.planting_plan import PlantingPlan
from farmhand.services.plan_normalizer import normalize_plan

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000
SQUARE_METRES_PER_HECTARE = 10000


def calculate_farm_area(points: Sequence[Coordinate]) -> float:
    """Area of a lat/lon polygon in hectares (spherical excess approximation)."""
    if len(points) < 3:
        return 0.0
    area = 0.0
    n = len(points)
    for i in range(n):
        j = (i + 1) % n
        lat1 = math.radians(points[i].latitude)
        lat2 = math.radians(points[j].latitude)
        lon1 = math.radians(points[i].longitude)
        lon2 = math.radians(points[j].longitude)
        area += (lon2 - lon1) * (2 + math.sin(lat1) + math.sin(lat2))
    area = abs(area) * EARTH_RADIUS_M * EARTH_RADIUS_M / 2
    return area / SQUARE_METRES_PER_HECTARE


def boundary_center(points: Sequence[Coordinate]) -> Optional[Coordinate]:
    if not points:
        return None
    return Coordinate(
        latitude=sum(p.latitude for p in points) / len(points),
        longitude=sum(p.longitude for p in points) / len(points),
    )


def order_boundary_points(points: Sequence[Coordinate]) -> List[Coordinate]:
    """Sorts taps by angle around their centre so they trace a simple polygon."""
    if len(points) < 3:
        return list(points)
    center = boundary_center(points)
    return sorted(
        points,
        key=lambda p: math.atan2(p.latitude - center.latitude, p.longitude - center.longitude),
    )


class PlantService:
    async def save_planting_plan(
        self,
        farmer_id: str,
        crop: dict,
        boundary: Sequence[Coordinate],
        center: Coordinate,
        plan: StructuredPlan,
        weather_summary: Optional[str] = None,
        farmer_name: str = "Farmer",
    ) -> PlantingPlan:
        """Stores the confirmed selections. Walkthrough progress is not part of it."""
        ordered = order_boundary_points(boundary)
        document = PlantingPlan(
            farmer_id=farmer_id,
            farmer_name=farmer_name,
            crop_type=crop["id"],
            crop_name=crop["name"],
            crop_emoji=crop.get("emoji"),
            farm_boundary=ordered,
            farm_area_hectares=calculate_farm_area(ordered),
            center_lat=center.latitude,
            center_lon=center.longitude,
            ai_plan=plan.to_json(),
            weather_summary=weather_summary,
        )
        await document.insert()
        logger.info("Saved planting plan %s for farmer %s", document.id, farmer_id)
        return document

    async def get_my_planting_plans(self, farmer_id: str) -> List[PlantingPlan]:
        return await PlantingPlan.find(PlantingPlan.farmer_id == farmer_id).sort(-PlantingPlan.created_at).to_list()

    async def mark_plan_harvested(self, plan_id) -> PlantingPlan:
        plan = await PlantingPlan.get(plan_id)
        if plan is None:
            raise DocumentNotFoundError("planting_plans", str(plan_id))
        plan.status = "harvested"
        await plan.save()
        return plan


def load_stored_plan(document: PlantingPlan) -> StructuredPlan:
    """Rebuilds the canonical plan from a stored document."""
    request = PlanRequest(
        crop=document.crop_name,
        farm_area_hectares=document.farm_area_hectares,
        center_latitude=document.center_lat,
        center_longitude=document.center_lon,
        weather_summary=document.weather_summary or WEATHER_UNAVAILABLE,
    )
    return normalize_plan(document.ai_plan, request)


def get_plant_service():
    return PlantService()
