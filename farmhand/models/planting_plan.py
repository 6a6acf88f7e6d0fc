from datetime import datetime, timezone
from typing import List, Optional
from beanie import Document
from pydantic import Field
from farmhand.models.plan import Coordinate

class PlantingPlan(Document):
    farmer_id: str = Field(..., index=True)
    farmer_name: str = "Farmer"
    crop_type: str
    crop_name: str
    crop_emoji: Optional[str] = None
    farm_boundary: List[Coordinate] = Field(default_factory=list)
    farm_area_hectares: float = 0.0
    center_lat: float
    center_lon: float
    ai_plan: str  # JSON-serialised StructuredPlan
    weather_summary: Optional[str] = None
    status: str = "active"  # 'active' or 'harvested'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "planting_plans"
