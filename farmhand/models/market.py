from datetime import datetime, timezone
from typing import List, Optional
from beanie import Document
from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Listing(Document):
    farmer_id: str = Field(..., index=True)
    farmer_name: str
    crop_type: str
    quantity: float
    unit: str = "kg"
    price_per_unit: float
    currency: str = "USD"
    description: str = ""
    inventory_id: Optional[str] = None
    status: str = "active"  # 'active', 'sold' or 'cancelled'
    created_at: datetime = Field(default_factory=_now)

    class Settings:
        name = "listings"


class UnitSaleContributor(BaseModel):
    farmer_id: str
    farmer_name: str
    quantity: float
    inventory_id: Optional[str] = None


class UnitSale(Document):
    """Group wholesale: several farmers pool stock until the target is reached."""
    crop_type: str
    target_quantity: float
    price_per_unit: float
    description: str = ""
    current_quantity: float = 0.0
    contributors: List[UnitSaleContributor] = Field(default_factory=list)
    status: str = "open"  # 'open', 'active' or 'completed'
    created_at: datetime = Field(default_factory=_now)

    class Settings:
        name = "unit_sales"


class Order(Document):
    buyer_id: str = Field(..., index=True)
    buyer_name: str
    listing_id: Optional[str] = None
    unit_sale_id: Optional[str] = None
    quantity: float
    total_price: float
    type: str  # 'individual' or 'wholesale'
    status: str = "confirmed"
    created_at: datetime = Field(default_factory=_now)

    class Settings:
        name = "orders"


class InventoryItem(Document):
    farmer_id: str = Field(..., index=True)
    crop_type: str
    quantity: float
    unit: str = "kg"
    planting_plan_id: Optional[str] = None
    status: str = "available"  # 'available' or 'listed'
    created_at: datetime = Field(default_factory=_now)

    class Settings:
        name = "inventory"
