from datetime import datetime, timezone
from typing import List, Optional
from beanie import Document
from pydantic import BaseModel, Field

class JobApplicant(BaseModel):
    contractor_id: str
    contractor_name: str
    message: str = ""
    status: str = "pending"
    applied_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Job(Document):
    farmer_id: str = Field(..., index=True)
    farmer_name: str
    title: str
    description: str = ""
    location: Optional[str] = None
    pay: Optional[float] = None
    currency: str = "USD"
    applicants: List[JobApplicant] = Field(default_factory=list)
    accepted_contractor_id: Optional[str] = None
    status: str = "open"  # 'open', 'filled' or 'completed'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "jobs"
