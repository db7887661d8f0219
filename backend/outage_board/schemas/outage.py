from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SERVICE_TYPES: tuple[str, ...] = (
    "Electricity",
    "Water",
    "Internet",
    "Gas",
    "Transportation",
    "Healthcare",
    "Sanitation",
    "Emergency Services",
)

CRITICAL_SERVICES: tuple[str, ...] = ("Electricity", "Water", "Healthcare", "Emergency Services")

OutageStatus = Literal["ongoing", "resolved"]
ConfidenceLevel = Literal["unverified", "likely", "confirmed"]
CrisisLevel = Literal["Normal", "Moderate", "High", "Critical"]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ReportRequest(CamelModel):
    # Optional so a missing field reaches the service and gets its message
    service: str | None = None
    area: str | None = None


class OutageRead(CamelModel):
    id: str
    service: str
    area: str
    down_time: datetime
    up_time: datetime | None = None
    duration_minutes: int | None = None
    status: OutageStatus = "ongoing"
    confirm_count: int = 1
    confidence_level: ConfidenceLevel = "unverified"
    created_at: datetime


class ReportResponse(CamelModel):
    message: str
    outage: OutageRead
    is_duplicate: bool


class OutageActionResponse(CamelModel):
    message: str
    outage: OutageRead


class ServiceCount(CamelModel):
    service: str
    count: int
    ongoing: int = 0


class AreaCount(CamelModel):
    area: str
    count: int


class ConfidenceCount(CamelModel):
    level: str
    count: int


class OutageStats(CamelModel):
    total_outages: int = 0
    ongoing_outages: int = 0
    resolved_outages: int = 0
    avg_resolution_time: int = 0  # minutes
    service_breakdown: list[ServiceCount] = []
    area_breakdown: list[AreaCount] = []


class OutageInsights(CamelModel):
    recent_outages: int = 0
    most_reliable_service: str = "N/A"
    most_reliable_count: int = 0
    peak_outage_hour: int = 0  # 0-23, UTC
    confidence_levels: list[ConfidenceCount] = []


class LongestOutage(CamelModel):
    service: str
    area: str
    duration_minutes: int


class OutageImpact(CamelModel):
    critical_outages: int = 0
    total_downtime_hours: int = 0
    longest_outage: LongestOutage | None = None
    crisis_level: CrisisLevel = "Normal"
    ongoing_count: int = 0


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
