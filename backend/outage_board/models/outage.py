from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.types import TypeDecorator

from outage_board.database import Base


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, returns timezone-aware UTC (SQLite drops tzinfo)."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Outage(Base):
    """One reported outage of a service in an area; confirmations merge into it."""
    __tablename__ = "outages"

    id = Column(String(32), primary_key=True)
    service = Column(String(40), nullable=False, index=True)
    area = Column(String(200), nullable=False)
    area_key = Column(String(200), nullable=False)  # lowercased area, for matching
    down_time = Column(UTCDateTime, nullable=False)
    up_time = Column(UTCDateTime, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    status = Column(String(10), nullable=False, default="ongoing", index=True)  # ongoing, resolved
    confirm_count = Column(Integer, nullable=False, default=1)
    confidence_level = Column(String(12), nullable=False, default="unverified")
    created_at = Column(UTCDateTime, nullable=False, index=True)

    __table_args__ = (
        Index("ix_outages_match", "service", "area_key", "status"),
    )

    def __repr__(self) -> str:
        return f"<Outage {self.id} {self.service}@{self.area} {self.status}>"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
