"""Outage lifecycle and aggregate views.

A report either creates a new ongoing outage or confirms the matching one
(same service, same area ignoring case). Restoring resolves an outage once and
fixes its duration. Stats, insights and impact summarize the whole table.
"""

import hmac
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from outage_board.config import Settings
from outage_board.errors import InternalError, InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
from outage_board.models.outage import Outage, utcnow
from outage_board.schemas.outage import (
    CRITICAL_SERVICES,
    SERVICE_TYPES,
    AreaCount,
    ConfidenceCount,
    LongestOutage,
    OutageImpact,
    OutageInsights,
    OutageRead,
    OutageStats,
    ServiceCount,
)
from outage_board.services.levels import confidence_level, crisis_level, round_half_up
from outage_board.services.outage_store import OutageStore

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)
TOP_AREAS = 10


@dataclass
class ReportResult:
    outage: OutageRead
    is_duplicate: bool

    @property
    def message(self) -> str:
        return "Outage confirmation recorded" if self.is_duplicate else "New outage reported"


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("Store failure while %s: %s", action, e)
        raise InternalError("Server error") from e


class OutageService:
    def __init__(
        self,
        store: OutageStore,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.settings = settings
        self.clock = clock

    def report_or_confirm(self, service: str | None, area: str | None) -> ReportResult:
        service = (service or "").strip()
        area = (area or "").strip()
        if not service or not area:
            raise ValidationError("Service and area are required")
        if service not in SERVICE_TYPES:
            raise ValidationError(f"Invalid service: {service}")

        with _store_errors("reporting outage"):
            existing = self.store.find_ongoing_match(service, area)
            if existing is not None:
                existing.confirm_count += 1
                existing.confidence_level = confidence_level(existing.confirm_count)
                self.store.save(existing)
                logger.info(
                    "Confirmed outage %s (%s @ %s): %d reports, %s",
                    existing.id, service, existing.area,
                    existing.confirm_count, existing.confidence_level,
                )
                return ReportResult(outage=OutageRead.model_validate(existing), is_duplicate=True)

            now = self.clock()
            outage = self.store.create(
                service=service,
                area=area,
                down_time=now,
                created_at=now,
                status="ongoing",
                confirm_count=1,
                confidence_level=confidence_level(1),
            )
            logger.info("New outage %s reported: %s @ %s", outage.id, service, area)
            return ReportResult(outage=OutageRead.model_validate(outage), is_duplicate=False)

    def list_outages(self, status: str | None = None) -> list[OutageRead]:
        with _store_errors("listing outages"):
            return [OutageRead.model_validate(o) for o in self.store.find(status)]

    def restore(self, outage_id: str) -> OutageRead:
        with _store_errors("restoring outage"):
            outage = self._get_or_404(outage_id)
            if outage.status == "resolved":
                raise InvalidStateError("Outage already resolved")

            up_time = self.clock()
            elapsed_minutes = (up_time - outage.down_time).total_seconds() / 60
            outage.up_time = up_time
            outage.duration_minutes = round_half_up(elapsed_minutes)
            outage.status = "resolved"
            self.store.save(outage)

        logger.info("Outage %s restored after %d min", outage.id, outage.duration_minutes)
        return OutageRead.model_validate(outage)

    def stats(self) -> OutageStats:
        with _store_errors("computing stats"):
            total = self.store.count()
            ongoing = self.store.count(status="ongoing")
            resolved = self.store.count(status="resolved")
            durations = self.store.resolved_durations()
            by_service = self.store.count_by(Outage.service, ongoing_subcount=True)
            by_area = self.store.count_by(Outage.area, limit=TOP_AREAS)

        avg = round_half_up(sum(durations) / len(durations)) if durations else 0
        return OutageStats(
            total_outages=total,
            ongoing_outages=ongoing,
            resolved_outages=resolved,
            avg_resolution_time=avg,
            service_breakdown=[
                ServiceCount(service=s, count=c, ongoing=o or 0) for s, c, o in by_service
            ],
            area_breakdown=[AreaCount(area=a, count=c) for a, c in by_area],
        )

    def insights(self) -> OutageInsights:
        since = self.clock() - RECENT_WINDOW
        with _store_errors("computing insights"):
            recent = self.store.count(created_since=since)
            least = self.store.count_by(Outage.service, order="asc", limit=1)
            hours = self.store.count_by_hour()
            levels = self.store.count_by(Outage.confidence_level)

        most_reliable, most_reliable_count = least[0] if least else ("N/A", 0)
        return OutageInsights(
            recent_outages=recent,
            most_reliable_service=most_reliable,
            most_reliable_count=most_reliable_count,
            peak_outage_hour=hours[0][0] if hours else 0,
            confidence_levels=[ConfidenceCount(level=lvl, count=c) for lvl, c in levels],
        )

    def impact(self) -> OutageImpact:
        with _store_errors("computing impact"):
            critical = self.store.count(status="ongoing", services=CRITICAL_SERVICES)
            durations = self.store.resolved_durations()
            longest = self.store.longest_resolved()
            ongoing = self.store.count(status="ongoing")

        return OutageImpact(
            critical_outages=critical,
            total_downtime_hours=round_half_up(sum(durations) / 60) if durations else 0,
            longest_outage=LongestOutage(
                service=longest.service,
                area=longest.area,
                duration_minutes=longest.duration_minutes,
            ) if longest else None,
            crisis_level=crisis_level(ongoing),
            ongoing_count=ongoing,
        )

    def delete_outage(self, outage_id: str, caller_password: str | None) -> OutageRead:
        if not self._is_admin(caller_password):
            logger.warning("Rejected delete of outage %s: bad admin password", outage_id)
            raise UnauthorizedError("Unauthorized")

        with _store_errors("deleting outage"):
            outage = self._get_or_404(outage_id)
            removed = OutageRead.model_validate(outage)
            self.store.delete(outage)

        logger.info("Outage %s deleted by admin", outage_id)
        return removed

    def _is_admin(self, caller_password: str | None) -> bool:
        secret = self.settings.admin_password
        if not secret or not caller_password:
            return False
        return hmac.compare_digest(caller_password.encode("utf-8"), secret.encode("utf-8"))

    def _get_or_404(self, outage_id: str) -> Outage:
        outage = self.store.get(outage_id)
        if outage is None:
            raise NotFoundError("Outage not found")
        return outage
