"""Outage store: the only layer that queries the outages table.

Area matching is an exact comparison against the lowercased ``area_key``
column; user text never becomes a pattern. No uniqueness is enforced here.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import case, extract
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from outage_board.models.outage import Outage


def normalize_area(area: str) -> str:
    return area.strip().lower()


class OutageStore:
    def __init__(self, session: Session):
        self._db = session

    def create(self, **fields) -> Outage:
        outage = Outage(id=uuid.uuid4().hex, **fields)
        outage.area_key = normalize_area(outage.area)
        self._db.add(outage)
        self._commit()
        return outage

    def get(self, outage_id: str) -> Outage | None:
        return self._db.get(Outage, outage_id)

    def find(self, status: str | None = None) -> list[Outage]:
        q = self._db.query(Outage)
        if status:
            q = q.filter(Outage.status == status)
        return q.order_by(Outage.created_at.desc()).all()

    def find_ongoing_match(self, service: str, area: str) -> Outage | None:
        return (
            self._db.query(Outage)
            .filter(
                Outage.service == service,
                Outage.area_key == normalize_area(area),
                Outage.status == "ongoing",
            )
            .order_by(Outage.created_at.asc())
            .first()
        )

    def save(self, outage: Outage) -> Outage:
        self._db.add(outage)
        self._commit()
        return outage

    def delete(self, outage: Outage) -> None:
        self._db.delete(outage)
        self._commit()

    def count(
        self,
        status: str | None = None,
        services: Iterable[str] | None = None,
        created_since: datetime | None = None,
    ) -> int:
        q = self._db.query(func.count(Outage.id))
        if status:
            q = q.filter(Outage.status == status)
        if services is not None:
            q = q.filter(Outage.service.in_(list(services)))
        if created_since is not None:
            q = q.filter(Outage.created_at >= created_since)
        return q.scalar() or 0

    def resolved_durations(self) -> list[int]:
        rows = (
            self._db.query(Outage.duration_minutes)
            .filter(Outage.status == "resolved", Outage.duration_minutes.isnot(None))
            .all()
        )
        return [r[0] for r in rows]

    def longest_resolved(self) -> Outage | None:
        return (
            self._db.query(Outage)
            .filter(Outage.status == "resolved", Outage.duration_minutes.isnot(None))
            .order_by(Outage.duration_minutes.desc(), Outage.created_at.asc())
            .first()
        )

    def count_by(
        self,
        column,
        ongoing_subcount: bool = False,
        order: str = "desc",
        limit: int | None = None,
    ) -> list[tuple]:
        """Count records per distinct value of ``column``.

        Rows are ``(value, count)``, or ``(value, count, ongoing)`` with
        ``ongoing_subcount``. Ordered by count, ties by value ascending.
        """
        count = func.count(Outage.id).label("count")
        cols = [column, count]
        if ongoing_subcount:
            cols.append(func.sum(case((Outage.status == "ongoing", 1), else_=0)).label("ongoing"))

        q = self._db.query(*cols).group_by(column)
        q = q.order_by(count.desc() if order == "desc" else count.asc(), column.asc())
        if limit is not None:
            q = q.limit(limit)
        return [tuple(r) for r in q.all()]

    def count_by_hour(self) -> list[tuple[int, int]]:
        """Counts per UTC hour of ``down_time``, busiest hour first."""
        hour = extract("hour", Outage.down_time).label("hour")
        count = func.count(Outage.id).label("count")
        rows = (
            self._db.query(hour, count)
            .group_by(hour)
            .order_by(count.desc(), hour.asc())
            .all()
        )
        return [(int(h), c) for h, c in rows]

    def _commit(self) -> None:
        try:
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise
