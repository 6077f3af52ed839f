import hashlib
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resort.models import VisitCounter, VisitLog, utcnow
from resort.visits.schemas import VisitCounterDetail, VisitHitResponse, VisitStats

logger = logging.getLogger(__name__)

DEFAULT_KEY = "site"


def visitor_hash(client_address: Optional[str], user_agent: Optional[str]) -> str:
    """One-way fingerprint of a visitor's address and user agent"""
    raw = (client_address or "unknown") + (user_agent or "unknown")
    return hashlib.sha256(raw.encode()).hexdigest()


class VisitService:
    """Counts unique visits per key, at most once per visitor per window"""

    def __init__(self, db: Session, dedup_window: timedelta = timedelta(hours=24)):
        self.db = db
        self.dedup_window = dedup_window

    def hit(
        self,
        key: str,
        client_address: Optional[str],
        user_agent: Optional[str],
        now: Optional[datetime] = None,
    ) -> VisitHitResponse:
        now = now or utcnow()
        fingerprint = visitor_hash(client_address, user_agent)

        existing = (
            self.db.query(VisitLog.id)
            .filter(
                VisitLog.key == key,
                VisitLog.visitor_hash == fingerprint,
                VisitLog.created_at >= now - self.dedup_window,
            )
            .first()
        )
        if existing:
            return VisitHitResponse(counted=False)

        count = self._increment(key)
        self.db.add(VisitLog(key=key, visitor_hash=fingerprint, created_at=now))
        self.db.commit()

        logger.debug("Counted visit for %s (total %s)", key, count)
        return VisitHitResponse(counted=True, count=count)

    def stats(self) -> VisitStats:
        counters = self.db.query(VisitCounter).order_by(VisitCounter.key).all()
        unique_visitors = self.db.query(func.count(func.distinct(VisitLog.visitor_hash))).scalar() or 0

        return VisitStats(
            total_visits=sum(int(c.count) for c in counters),
            unique_visitors=unique_visitors,
            details=[
                VisitCounterDetail(key=c.key, count=int(c.count), last_updated=c.updated_at)
                for c in counters
            ],
        )

    def _increment(self, key: str) -> int:
        """Add one to the counter for ``key``, creating it at 1 if missing"""
        if self._bump(key) == 0:
            self.db.add(VisitCounter(key=key, count=1))
            try:
                self.db.flush()
                return 1
            except IntegrityError:
                # Created by a concurrent hit
                self.db.rollback()
                self._bump(key)

        return int(self.db.query(VisitCounter.count).filter(VisitCounter.key == key).scalar())

    def _bump(self, key: str) -> int:
        result = self.db.execute(
            update(VisitCounter)
            .where(VisitCounter.key == key)
            .values(count=VisitCounter.count + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
