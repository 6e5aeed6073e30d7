from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from loguru import logger

from tab_predictor.models.visits import VisitDBModel
from tab_predictor.schemas.visits import VisitRecord, VisitBatchResponse
from tab_predictor.services.utils import MS_PER_DAY, now_ms


class HistoryService:
    """Stores the visit log and serves the recent window the miner reads"""

    def __init__(self, db: Session):
        self.db = db

    async def store_visits(self, visits: List[VisitRecord]) -> VisitBatchResponse:
        """Store a batch of visits, skipping records without a domain"""
        logger.info(f"Storing {len(visits)} visits")

        stored_count = 0
        skipped_count = 0

        try:
            for visit in visits:
                if not visit.is_well_formed:
                    logger.debug(f"Skipping visit without domain: {visit.url!r}")
                    skipped_count += 1
                    continue

                self.db.add(
                    VisitDBModel(
                        url=visit.url,
                        title=visit.title,
                        domain=visit.domain,
                        visit_time=visit.visit_time,
                        time_spent=visit.time_spent,
                        referrer=visit.referrer,
                        tab_id=visit.tab_id,
                    )
                )
                stored_count += 1

            # Commit all visits at once
            self.db.commit()
            logger.info(f"Stored {stored_count} visits ({skipped_count} skipped)")

        except SQLAlchemyError as e:
            logger.error(f"Error storing visits: {str(e)}")
            self.db.rollback()
            return VisitBatchResponse(
                success=False,
                stored_count=0,
                skipped_count=skipped_count,
                message=f"Failed to store visits: {str(e)}",
            )

        return VisitBatchResponse(
            success=True,
            stored_count=stored_count,
            skipped_count=skipped_count,
            message=f"Successfully stored {stored_count} visits",
        )

    async def fetch_recent_visits(
        self, lookback_days: int = 7, max_visits: int = 100, now: Optional[int] = None
    ) -> List[VisitRecord]:
        """
        Fetch the recent window of history in chronological order

        Args:
            lookback_days: Only visits newer than this many days are returned
            max_visits: Keep only the most recent visits up to this count
            now: Reference time in milliseconds

        Returns:
            Visits ordered oldest first
        """
        reference_time = now if now is not None else now_ms()
        since = reference_time - max(1, lookback_days) * MS_PER_DAY

        rows = (
            self.db.query(VisitDBModel)
            .filter(VisitDBModel.visit_time >= since)
            .order_by(VisitDBModel.visit_time.desc(), VisitDBModel.id.desc())
            .limit(max(1, max_visits))
            .all()
        )

        visits = [VisitRecord.model_validate(row) for row in reversed(rows)]
        logger.debug(f"Fetched {len(visits)} visits from the last {lookback_days} days")
        return visits

    async def clear(self) -> int:
        """Delete all stored visits"""
        try:
            deleted = self.db.query(VisitDBModel).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error clearing visits: {str(e)}")
            self.db.rollback()
            raise

        logger.info(f"Cleared {deleted} visits")
        return deleted
