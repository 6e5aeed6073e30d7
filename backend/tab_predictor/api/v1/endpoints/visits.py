from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from loguru import logger
from typing import List

from tab_predictor.core.config import settings
from tab_predictor.core.database import get_db
from tab_predictor.schemas.visits import VisitBatchRequest, VisitBatchResponse, VisitRecord
from tab_predictor.services.history_service import HistoryService

router = APIRouter()


@router.post("/visits", response_model=VisitBatchResponse)
async def receive_visits(request: VisitBatchRequest, db: Session = Depends(get_db)):
    """Receive a batch of visits from the history collaborator and store them"""
    try:
        history_service = HistoryService(db)
        return await history_service.store_visits(request.visits)

    except Exception as e:
        logger.error(f"Error processing visit batch: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Internal server error: {str(e)}"
        )


@router.get("/visits", response_model=List[VisitRecord])
async def get_recent_visits(
    lookback_days: int = settings.history_lookback_days,
    limit: int = settings.history_max_visits,
    db: Session = Depends(get_db),
):
    """
    Retrieve the recent window of history the miner would read

    Args:
        lookback_days: How many days back to look
        limit: Maximum number of visits to return
    """
    try:
        history_service = HistoryService(db)
        visits = await history_service.fetch_recent_visits(lookback_days=lookback_days, max_visits=limit)
        logger.info(f"Retrieved {len(visits)} visits")
        return visits

    except Exception as e:
        logger.error(f"Error retrieving visits: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to retrieve visits: {str(e)}"
        )


@router.delete("/visits")
async def clear_visits(db: Session = Depends(get_db)):
    """Delete the stored history"""
    try:
        history_service = HistoryService(db)
        deleted = await history_service.clear()
        return {"success": True, "deleted": deleted}

    except Exception as e:
        logger.error(f"Error clearing visits: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to clear visits: {str(e)}"
        )
