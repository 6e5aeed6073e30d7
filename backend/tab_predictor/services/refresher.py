import asyncio
from typing import Optional
from loguru import logger

from tab_predictor.services.prediction_service import PredictionService


class PredictionRefresher:
    """Background loop that re-runs prediction cycles on a fixed interval"""

    def __init__(self, service: PredictionService, interval_ms: int):
        self.service = service
        self.interval_seconds = interval_ms / 1000
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> bool:
        """Start the refresh loop; an interval of 0 leaves it off"""
        if self._running:
            return True
        if self.interval_seconds <= 0:
            logger.info("Prediction refresher disabled (interval is 0)")
            return False

        self._running = True
        self._task = asyncio.create_task(self._refresh_loop(), name="prediction_refresh")
        logger.info(f"Prediction refresher started (every {self.interval_seconds:g}s)")
        return True

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Prediction refresher stopped")

    async def _refresh_loop(self) -> None:
        while self._running:
            try:
                await self.service.run_cycle()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Prediction refresh error: {e}")
            await asyncio.sleep(self.interval_seconds)
