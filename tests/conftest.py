"""Shared fixtures for the tab predictor tests"""

from typing import Callable, List, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tab_predictor.api.v1.api import api_router
from tab_predictor.core.database import Base, get_db
from tab_predictor.models.visits import VisitDBModel  # noqa: F401
from tab_predictor.schemas.predictions import PredictorConfig
from tab_predictor.schemas.visits import VisitRecord
from tab_predictor.services.prediction_service import PredictionService

NOW = 1_700_000_000_000
MINUTE = 60_000
DAY = 24 * 60 * MINUTE


@pytest.fixture
def make_visits() -> Callable[..., List[VisitRecord]]:
    """Build one visit per domain, a minute apart, ending at `end` (default NOW)"""

    def _make(domains: List[str], end: Optional[int] = None, step: int = MINUTE) -> List[VisitRecord]:
        end = NOW if end is None else end
        start = end - step * (len(domains) - 1)
        return [
            VisitRecord(
                url=f"https://{domain}/",
                title=domain.split(".")[0].title(),
                domain=domain,
                visit_time=start + index * step,
            )
            for index, domain in enumerate(domains)
        ]

    return _make


@pytest.fixture
def session_factory():
    """In-memory SQLite shared by every session of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def prediction_service(session_factory) -> PredictionService:
    return PredictionService(PredictorConfig(), session_factory=session_factory)


@pytest.fixture
def client(session_factory, prediction_service):
    """API client wired to the in-memory database"""
    test_app = FastAPI()
    test_app.include_router(api_router, prefix="/api/v1")
    test_app.state.prediction_service = prediction_service

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    test_app.dependency_overrides[get_db] = override_get_db
    return TestClient(test_app)
