from sqlalchemy import Column, String, Integer, BigInteger, DateTime, Text, Float
from sqlalchemy.sql import func
from tab_predictor.core.database import Base


class VisitDBModel(Base):
    """Database model for the browsing history the miner reads from"""

    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Visit fields
    url = Column(Text, nullable=False)
    title = Column(Text, nullable=False, default="")
    domain = Column(String, nullable=False, index=True)
    visit_time = Column(BigInteger, nullable=False, index=True)  # epoch milliseconds
    time_spent = Column(Float, nullable=True)  # seconds

    # Optional context
    referrer = Column(Text, nullable=True)
    tab_id = Column(Integer, nullable=True)

    # Audit fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<VisitDBModel(id={self.id}, domain={self.domain}, visit_time={self.visit_time})>"
