from typing import Optional, List, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator

from tab_predictor.services.utils import extract_domain, normalize_domain


class VisitRecord(BaseModel):
    """A single browsing event supplied by the history collaborator"""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    url: str = Field(..., description="URL as observed")
    title: str = Field("", description="Page title as observed")
    domain: str = Field("", description="Normalized host (scheme and leading www. stripped)")
    visit_time: int = Field(..., description="Visit timestamp in milliseconds since epoch")
    time_spent: Optional[float] = Field(None, description="Seconds spent before the next transition")
    referrer: Optional[str] = Field(None, description="Referring URL")
    tab_id: Optional[int] = Field(None, description="Browser tab ID")

    @model_validator(mode="before")
    @classmethod
    def _derive_domain(cls, data: Any) -> Any:
        """Normalize the supplied domain, or derive it from the URL when absent"""
        if isinstance(data, dict):
            domain = normalize_domain(data.get("domain"))
            if not domain and data.get("url"):
                domain = extract_domain(data["url"])
            data = {**data, "domain": domain}
        return data

    @property
    def is_well_formed(self) -> bool:
        """Check if the record carries a usable domain"""
        return bool(self.domain)


class VisitBatchRequest(BaseModel):
    """Request structure for receiving visits from the history collaborator"""

    visits: List[VisitRecord] = Field(..., description="Visits in chronological order")


class VisitBatchResponse(BaseModel):
    """Response structure for visit ingestion"""

    success: bool = Field(..., description="True if the batch was stored successfully")
    stored_count: int = Field(0, description="Number of visits stored")
    skipped_count: int = Field(0, description="Number of malformed visits skipped")
    message: str = Field(..., description="A descriptive message about the processing result")
