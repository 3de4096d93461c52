"""
API Request/Response Models

Pydantic models for consistent API request and response structures.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import date, datetime
from enum import Enum


class SyncRequest(BaseModel):
    """Optional calendar-date range for a history sync (local-day semantics)."""

    model_config = ConfigDict(populate_by_name=True)

    start_date: Optional[date] = Field(
        None, alias="startDate", description="First local day to include"
    )
    end_date: Optional[date] = Field(
        None, alias="endDate", description="Last local day to include (through 23:59:59.999)"
    )


class SyncResponse(BaseModel):
    """
    Response model for the sync endpoint.
    Field names follow the wire shape the review UI already consumes.
    """

    success: bool = Field(..., description="False only for fatal-to-invocation errors")
    count: int = Field(0, description="Photos imported by this run")
    scanned: int = Field(0, description="Messages with at least one file that were examined")
    skipped: int = Field(0, description="Photos skipped because they were already imported")
    hasMore: bool = Field(
        False, description="Page cap reached before the lower bound; invoke again to continue"
    )
    errors: List[str] = Field(default_factory=list, description="Per-file failures")
    error: Optional[str] = Field(None, description="Reason the run failed")


class ReviewAction(str, Enum):
    """Reviewer decision on a pending photo."""

    APPROVE = "approve"
    REJECT = "reject"
    REDUNDANT = "redundant"


class ReviewRequest(BaseModel):
    action: ReviewAction
    store_id: Optional[str] = Field(None, description="Required when approving")
    brands: List[str] = Field(default_factory=list, description="Required when approving")
    rejection_reason: Optional[str] = Field(None, description="Required when rejecting")


class PhotoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    message_id: Optional[str] = None
    image_url: str
    raw_text: str = ""
    status: str
    store_id: Optional[str] = None
    tagged_brands: List[str] = Field(default_factory=list)
    rejection_reason: Optional[str] = None
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    store_suggestion: Optional["StoreResponse"] = Field(
        None, description="Best fuzzy match of the message text against known stores"
    )


class PhotoPage(BaseModel):
    photos: List[PhotoResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class ClearQueueResponse(BaseModel):
    success: bool
    deleted: int


class StoreCreate(BaseModel):
    name: str = Field(..., min_length=1)
    eligible_brands: List[str] = Field(default_factory=list)


class StoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    eligible_brands: List[str] = Field(default_factory=list)


class SeedStoresResponse(BaseModel):
    success: bool
    message: str
    created: int


class BrandUpsert(BaseModel):
    """Contest editor payload: name, weekly payout and the eligible stores."""

    name: str = Field(..., min_length=1)
    payout_amount: int = Field(0, ge=0)
    store_ids: Optional[List[str]] = Field(
        None, description="Eligible stores; leave unset to keep the current assignment"
    )


class BrandResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    payout_amount: int


class WeekStatus(str, Enum):
    VALID = "valid"
    PENDING = "pending"
    MISSING = "missing"


class PayoutRow(BaseModel):
    store_id: str
    store_name: str
    weeks: List[WeekStatus]
    earned: int
    max_payout: int


class PayoutReport(BaseModel):
    brand: str
    year: int
    month: int
    payout_amount: int
    rows: List[PayoutRow]
    total_earned: int


PhotoResponse.model_rebuild()
