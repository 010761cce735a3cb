from pydantic import BaseModel, Field
import datetime as dt
from typing import List, Optional


class WeddingCreate(BaseModel):
    """Request schema for wedding creation"""
    name: str = Field(..., description="Wedding name", min_length=1, max_length=255)
    date: Optional[dt.date] = Field(None, description="Wedding date")
    location: Optional[str] = Field(None, description="Venue", max_length=255)
    description: Optional[str] = Field(None, description="Free-text description")
    guest_capacity: Optional[int] = Field(None, description="Maximum confirmed guests", ge=1)
    rsvp_deadline: Optional[dt.datetime] = Field(None, description="RSVPs are refused after this moment")


class WeddingUpdate(BaseModel):
    """Request schema for wedding update"""
    name: Optional[str] = Field(None, description="Wedding name", min_length=1, max_length=255)
    date: Optional[dt.date] = Field(None, description="Wedding date")
    location: Optional[str] = Field(None, description="Venue", max_length=255)
    description: Optional[str] = Field(None, description="Free-text description")
    guest_capacity: Optional[int] = Field(None, description="Maximum confirmed guests", ge=1)
    rsvp_deadline: Optional[dt.datetime] = Field(None, description="RSVPs are refused after this moment")


class WeddingResponse(BaseModel):
    """Response schema for wedding"""
    id: int = Field(..., description="Wedding ID")
    user_id: int = Field(..., description="Owning planner ID")
    name: str = Field(..., description="Wedding name")
    date: Optional[dt.date] = Field(None, description="Wedding date")
    location: Optional[str] = Field(None, description="Venue")
    description: Optional[str] = Field(None, description="Free-text description")
    guest_capacity: Optional[int] = Field(None, description="Maximum confirmed guests")
    rsvp_deadline: Optional[dt.datetime] = Field(None, description="RSVP deadline")
    created_at: Optional[dt.datetime] = Field(None, description="Creation timestamp")

    class Config:
        from_attributes = True


class WeddingStats(BaseModel):
    """Guest statistics for one wedding"""
    wedding_id: int
    name: str
    date: Optional[dt.date] = None
    guest_capacity: Optional[int] = None
    total_guests: int = 0
    pending: int = 0
    confirmed: int = 0
    declined: int = 0
    checked_in: int = 0
    plus_ones: int = Field(0, description="Plus-ones brought by confirmed guests")
    expected_headcount: int = Field(0, description="Confirmed guests plus their plus-ones")
    remaining_capacity: Optional[int] = Field(None, description="Places left before capacity; null when uncapped")


class PlanUsage(BaseModel):
    """How much of the planner's subscription is in use"""
    plan: str
    limit: Optional[int] = Field(None, description="Maximum weddings; null means unlimited")
    used: int


class DashboardResponse(BaseModel):
    """Multi-event overview for a planner"""
    plan: PlanUsage
    weddings: List[WeddingStats]
