"""
Guest schemas for API request/response validation.

Planner-facing create/update payloads deliberately have no check-in
fields: check-in only happens through the check-in endpoint.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import List, Optional

from models.enums import RSVPStatus


class GuestBase(BaseModel):
    """Base schema for guest data."""

    name: str = Field(..., description="Guest name", min_length=1, max_length=255)
    email: Optional[EmailStr] = Field(None, description="Guest email, unique per wedding")
    phone: Optional[str] = Field(None, description="Guest phone number", max_length=50)
    notes: Optional[str] = Field(None, description="Planner notes")

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class GuestCreate(GuestBase):
    """Request schema for guest creation."""

    rsvp_status: RSVPStatus = Field(RSVPStatus.PENDING, description="Initial RSVP status")
    plus_ones: int = Field(0, description="Plus-ones", ge=0)
    dietary_notes: Optional[str] = Field(None, description="Dietary requirements")


class GuestUpdate(BaseModel):
    """Request schema for guest update."""

    name: Optional[str] = Field(None, description="Guest name", min_length=1, max_length=255)
    email: Optional[EmailStr] = Field(None, description="Guest email, unique per wedding")
    phone: Optional[str] = Field(None, description="Guest phone number", max_length=50)
    notes: Optional[str] = Field(None, description="Planner notes")
    rsvp_status: Optional[RSVPStatus] = Field(None, description="RSVP status")
    plus_ones: Optional[int] = Field(None, description="Plus-ones", ge=0)
    dietary_notes: Optional[str] = Field(None, description="Dietary requirements")

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class GuestResponse(BaseModel):
    """Response schema for guest."""

    id: int = Field(..., description="Guest ID")
    wedding_id: int = Field(..., description="Wedding ID")
    name: str = Field(..., description="Guest name")
    email: Optional[str] = Field(None, description="Guest email")
    phone: Optional[str] = Field(None, description="Guest phone number")
    rsvp_status: RSVPStatus = Field(..., description="RSVP status")
    rsvp_token: str = Field(..., description="Token for the guest's public RSVP link")
    plus_ones: int = Field(0, description="Plus-ones")
    dietary_notes: Optional[str] = Field(None, description="Dietary requirements")
    responded_at: Optional[datetime] = Field(None, description="When the guest answered")
    checked_in: bool = Field(..., description="Whether the guest has arrived")
    checked_in_at: Optional[datetime] = Field(None, description="Arrival time")
    notes: Optional[str] = Field(None, description="Planner notes")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    class Config:
        from_attributes = True


class GuestListResponse(BaseModel):
    guests: List[GuestResponse]
    total: int


class CheckInResponse(BaseModel):
    """Response schema for a check-in attempt."""

    guest: GuestResponse
    already_checked_in: bool = Field(..., description="True when the guest was checked in before this call")
    warning: Optional[str] = Field(None, description="Capacity warning in soft capacity mode")


class GuestImportResponse(BaseModel):
    """Response schema for CSV guest import."""

    created: int = Field(..., description="Guests created")
    skipped: int = Field(..., description="Rows skipped (malformed or duplicate)")
    warnings: List[str] = Field(default_factory=list, description="Per-row warnings")
