"""
RSVP schemas for the public, token-addressed RSVP endpoints.

These responses are shown to guests, so they expose no planner data
beyond the wedding details on the invitation.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import RSVPStatus


class RSVPSubmission(BaseModel):
    """Request schema for a guest's RSVP."""

    status: RSVPStatus = Field(..., description="confirmed or declined")
    plus_ones: int = Field(0, description="Additional people attending with the guest", ge=0)
    dietary_notes: Optional[str] = Field(None, description="Dietary requirements", max_length=1000)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: RSVPStatus) -> RSVPStatus:
        """A guest can confirm or decline; pending is not an answer."""
        if v not in RSVPStatus.responses():
            raise ValueError("status must be 'confirmed' or 'declined'")
        return v


class InvitationWedding(BaseModel):
    """Wedding details shown on the invitation"""
    name: str
    date: Optional[dt.date] = None
    location: Optional[str] = None
    description: Optional[str] = None
    rsvp_deadline: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class InvitationResponse(BaseModel):
    """Public view of a guest's invitation"""
    guest_name: str = Field(..., description="Invited guest")
    rsvp_status: RSVPStatus = Field(..., description="Current answer")
    plus_ones: int = Field(0, description="Plus-ones on record")
    dietary_notes: Optional[str] = Field(None, description="Dietary requirements on record")
    responded_at: Optional[dt.datetime] = Field(None, description="When the guest answered")
    rsvp_open: bool = Field(..., description="Whether RSVPs are still accepted")
    wedding: InvitationWedding


class RSVPResponse(BaseModel):
    """Result of an RSVP submission"""
    rsvp_status: RSVPStatus
    plus_ones: int
    dietary_notes: Optional[str] = None
    responded_at: Optional[dt.datetime] = None
    changed: bool = Field(..., description="False when the submission repeated the answer already on record")
    message: str
