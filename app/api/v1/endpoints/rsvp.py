"""
Public RSVP endpoints.

Addressed only by the guest's RSVP token; no API key is required.
Both routes are rate limited per client address.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.middleware.rate_limit import limiter, RSVP_RATE_LIMIT
from app.schemas.rsvp import RSVPSubmission, InvitationResponse, InvitationWedding, RSVPResponse
from services.rsvp_service import get_invitation, rsvp_is_open, submit_rsvp

router = APIRouter()


@router.get("/{token}", response_model=InvitationResponse)
@limiter.limit(RSVP_RATE_LIMIT)
async def view_invitation(
    request: Request,
    token: str,
    db: Session = Depends(get_db),
):
    """
    Show the invitation behind an RSVP link

    Returns the guest's current answer and whether RSVPs are still open.
    """
    guest = get_invitation(db, token)
    wedding = guest.wedding
    return InvitationResponse(
        guest_name=guest.name,
        rsvp_status=guest.rsvp_status,
        plus_ones=guest.plus_ones,
        dietary_notes=guest.dietary_notes,
        responded_at=guest.responded_at,
        rsvp_open=rsvp_is_open(wedding),
        wedding=InvitationWedding.model_validate(wedding),
    )


@router.post("/{token}", response_model=RSVPResponse)
@limiter.limit(RSVP_RATE_LIMIT)
async def respond(
    request: Request,
    token: str,
    submission: RSVPSubmission,
    db: Session = Depends(get_db),
):
    """
    Confirm or decline an invitation

    Submitting the answer already on record is a no-op (``changed`` is
    false). Changing a recorded answer is refused with 409.
    """
    result = submit_rsvp(db, token, submission)
    guest = result.guest
    return RSVPResponse(
        rsvp_status=guest.rsvp_status,
        plus_ones=guest.plus_ones,
        dietary_notes=guest.dietary_notes,
        responded_at=guest.responded_at,
        changed=result.changed,
        message=result.message,
    )
