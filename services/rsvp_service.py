"""
RSVP Service

Public, token-addressed RSVP workflow. A guest reaches it through the
link carrying their ``rsvp_token``; no planner session is involved.

Submissions are idempotent: repeating the answer already on record is a
no-op, though new plus-ones or dietary notes sent with it are saved.
Changing an answer is refused unless ALLOW_RSVP_CHANGES is set.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from app.schemas.rsvp import RSVPSubmission
from core.clock import utcnow, as_utc
from core.config import get_settings, Settings
from core.database import atomic
from models.enums import RSVPStatus
from models.guest import Guest
from models.wedding import Wedding
from services.capacity import lock_wedding, ensure_confirmation_capacity
from services.exceptions import (
    NotFoundError,
    InvalidInputError,
    RSVPDeadlinePassedError,
    RSVPAlreadySubmittedError,
)

logger = logging.getLogger(__name__)


@dataclass
class RSVPResult:
    """Outcome of an RSVP submission"""

    guest: Guest
    changed: bool
    details_updated: bool = False

    @property
    def message(self) -> str:
        if not self.changed:
            return "Your response was already recorded."
        if self.details_updated:
            return "Your RSVP details have been updated."
        if self.guest.rsvp_status == RSVPStatus.CONFIRMED:
            return "Thank you! We look forward to celebrating with you."
        return "Thank you for letting us know. You will be missed."


def find_guest_by_token(db: Session, token: str, lock: bool = False) -> Guest:
    """
    Look up a guest by RSVP token

    Raises:
        NotFoundError: If no guest carries this token
    """
    query = db.query(Guest).filter(Guest.rsvp_token == token)
    if lock:
        query = query.with_for_update().populate_existing()
    guest = query.first()
    if not guest:
        raise NotFoundError("Invitation not found")
    return guest


def rsvp_is_open(wedding: Wedding) -> bool:
    deadline = as_utc(wedding.rsvp_deadline)
    return deadline is None or utcnow() <= deadline


def get_invitation(db: Session, token: str) -> Guest:
    """Load the guest (and through it the wedding) behind an RSVP link."""
    return find_guest_by_token(db, token)


def submit_rsvp(db: Session, token: str, submission: RSVPSubmission, settings: Optional[Settings] = None) -> RSVPResult:
    """
    Record a guest's RSVP

    Runs in one transaction holding row locks on the wedding and the
    guest, so the capacity check and the write cannot interleave with a
    concurrent submission. Both rows are re-read once locked.

    Repeating the answer on record with different plus-ones or dietary
    notes updates those details without counting as a change of answer.

    Args:
        db: Database session
        token: The guest's RSVP token
        submission: Validated RSVP data
        settings: Optional settings override

    Returns:
        RSVPResult: The guest and whether anything was written

    Raises:
        NotFoundError: Unknown token
        RSVPDeadlinePassedError: The wedding's RSVP deadline has passed
        RSVPAlreadySubmittedError: A different answer is already on record
        CapacityExceededError: Confirming would exceed the wedding's capacity
        InvalidInputError: Too many plus-ones or a non-answer status
    """
    settings = settings or get_settings()

    with atomic(db):
        wedding_id = db.query(Guest.wedding_id).filter(Guest.rsvp_token == token).scalar()
        if wedding_id is None:
            raise NotFoundError("Invitation not found")
        wedding = lock_wedding(db, wedding_id)
        guest = find_guest_by_token(db, token, lock=True)

        if submission.status not in RSVPStatus.responses():
            raise InvalidInputError("An RSVP must either confirm or decline.")
        if submission.plus_ones > settings.RSVP_MAX_PLUS_ONES:
            raise InvalidInputError(
                f"You can bring at most {settings.RSVP_MAX_PLUS_ONES} additional guests."
            )

        if not rsvp_is_open(wedding):
            deadline = as_utc(wedding.rsvp_deadline)
            logger.warning(f"RSVP for guest {guest.id} refused: deadline {deadline.isoformat()} passed")
            raise RSVPDeadlinePassedError(
                f"RSVPs for {wedding.name} closed on {deadline:%B %d, %Y}. "
                f"Please contact the couple directly."
            )

        plus_ones = submission.plus_ones if submission.status == RSVPStatus.CONFIRMED else 0

        if guest.has_responded and guest.rsvp_status == submission.status:
            if guest.plus_ones == plus_ones and guest.dietary_notes == submission.dietary_notes:
                logger.info(f"Repeated RSVP for guest {guest.id} ({submission.status.value}), nothing to change")
                return RSVPResult(guest=guest, changed=False)
            if guest.checked_in:
                raise RSVPAlreadySubmittedError("You have already been checked in; your RSVP can no longer change.")

            guest.plus_ones = plus_ones
            guest.dietary_notes = submission.dietary_notes
            logger.info(f"Guest {guest.id} updated RSVP details ({submission.status.value})")
            return RSVPResult(guest=guest, changed=True, details_updated=True)

        if guest.has_responded:
            if guest.checked_in:
                raise RSVPAlreadySubmittedError("You have already been checked in; your RSVP can no longer change.")
            if not settings.ALLOW_RSVP_CHANGES:
                logger.warning(
                    f"RSVP change for guest {guest.id} refused: "
                    f"{guest.rsvp_status.value} -> {submission.status.value}"
                )
                raise RSVPAlreadySubmittedError(
                    f"Your RSVP is already recorded as {guest.rsvp_status.value}. "
                    f"Please contact the couple to change it."
                )

        if submission.status == RSVPStatus.CONFIRMED:
            ensure_confirmation_capacity(db, wedding, exclude_guest_id=guest.id)

        guest.rsvp_status = submission.status
        guest.plus_ones = plus_ones
        guest.dietary_notes = submission.dietary_notes
        guest.responded_at = utcnow()

    db.refresh(guest)
    logger.info(f"Guest {guest.id} RSVP recorded as {guest.rsvp_status.value}")
    return RSVPResult(guest=guest, changed=True)
