"""
Check-in Service

Day-of check-in of confirmed guests by the planner.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from core.clock import utcnow
from core.config import get_settings, Settings
from core.database import atomic
from models.guest import Guest
from models.wedding import Wedding
from services.capacity import lock_wedding, checked_in_count
from services.exceptions import CheckInNotAllowedError, CapacityExceededError, NotFoundError
from services.guest_service import GuestService

logger = logging.getLogger(__name__)


@dataclass
class CheckInResult:
    guest: Guest
    already_checked_in: bool
    warning: Optional[str] = None


def check_in_guest(db: Session, wedding: Wedding, guest_id: int, settings: Optional[Settings] = None) -> CheckInResult:
    """
    Mark a confirmed guest as present

    Checking in a guest twice is a no-op, not an error. Only confirmed
    guests can be checked in. When the wedding has a guest capacity, the
    checked-in count may not go above it: in ``block`` mode the check-in
    is refused, in ``warn`` mode it goes through with a warning.

    Args:
        db: Database session
        wedding: Wedding owned by the current planner
        guest_id: Guest ID within that wedding
        settings: Optional settings override

    Returns:
        CheckInResult: The guest, whether it was already checked in, and
        any capacity warning

    Raises:
        NotFoundError: If the guest is not part of this wedding
        CheckInNotAllowedError: If the guest has not confirmed
        CapacityExceededError: If capacity is full in block mode
    """
    settings = settings or get_settings()
    warning = None

    with atomic(db):
        locked_wedding = lock_wedding(db, wedding.id)
        if locked_wedding is None:
            raise NotFoundError("Wedding not found")
        guest = GuestService.get_guest(db, locked_wedding, guest_id, lock=True)

        if guest.checked_in:
            logger.info(f"Guest {guest.id} already checked in at {guest.checked_in_at}")
            return CheckInResult(guest=guest, already_checked_in=True)

        if not guest.is_confirmed:
            logger.warning(f"Check-in refused for guest {guest.id}: RSVP status is {guest.rsvp_status.value}")
            raise CheckInNotAllowedError(
                f"{guest.name} cannot be checked in: RSVP status is {guest.rsvp_status.value}, not confirmed."
            )

        capacity = locked_wedding.guest_capacity
        if capacity is not None:
            arrived = checked_in_count(db, locked_wedding.id)
            if arrived + 1 > capacity:
                message = (
                    f"{locked_wedding.name} is at capacity: "
                    f"{arrived} of {capacity} guests already checked in."
                )
                if settings.CHECKIN_CAPACITY_MODE == "block":
                    logger.warning(f"Check-in refused for guest {guest.id}: {message}")
                    raise CapacityExceededError(message)
                logger.warning(f"Checking in guest {guest.id} over capacity: {message}")
                warning = message

        guest.mark_checked_in(utcnow())

    db.refresh(guest)
    logger.info(f"Checked in guest {guest.id} for wedding {wedding.id}")
    return CheckInResult(guest=guest, already_checked_in=False, warning=warning)
