"""
Guest capacity checks shared by RSVP, check-in, guest edits and CSV import.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.enums import RSVPStatus
from models.guest import Guest
from models.wedding import Wedding
from services.exceptions import CapacityExceededError

logger = logging.getLogger(__name__)


def lock_wedding(db: Session, wedding_id: int) -> Optional[Wedding]:
    """
    Load a wedding with a row lock held until the surrounding transaction ends.

    The row is re-read even when the wedding is already in the session, so
    callers see what was committed before the lock was granted.
    """
    return (
        db.query(Wedding)
        .filter(Wedding.id == wedding_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def confirmed_count(db: Session, wedding_id: int, exclude_guest_id: Optional[int] = None) -> int:
    query = db.query(func.count(Guest.id)).filter(
        Guest.wedding_id == wedding_id,
        Guest.rsvp_status == RSVPStatus.CONFIRMED,
    )
    if exclude_guest_id is not None:
        query = query.filter(Guest.id != exclude_guest_id)
    return query.scalar() or 0


def checked_in_count(db: Session, wedding_id: int) -> int:
    return db.query(func.count(Guest.id)).filter(
        Guest.wedding_id == wedding_id,
        Guest.checked_in.is_(True),
    ).scalar() or 0


def has_confirmation_room(db: Session, wedding: Wedding, exclude_guest_id: Optional[int] = None) -> bool:
    """Whether one more guest can be confirmed without exceeding the wedding's capacity."""
    if wedding.guest_capacity is None:
        return True
    return confirmed_count(db, wedding.id, exclude_guest_id) < wedding.guest_capacity


def ensure_confirmation_capacity(db: Session, wedding: Wedding, exclude_guest_id: Optional[int] = None) -> None:
    """
    Raise if confirming one more guest would exceed the wedding's capacity.

    Args:
        db: Database session
        wedding: Wedding (ideally loaded via :func:`lock_wedding`)
        exclude_guest_id: Guest being confirmed, so re-saving an already
            confirmed guest is not counted twice

    Raises:
        CapacityExceededError: If the wedding is full
    """
    if has_confirmation_room(db, wedding, exclude_guest_id):
        return
    logger.warning(f"Wedding {wedding.id} is at capacity ({wedding.guest_capacity} confirmed guests)")
    raise CapacityExceededError(
        f"{wedding.name} is full: all {wedding.guest_capacity} places are already confirmed."
    )
