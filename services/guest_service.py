"""
Guest Service

Planner-facing guest CRUD within a wedding. Every operation expects a
wedding already resolved through WeddingService.get_owned_wedding.
"""

import logging
import secrets
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.schemas.guest import GuestCreate, GuestUpdate
from core.clock import utcnow
from core.config import get_settings
from core.database import atomic
from models.enums import RSVPStatus
from models.guest import Guest
from models.wedding import Wedding
from services.capacity import lock_wedding, ensure_confirmation_capacity
from services.exceptions import NotFoundError, DuplicateGuestError, BusinessRuleError

logger = logging.getLogger(__name__)

# Guest columns a planner edit can never null out
REQUIRED_FIELDS = ("name", "rsvp_status", "plus_ones")


def generate_rsvp_token() -> str:
    """Generate an unguessable, URL-safe RSVP token."""
    return secrets.token_urlsafe(get_settings().RSVP_TOKEN_BYTES)


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


class GuestService:
    """Service for guest operations inside one wedding"""

    @staticmethod
    def get_guest(db: Session, wedding: Wedding, guest_id: int, lock: bool = False) -> Guest:
        """
        Get a guest scoped to a wedding

        A guest of another wedding is reported as not found.
        """
        query = db.query(Guest).filter(Guest.id == guest_id, Guest.wedding_id == wedding.id)
        if lock:
            query = query.with_for_update().populate_existing()
        guest = query.first()
        if not guest:
            raise NotFoundError("Guest not found")
        return guest

    @staticmethod
    def list_guests(
        db: Session,
        wedding: Wedding,
        rsvp_status: Optional[RSVPStatus] = None,
        checked_in: Optional[bool] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[Guest], int]:
        """
        List guests of a wedding

        Args:
            db: Database session
            wedding: Wedding whose guests to list
            rsvp_status: Only guests with this status
            checked_in: Only guests with this check-in state
            search: Case-insensitive substring of name or email
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (guests page, total matching count)
        """
        query = db.query(Guest).filter(Guest.wedding_id == wedding.id)
        if rsvp_status is not None:
            query = query.filter(Guest.rsvp_status == rsvp_status)
        if checked_in is not None:
            query = query.filter(Guest.checked_in.is_(checked_in))
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(Guest.name).like(pattern),
                func.lower(Guest.email).like(pattern),
            ))

        total = query.count()
        guests = query.order_by(Guest.name, Guest.id).offset(skip).limit(limit).all()
        return guests, total

    @staticmethod
    def email_taken(db: Session, wedding_id: int, email: Optional[str], exclude_guest_id: Optional[int] = None) -> bool:
        if not email:
            return False
        query = db.query(Guest.id).filter(Guest.wedding_id == wedding_id, Guest.email == email)
        if exclude_guest_id is not None:
            query = query.filter(Guest.id != exclude_guest_id)
        return query.first() is not None

    @staticmethod
    def create_guest(db: Session, wedding: Wedding, data: GuestCreate) -> Guest:
        """
        Add a guest to a wedding

        Raises:
            DuplicateGuestError: If the email is already on this wedding's list
            CapacityExceededError: If created as confirmed on a full wedding
        """
        email = normalize_email(data.email)

        with atomic(db):
            locked_wedding = lock_wedding(db, wedding.id)
            if GuestService.email_taken(db, wedding.id, email):
                raise DuplicateGuestError(f"A guest with email {email} is already on the list.")

            if data.rsvp_status == RSVPStatus.CONFIRMED:
                ensure_confirmation_capacity(db, locked_wedding)

            guest = Guest(
                wedding_id=wedding.id,
                name=data.name.strip(),
                email=email,
                phone=data.phone,
                notes=data.notes,
                rsvp_status=data.rsvp_status,
                plus_ones=data.plus_ones if data.rsvp_status != RSVPStatus.DECLINED else 0,
                dietary_notes=data.dietary_notes,
                responded_at=utcnow() if data.rsvp_status != RSVPStatus.PENDING else None,
                rsvp_token=generate_rsvp_token(),
            )
            db.add(guest)

        db.refresh(guest)
        logger.info(f"Added guest {guest.id} to wedding {wedding.id}")
        return guest

    @staticmethod
    def update_guest(db: Session, wedding: Wedding, guest_id: int, data: GuestUpdate) -> Guest:
        """
        Apply planner edits to a guest

        Check-in state is not editable here. A checked-in guest must stay
        confirmed, and moving a guest to confirmed respects capacity.
        """
        update_data = data.model_dump(exclude_unset=True)

        with atomic(db):
            locked_wedding = lock_wedding(db, wedding.id)
            guest = GuestService.get_guest(db, wedding, guest_id, lock=True)

            if "email" in update_data:
                update_data["email"] = normalize_email(update_data["email"])
                if GuestService.email_taken(db, wedding.id, update_data["email"], exclude_guest_id=guest.id):
                    raise DuplicateGuestError(
                        f"A guest with email {update_data['email']} is already on the list."
                    )

            new_status = update_data.get("rsvp_status")
            if new_status is not None and new_status != guest.rsvp_status:
                if guest.checked_in:
                    raise BusinessRuleError(
                        f"{guest.name} is already checked in and must stay confirmed."
                    )
                if new_status == RSVPStatus.CONFIRMED:
                    ensure_confirmation_capacity(db, locked_wedding, exclude_guest_id=guest.id)
                guest.responded_at = utcnow() if new_status != RSVPStatus.PENDING else None

            for field, value in update_data.items():
                if value is None and field in REQUIRED_FIELDS:
                    continue
                setattr(guest, field, value)

            if guest.rsvp_status == RSVPStatus.DECLINED:
                guest.plus_ones = 0

        db.refresh(guest)
        return guest

    @staticmethod
    def delete_guest(db: Session, wedding: Wedding, guest_id: int) -> None:
        with atomic(db):
            guest = GuestService.get_guest(db, wedding, guest_id)
            db.delete(guest)
        logger.info(f"Deleted guest {guest_id} from wedding {wedding.id}")

    @staticmethod
    def regenerate_rsvp_token(db: Session, wedding: Wedding, guest_id: int) -> Guest:
        """Issue a new RSVP token; the old link stops working immediately."""
        with atomic(db):
            guest = GuestService.get_guest(db, wedding, guest_id, lock=True)
            guest.rsvp_token = generate_rsvp_token()

        db.refresh(guest)
        logger.info(f"Regenerated RSVP token for guest {guest.id}")
        return guest
