"""
Guest endpoints.

Planner-facing guest management within one wedding: CRUD, CSV import,
check-in and RSVP link rotation. Every route resolves the wedding
through get_owned_wedding, so a planner only ever sees their own guests.
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.api.deps import get_db, get_owned_wedding
from app.schemas.guest import (
    GuestCreate,
    GuestUpdate,
    GuestResponse,
    GuestListResponse,
    CheckInResponse,
    GuestImportResponse,
)
from app.utils.validation import validate_csv_upload
from models.enums import RSVPStatus
from models.wedding import Wedding
from services.checkin_service import check_in_guest
from services.guest_import import import_guests
from services.guest_service import GuestService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=GuestListResponse)
async def list_guests(
    rsvp_status: Optional[RSVPStatus] = None,
    checked_in: Optional[bool] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    """
    List guests of a wedding

    Query params:
    - rsvp_status: pending, confirmed or declined
    - checked_in: Filter by check-in state
    - search: Substring of name or email
    - skip / limit: Pagination
    """
    guests, total = GuestService.list_guests(
        db,
        wedding,
        rsvp_status=rsvp_status,
        checked_in=checked_in,
        search=search,
        skip=skip,
        limit=limit,
    )
    return GuestListResponse(guests=guests, total=total)


@router.post("/", response_model=GuestResponse, status_code=201)
async def create_guest(
    guest: GuestCreate,
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    return GuestService.create_guest(db, wedding, guest)


@router.post("/import", response_model=GuestImportResponse)
async def import_guest_list(
    file: UploadFile = File(..., description="CSV file with a header row"),
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    """
    Import guests from a CSV file

    Malformed and duplicate rows are skipped and reported in ``warnings``;
    they never abort the rest of the import.
    """
    content = await validate_csv_upload(file)
    logger.info(f"Importing guest list {file.filename!r} ({len(content)} bytes) into wedding {wedding.id}")
    result = import_guests(db, wedding, content)
    return GuestImportResponse(created=result.created, skipped=result.skipped, warnings=result.warnings)


@router.get("/{guest_id}", response_model=GuestResponse)
async def get_guest(
    guest_id: int,
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    return GuestService.get_guest(db, wedding, guest_id)


@router.patch("/{guest_id}", response_model=GuestResponse)
async def update_guest(
    guest_id: int,
    guest_update: GuestUpdate,
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    """
    Update guest details

    Check-in state cannot be edited here; use the check-in endpoint.
    """
    return GuestService.update_guest(db, wedding, guest_id, guest_update)


@router.delete("/{guest_id}", status_code=204)
async def delete_guest(
    guest_id: int,
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    GuestService.delete_guest(db, wedding, guest_id)
    return None


@router.post("/{guest_id}/check-in", response_model=CheckInResponse)
async def check_in(
    guest_id: int,
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    """
    Check in a confirmed guest

    Repeating the call for a guest who is already checked in returns 200
    with ``already_checked_in`` set.
    """
    result = check_in_guest(db, wedding, guest_id)
    return CheckInResponse(
        guest=GuestResponse.model_validate(result.guest),
        already_checked_in=result.already_checked_in,
        warning=result.warning,
    )


@router.post("/{guest_id}/rsvp-token", response_model=GuestResponse)
async def regenerate_rsvp_token(
    guest_id: int,
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    """
    Issue a new RSVP link for a guest; the previous link stops working
    """
    return GuestService.regenerate_rsvp_token(db, wedding, guest_id)
