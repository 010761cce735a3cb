from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.api.deps import get_db, require_planner, get_owned_wedding
from app.schemas.wedding import (
    WeddingCreate,
    WeddingUpdate,
    WeddingResponse,
    WeddingStats,
    DashboardResponse,
)
from models.user import User
from models.wedding import Wedding
from services.wedding_service import WeddingService

router = APIRouter()


@router.post("/", response_model=WeddingResponse, status_code=201)
async def create_wedding(
    wedding: WeddingCreate,
    user: User = Depends(require_planner),
    db: Session = Depends(get_db),
):
    """
    Create a new wedding

    Refused with 403 when the planner's subscription plan does not allow
    another wedding.
    """
    return WeddingService.create_wedding(db, user, wedding)


@router.get("/", response_model=List[WeddingResponse])
async def list_weddings(
    skip: int = 0,
    limit: int = 100,
    user: User = Depends(require_planner),
    db: Session = Depends(get_db),
):
    """
    List the planner's weddings

    Query params:
    - skip: Number of records to skip
    - limit: Maximum number of records to return
    """
    return WeddingService.list_weddings(db, user, skip=skip, limit=limit)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    user: User = Depends(require_planner),
    db: Session = Depends(get_db),
):
    """
    Multi-event dashboard

    Guest statistics for every wedding the planner manages, plus plan usage.
    """
    return WeddingService.get_dashboard(db, user)


@router.get("/{wedding_id}", response_model=WeddingResponse)
async def get_wedding(wedding: Wedding = Depends(get_owned_wedding)):
    return wedding


@router.get("/{wedding_id}/stats", response_model=WeddingStats)
async def get_wedding_stats(
    wedding: Wedding = Depends(get_owned_wedding),
    db: Session = Depends(get_db),
):
    """
    Guest statistics for one wedding
    """
    return WeddingService.get_statistics(db, [wedding])[0]


@router.patch("/{wedding_id}", response_model=WeddingResponse)
async def update_wedding(
    wedding_id: int,
    wedding_update: WeddingUpdate,
    user: User = Depends(require_planner),
    db: Session = Depends(get_db),
):
    """
    Update wedding details
    """
    return WeddingService.update_wedding(db, user, wedding_id, wedding_update)


@router.delete("/{wedding_id}", status_code=204)
async def delete_wedding(
    wedding_id: int,
    user: User = Depends(require_planner),
    db: Session = Depends(get_db),
):
    """
    Delete wedding

    Cascades to every guest of the wedding.
    """
    WeddingService.delete_wedding(db, user, wedding_id)
    return None
