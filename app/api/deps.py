"""
API Dependencies
Dependency injection functions for FastAPI endpoints
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.middleware.auth import require_planner
from core.database import get_db
from models.user import User
from models.wedding import Wedding
from services.wedding_service import WeddingService


def get_owned_wedding(
    wedding_id: int,
    user: User = Depends(require_planner),
    db: Session = Depends(get_db),
) -> Wedding:
    """
    Dependency resolving the ``wedding_id`` path parameter to a wedding
    the current planner owns

    Raises:
        NotFoundError / PermissionDeniedError (mapped to 404 / 403)
    """
    return WeddingService.get_owned_wedding(db, user, wedding_id)


__all__ = ["get_db", "require_planner", "get_owned_wedding"]
