"""
API key authentication for planner endpoints.

Planners authenticate with a personal API key sent in the X-API-Key
header. Keys are stored as SHA-256 hashes on the user row.
"""

import hashlib
import logging
import secrets
from typing import Optional

from fastapi import Depends, Request, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from core.database import get_db
from models.user import User

logger = logging.getLogger(__name__)

# API Key header scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def generate_api_key() -> str:
    """Generate a new random API key for a planner."""
    return secrets.token_urlsafe(32)


def hash_api_key(api_key: str) -> str:
    """Hash an API key for storage and lookup."""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def verify_api_key(db: Session, api_key: Optional[str]) -> Optional[User]:
    """
    Resolve the planner owning an API key.

    Args:
        db: Database session
        api_key: API key to verify

    Returns:
        User if the key is valid, None otherwise
    """
    if not api_key:
        return None
    return db.query(User).filter(User.api_key_hash == hash_api_key(api_key)).first()


async def require_planner(
    request: Request,
    api_key: Optional[str] = Depends(api_key_header),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that requires a valid planner API key.

    Raises:
        HTTPException 401: If API key is missing or invalid

    Example:
        @router.get("/weddings")
        async def list_weddings(user: User = Depends(require_planner)):
            ...
    """
    if not api_key:
        logger.warning(f"API key missing for {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    user = verify_api_key(db, api_key)
    if user is None:
        logger.warning(f"Invalid API key attempt for {request.method} {request.url.path}: {api_key[:8]}...")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    return user
