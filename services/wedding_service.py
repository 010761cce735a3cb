"""
Wedding Service

Planner-facing wedding CRUD, ownership checks and the guest statistics
behind the per-wedding stats and the multi-event dashboard.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.schemas.wedding import WeddingCreate, WeddingUpdate, WeddingStats, PlanUsage, DashboardResponse
from core.database import atomic
from models.enums import RSVPStatus
from models.guest import Guest
from models.user import User
from models.wedding import Wedding
from services.capacity import confirmed_count
from services.exceptions import NotFoundError, PermissionDeniedError, InvalidInputError
from services.plan_limits import ensure_can_create_wedding, resolve_plan, count_weddings

logger = logging.getLogger(__name__)


class WeddingService:
    """Service for wedding operations scoped to the owning planner"""

    @staticmethod
    def create_wedding(db: Session, user: User, data: WeddingCreate) -> Wedding:
        """
        Create a wedding after checking the planner's plan limit

        The limit check and the insert share one transaction.

        Raises:
            PlanLimitExceededError: If the plan does not allow another wedding
        """
        with atomic(db):
            plan_limit = ensure_can_create_wedding(db, user)
            wedding = Wedding(user_id=user.id, **data.model_dump())
            db.add(wedding)

        db.refresh(wedding)
        logger.info(f"Created wedding {wedding.id} for user {user.id} ({plan_limit.plan} plan)")
        return wedding

    @staticmethod
    def get_owned_wedding(db: Session, user: User, wedding_id: int, lock: bool = False) -> Wedding:
        """
        Get a wedding the planner owns

        Args:
            db: Database session
            user: Current planner
            wedding_id: Wedding ID
            lock: Take a row lock (for read-modify-write on capacity)

        Returns:
            Wedding

        Raises:
            NotFoundError: If the wedding does not exist
            PermissionDeniedError: If it belongs to another planner
        """
        query = db.query(Wedding).filter(Wedding.id == wedding_id)
        if lock:
            query = query.with_for_update().populate_existing()
        wedding = query.first()

        if not wedding:
            raise NotFoundError("Wedding not found")
        if wedding.user_id != user.id:
            logger.warning(f"User {user.id} denied access to wedding {wedding_id}")
            raise PermissionDeniedError("You do not have access to this wedding")
        return wedding

    @staticmethod
    def list_weddings(db: Session, user: User, skip: int = 0, limit: int = 100) -> List[Wedding]:
        return (
            db.query(Wedding)
            .filter(Wedding.user_id == user.id)
            .order_by(Wedding.date.is_(None), Wedding.date, Wedding.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    @staticmethod
    def update_wedding(db: Session, user: User, wedding_id: int, data: WeddingUpdate) -> Wedding:
        """
        Update wedding details

        Lowering guest_capacity below the number of already confirmed
        guests is refused.
        """
        update_data = data.model_dump(exclude_unset=True)

        with atomic(db):
            wedding = WeddingService.get_owned_wedding(db, user, wedding_id, lock=True)

            new_capacity = update_data.get("guest_capacity")
            if new_capacity is not None:
                confirmed = confirmed_count(db, wedding.id)
                if new_capacity < confirmed:
                    raise InvalidInputError(
                        f"Guest capacity cannot be lower than the {confirmed} guests already confirmed."
                    )

            for field, value in update_data.items():
                if field == "name" and value is None:
                    continue
                setattr(wedding, field, value)

        db.refresh(wedding)
        return wedding

    @staticmethod
    def delete_wedding(db: Session, user: User, wedding_id: int) -> None:
        """Delete a wedding together with all of its guests"""
        with atomic(db):
            wedding = WeddingService.get_owned_wedding(db, user, wedding_id)
            db.delete(wedding)
        logger.info(f"Deleted wedding {wedding_id} for user {user.id}")

    @staticmethod
    def get_statistics(db: Session, weddings: List[Wedding]) -> List[WeddingStats]:
        """
        Compute guest statistics for several weddings with one grouped query

        Args:
            db: Database session
            weddings: Weddings to summarize

        Returns:
            List of WeddingStats in the same order as ``weddings``
        """
        if not weddings:
            return []

        wedding_ids = [wedding.id for wedding in weddings]
        counts: Dict[int, Dict[str, int]] = defaultdict(lambda: defaultdict(int))

        rows = (
            db.query(
                Guest.wedding_id,
                Guest.rsvp_status,
                Guest.checked_in,
                func.count(Guest.id),
                func.coalesce(func.sum(Guest.plus_ones), 0),
            )
            .filter(Guest.wedding_id.in_(wedding_ids))
            .group_by(Guest.wedding_id, Guest.rsvp_status, Guest.checked_in)
            .all()
        )

        for wedding_id, status, checked_in, guest_count, plus_ones in rows:
            bucket = counts[wedding_id]
            bucket[RSVPStatus(status).value] += guest_count
            bucket["total"] += guest_count
            if checked_in:
                bucket["checked_in"] += guest_count
            if RSVPStatus(status) == RSVPStatus.CONFIRMED:
                bucket["plus_ones"] += int(plus_ones)

        stats = []
        for wedding in weddings:
            bucket = counts[wedding.id]
            confirmed = bucket[RSVPStatus.CONFIRMED.value]
            remaining: Optional[int] = None
            if wedding.guest_capacity is not None:
                remaining = max(wedding.guest_capacity - confirmed, 0)

            stats.append(WeddingStats(
                wedding_id=wedding.id,
                name=wedding.name,
                date=wedding.date,
                guest_capacity=wedding.guest_capacity,
                total_guests=bucket["total"],
                pending=bucket[RSVPStatus.PENDING.value],
                confirmed=confirmed,
                declined=bucket[RSVPStatus.DECLINED.value],
                checked_in=bucket["checked_in"],
                plus_ones=bucket["plus_ones"],
                expected_headcount=confirmed + bucket["plus_ones"],
                remaining_capacity=remaining,
            ))
        return stats

    @staticmethod
    def get_dashboard(db: Session, user: User) -> DashboardResponse:
        """
        Multi-event overview: statistics for every wedding the planner
        manages plus current plan usage
        """
        weddings = WeddingService.list_weddings(db, user, limit=1000)
        plan_limit = resolve_plan(user)

        return DashboardResponse(
            plan=PlanUsage(
                plan=plan_limit.plan,
                limit=plan_limit.limit,
                used=count_weddings(db, user.id),
            ),
            weddings=WeddingService.get_statistics(db, weddings),
        )
