"""
Subscription plan limits.

Resolves a planner's effective plan from the billing state stored on the
user row and guards wedding creation against the plan's event limit.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.config import get_settings, Settings
from models.enums import SubscriptionStatus
from models.user import User
from models.wedding import Wedding
from services.exceptions import PlanLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanLimit:
    """A planner's effective plan and how many weddings it allows (None = unlimited)."""

    plan: str
    limit: Optional[int]

    @property
    def is_unlimited(self) -> bool:
        return self.limit is None

    def allows(self, wedding_count: int) -> bool:
        """Whether a planner already owning ``wedding_count`` weddings may create one more."""
        return self.limit is None or wedding_count < self.limit


def resolve_plan(user: User, settings: Optional[Settings] = None) -> PlanLimit:
    """
    Resolve the plan a user is currently entitled to.

    Lapsed subscriptions (past due or canceled) and plan tags the
    configuration does not know fall back to the default plan.

    Args:
        user: Planner whose plan to resolve
        settings: Settings to read limits from (defaults to the cached settings)

    Returns:
        PlanLimit: Effective plan name and its event limit
    """
    settings = settings or get_settings()
    limits = settings.get_plan_limits()
    default_plan = settings.DEFAULT_PLAN.lower()

    plan = (user.plan or default_plan).lower()
    status = user.subscription_status or SubscriptionStatus.ACTIVE
    if not SubscriptionStatus(status).is_active:
        logger.info(f"User {user.id} subscription is {SubscriptionStatus(status).value}, using {default_plan} plan")
        plan = default_plan

    if plan not in limits:
        logger.warning(f"Unknown plan {plan!r} for user {user.id}, using {default_plan} plan")
        plan = default_plan

    # A default plan missing from PLAN_EVENT_LIMITS allows nothing
    return PlanLimit(plan=plan, limit=limits.get(plan, 0))


def count_weddings(db: Session, user_id: int) -> int:
    return db.query(func.count(Wedding.id)).filter(Wedding.user_id == user_id).scalar() or 0


def ensure_can_create_wedding(db: Session, user: User, settings: Optional[Settings] = None) -> PlanLimit:
    """
    Guard wedding creation against the planner's plan limit.

    Locks the user row before counting so concurrent creates for the same
    planner serialize on it. Must be called inside the transaction that
    inserts the wedding.

    Args:
        db: Database session (inside an open transaction)
        user: Planner creating the wedding
        settings: Optional settings override

    Returns:
        PlanLimit: The plan the creation was checked against

    Raises:
        PlanLimitExceededError: If one more wedding would exceed the plan limit
    """
    db.query(User.id).filter(User.id == user.id).with_for_update().first()

    plan_limit = resolve_plan(user, settings)
    if plan_limit.is_unlimited:
        return plan_limit

    wedding_count = count_weddings(db, user.id)
    if not plan_limit.allows(wedding_count):
        logger.warning(
            f"Plan limit reached for user {user.id}: {wedding_count}/{plan_limit.limit} "
            f"weddings on {plan_limit.plan} plan"
        )
        raise PlanLimitExceededError(plan_limit.plan, plan_limit.limit)

    return plan_limit
