from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.database import Base
from models.enums import SubscriptionStatus


class User(Base):
    """
    Planner account

    Owns weddings and carries the resolved subscription plan that the
    plan-limit guard reads. Billing state is written by the payment
    provider integration; this service only consumes it.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    api_key_hash = Column(String(64), unique=True, nullable=True, index=True)
    plan = Column(String(50), nullable=False, default="free", server_default="free")
    subscription_status = Column(
        Enum(
            SubscriptionStatus,
            name="subscription_status",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    weddings = relationship(
        "Wedding",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', plan='{self.plan}')>"
