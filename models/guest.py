from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    Text,
    Enum,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.database import Base
from models.enums import RSVPStatus


class Guest(Base):
    """
    Guest model

    Belongs to exactly one wedding. Carries the RSVP answer (addressed
    publicly through ``rsvp_token``) and the day-of check-in state.

    ``checked_in`` is true exactly when ``checked_in_at`` is set; the
    CHECK constraint below holds the database to it and
    :meth:`mark_checked_in` is the only writer of either column.
    """
    __tablename__ = "guests"
    __table_args__ = (
        CheckConstraint(
            "(checked_in AND checked_in_at IS NOT NULL) OR "
            "(NOT checked_in AND checked_in_at IS NULL)",
            name="ck_guests_checked_in_timestamp",
        ),
        CheckConstraint("plus_ones >= 0", name="ck_guests_plus_ones_non_negative"),
        UniqueConstraint("wedding_id", "email", name="uq_guests_wedding_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(
        Integer,
        ForeignKey("weddings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    # RSVP
    rsvp_status = Column(
        Enum(
            RSVPStatus,
            name="rsvp_status",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=RSVPStatus.PENDING,
        server_default=RSVPStatus.PENDING.value,
    )
    rsvp_token = Column(String(128), unique=True, nullable=False, index=True)
    plus_ones = Column(Integer, nullable=False, default=0, server_default="0")
    dietary_notes = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    # Check-in
    checked_in = Column(Boolean, nullable=False, default=False, server_default=false())
    checked_in_at = Column(DateTime(timezone=True), nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    wedding = relationship("Wedding", back_populates="guests")

    def __repr__(self) -> str:
        return (
            f"<Guest(id={self.id}, wedding_id={self.wedding_id}, "
            f"rsvp_status='{self.rsvp_status}', checked_in={self.checked_in})>"
        )

    @property
    def is_confirmed(self) -> bool:
        return self.rsvp_status == RSVPStatus.CONFIRMED

    @property
    def has_responded(self) -> bool:
        return self.rsvp_status != RSVPStatus.PENDING

    def mark_checked_in(self, at: datetime) -> None:
        """Set the check-in flag and its timestamp together."""
        self.checked_in = True
        self.checked_in_at = at
