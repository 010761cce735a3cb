from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.database import Base


class Wedding(Base):
    """
    Wedding model

    A single event managed by a planner. Owns its guests: deleting a
    wedding removes every guest row with it, both through the ORM
    cascade and the ON DELETE CASCADE foreign key.
    """
    __tablename__ = "weddings"
    __table_args__ = (
        CheckConstraint(
            "guest_capacity IS NULL OR guest_capacity > 0",
            name="ck_weddings_guest_capacity_positive",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    date = Column(Date, nullable=True)
    location = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    guest_capacity = Column(Integer, nullable=True)
    rsvp_deadline = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="weddings")
    guests = relationship(
        "Guest",
        back_populates="wedding",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Guest.id",
    )

    def __repr__(self) -> str:
        return f"<Wedding(id={self.id}, name='{self.name}', user_id={self.user_id})>"
