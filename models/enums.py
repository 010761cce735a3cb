import enum


class RSVPStatus(str, enum.Enum):
    """A guest's answer to the invitation, stored as its string tag."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"

    @classmethod
    def responses(cls) -> tuple:
        """Statuses a guest can submit through the RSVP form."""
        return (cls.CONFIRMED, cls.DECLINED)


class SubscriptionStatus(str, enum.Enum):
    """Billing state of a planner's subscription as reported by the payment provider."""

    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"

    @property
    def is_active(self) -> bool:
        return self in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)
