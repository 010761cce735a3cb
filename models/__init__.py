from .enums import RSVPStatus, SubscriptionStatus
from .user import User
from .wedding import Wedding
from .guest import Guest

__all__ = ['RSVPStatus', 'SubscriptionStatus', 'User', 'Wedding', 'Guest']
