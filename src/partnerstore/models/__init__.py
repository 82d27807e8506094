"""SQLModel database models for partnerstore."""

from partnerstore.models.partners import (
    IDENTITY_COLUMNS,
    TIMESTAMP_COLUMNS,
    Partner,
    PartnerBase,
)
from partnerstore.models.users import User, UserBase

__all__ = [
    "IDENTITY_COLUMNS",
    "TIMESTAMP_COLUMNS",
    "Partner",
    "PartnerBase",
    "User",
    "UserBase",
]
