"""partnerstore: directed partner sharing between user accounts.

Create, query, update and remove partner edges, each hydrated with
snapshots of the sharing and receiving users.
"""

__version__ = "0.1.0"

from partnerstore._database import PartnerDatabase
from partnerstore.config import PartnerStoreConfig
from partnerstore.directory import SQLUserDirectory
from partnerstore.exceptions import (
    ConstraintViolationError,
    IntegrityFaultError,
    PartnerError,
    PartnerNotFoundError,
    StorageError,
)
from partnerstore.models import Partner, PartnerBase, User, UserBase
from partnerstore.protocol import UserDirectory
from partnerstore.store import PartnerStore
from partnerstore.types import PartnerDirection, PartnerIds, PartnerInfo, UserSnapshot

__all__ = [
    "ConstraintViolationError",
    "IntegrityFaultError",
    "Partner",
    "PartnerBase",
    "PartnerDatabase",
    "PartnerDirection",
    "PartnerError",
    "PartnerIds",
    "PartnerInfo",
    "PartnerNotFoundError",
    "PartnerStore",
    "PartnerStoreConfig",
    "SQLUserDirectory",
    "StorageError",
    "User",
    "UserBase",
    "UserDirectory",
    "UserSnapshot",
    "__version__",
]
