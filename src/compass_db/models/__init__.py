"""ORM models for compass_db."""

from compass_db.models.base import Base
from compass_db.models.lead import LeadRecord

__all__ = ["Base", "LeadRecord"]
