# backend/models/complaint.py
from datetime import datetime, timezone
import enum

from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, DateTime, JSON, Enum
from sqlalchemy.orm import relationship
from database import Base


class ComplaintCategory(str, enum.Enum):
    INFRASTRUCTURE = "Infrastructure"
    SANITATION = "Sanitation"
    SECURITY = "Security"
    ELECTRICAL = "Electrical"
    WATER = "Water"
    OTHER = "Other"


class ComplaintStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class ComplaintPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# A citizen-submitted service request and its triage fields.
# Status and priority are free enumerations: any value may follow any other.
class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(
        Enum(ComplaintCategory, name="complaintcategory", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    status = Column(
        Enum(ComplaintStatus, name="complaintstatus", values_callable=_enum_values),
        nullable=False,
        default=ComplaintStatus.PENDING,
        index=True,
    )
    priority = Column(
        Enum(ComplaintPriority, name="complaintpriority", values_callable=_enum_values),
        nullable=False,
        default=ComplaintPriority.MEDIUM,
        index=True,
    )

    # Free-text address plus the optional map pin
    location = Column(String, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Ordered stored file names under the uploads directory
    images = Column(JSON, nullable=False, default=list)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Python-side timestamps keep sub-second ordering on SQLite
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id], lazy="joined")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])

    @property
    def coordinates(self):
        if self.latitude is None or self.longitude is None:
            return None
        return {"lat": self.latitude, "lng": self.longitude}
