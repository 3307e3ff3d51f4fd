# backend/routes/stats.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from pydantic import BaseModel
from typing import Dict

from database import get_db
from utils.tokenJWT import role_required
from models.users import User, AUTHORITY_ROLE
from models.complaint import Complaint, ComplaintCategory, ComplaintPriority, ComplaintStatus

router = APIRouter(
    prefix="/stats",
    tags=["Stats"]
)

# === Pydantic Response Schemas ===

class ComplaintStats(BaseModel):
    total: int
    unassigned: int
    by_status: Dict[str, int]
    by_category: Dict[str, int]
    by_priority: Dict[str, int]


def _counts(db: Session, column, enum_cls) -> Dict[str, int]:
    # Every enumerated value is reported, zero when absent
    counts = {member.value: 0 for member in enum_cls}
    for value, count in db.query(column, func.count(Complaint.id)).group_by(column).all():
        key = value.value if isinstance(value, enum_cls) else str(value)
        counts[key] = count
    return counts


# === Dashboard Summary ===

@router.get("/summary", response_model=ComplaintStats)
def get_stats_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required(AUTHORITY_ROLE))
):
    total = db.query(func.count(Complaint.id)).scalar() or 0
    unassigned = db.query(func.count(Complaint.id)).filter(Complaint.assigned_to_id.is_(None)).scalar() or 0

    return ComplaintStats(
        total=total,
        unassigned=unassigned,
        by_status=_counts(db, Complaint.status, ComplaintStatus),
        by_category=_counts(db, Complaint.category, ComplaintCategory),
        by_priority=_counts(db, Complaint.priority, ComplaintPriority),
    )
