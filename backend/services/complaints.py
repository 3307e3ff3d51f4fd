# backend/services/complaints.py
"""
Complaint lifecycle.

Owner-scoped operations look the complaint up with a single predicate on
id and owner, so a complaint belonging to someone else is reported exactly
like a missing one. File cleanup always runs after the authoritative record
change and never raises.
"""
import json
import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from models.complaint import Complaint, ComplaintCategory, ComplaintPriority, ComplaintStatus
from models.users import User, USER_ROLE, AUTHORITY_ROLE
from schemas.complaint import ComplaintCreate, ComplaintUpdate
from services import screening
from utils import storage
from utils.exceptions import NotFound, StorageError, Unauthorized, ValidationError

logger = logging.getLogger(__name__)


# ---- HELPERS ----
def _require_role(actor: User, role: str) -> None:
    if actor is None or actor.role != role:
        raise Unauthorized()


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid input"


def parse_coordinates(raw) -> Optional[dict]:
    """Accept the client's JSON string ``{"lat": .., "lng": ..}`` or a dict."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, dict):
        return raw
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        raise ValidationError("coordinates: must be a JSON object with lat and lng")
    if not isinstance(value, dict):
        raise ValidationError("coordinates: must be a JSON object with lat and lng")
    return value


def _enum_or_400(enum_cls, value, field: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field}: must be one of {allowed}")


def _owned(db: Session, actor: User, complaint_id: int) -> Complaint:
    _require_role(actor, USER_ROLE)
    complaint = (
        db.query(Complaint)
        .filter(Complaint.id == complaint_id, Complaint.user_id == actor.id)
        .first()
    )
    if not complaint:
        raise NotFound()
    return complaint


def _get(db: Session, complaint_id: int) -> Complaint:
    complaint = db.query(Complaint).filter(Complaint.id == complaint_id).first()
    if not complaint:
        raise NotFound()
    return complaint


def _commit(db: Session, complaint: Complaint) -> Complaint:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while saving complaint")
        raise StorageError("Could not save complaint") from e
    db.refresh(complaint)
    return complaint


def _store_all(uploads: List) -> List[storage.StoredFile]:
    stored: List[storage.StoredFile] = []
    try:
        for upload in uploads:
            stored.append(storage.save_upload(upload))
    except Exception:
        storage.delete_files(s.filename for s in stored)
        raise
    return stored


# ---- OPERATIONS ----
async def create_complaint(
    db: Session,
    actor: User,
    *,
    title: Optional[str],
    description: Optional[str],
    category: Optional[str],
    location: Optional[str],
    coordinates,
    images: Optional[List],
) -> Complaint:
    _require_role(actor, USER_ROLE)

    images = list(images or [])
    if not images:
        raise ValidationError("Image required")
    storage.check_uploads(images, settings.MAX_IMAGES_PER_REQUEST)

    fields = {
        "title": title,
        "description": description,
        "category": category or None,
        "location": location,
        "coordinates": parse_coordinates(coordinates),
    }
    try:
        data = ComplaintCreate(**{k: v for k, v in fields.items() if v is not None})
    except PydanticValidationError as e:
        raise ValidationError(_describe(e))

    stored = _store_all(images)
    try:
        # Sequential, in submission order; the first bad image vetoes the lot
        for item in stored:
            await screening.screen_image(item.path)

        complaint = Complaint(
            title=data.title,
            description=data.description,
            category=data.category,
            location=data.location,
            latitude=data.coordinates.lat,
            longitude=data.coordinates.lng,
            images=[s.filename for s in stored],
            user_id=actor.id,
        )
        db.add(complaint)
        _commit(db, complaint)
    except Exception as e:
        logger.info(f"Complaint creation by user {actor.id} aborted: {e}")
        storage.delete_files(s.filename for s in stored)
        raise

    logger.info(f"Complaint {complaint.id} created by user {actor.id} with {len(stored)} image(s)")
    return complaint


def update_complaint(
    db: Session,
    actor: User,
    complaint_id: int,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    category: Optional[str] = None,
    location: Optional[str] = None,
    coordinates=None,
    images: Optional[List] = None,
) -> Complaint:
    complaint = _owned(db, actor, complaint_id)

    images = list(images or [])
    storage.check_uploads(images, settings.MAX_IMAGES_PER_REQUEST)

    try:
        data = ComplaintUpdate(
            title=title,
            description=description,
            category=category or None,
            location=location,
            coordinates=parse_coordinates(coordinates),
        )
    except PydanticValidationError as e:
        raise ValidationError(_describe(e))

    # Update-path images are appended as-is, without screening
    stored = _store_all(images)
    try:
        if data.title is not None:
            complaint.title = data.title
        if data.description is not None:
            complaint.description = data.description
        if data.category is not None:
            complaint.category = data.category
        if data.location is not None:
            complaint.location = data.location
        if data.coordinates is not None:
            complaint.latitude = data.coordinates.lat
            complaint.longitude = data.coordinates.lng
        if stored:
            complaint.images = list(complaint.images or []) + [s.filename for s in stored]
        _commit(db, complaint)
    except Exception:
        storage.delete_files(s.filename for s in stored)
        raise

    logger.info(f"Complaint {complaint.id} updated by owner {actor.id}")
    return complaint


def delete_image(db: Session, actor: User, complaint_id: int, image_name: str) -> Complaint:
    complaint = _owned(db, actor, complaint_id)

    current = list(complaint.images or [])
    remaining = [img for img in current if img != image_name]
    if len(remaining) != len(current):
        complaint.images = remaining
        _commit(db, complaint)
        # Only files this complaint referenced are removed from disk
        storage.delete_file(image_name)
    return complaint


def delete_complaint(db: Session, actor: User, complaint_id: int) -> None:
    complaint = _owned(db, actor, complaint_id)
    images = list(complaint.images or [])

    db.delete(complaint)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while deleting complaint")
        raise StorageError("Could not delete complaint") from e

    storage.delete_files(images)
    logger.info(f"Complaint {complaint_id} deleted by owner {actor.id}, {len(images)} image(s) removed")


def list_my_complaints(db: Session, actor: User) -> List[Complaint]:
    _require_role(actor, USER_ROLE)
    return (
        db.query(Complaint)
        .filter(Complaint.user_id == actor.id)
        .order_by(Complaint.created_at.desc(), Complaint.id.desc())
        .all()
    )


def list_all_complaints(
    db: Session,
    actor: User,
    status: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
) -> List[Complaint]:
    _require_role(actor, AUTHORITY_ROLE)

    status = _enum_or_400(ComplaintStatus, status, "status")
    category = _enum_or_400(ComplaintCategory, category, "category")
    priority = _enum_or_400(ComplaintPriority, priority, "priority")

    query = db.query(Complaint)
    if status is not None:
        query = query.filter(Complaint.status == status)
    if category is not None:
        query = query.filter(Complaint.category == category)
    if priority is not None:
        query = query.filter(Complaint.priority == priority)

    return query.order_by(Complaint.created_at.desc(), Complaint.id.desc()).all()


def update_status(db: Session, actor: User, complaint_id: int, status) -> Complaint:
    _require_role(actor, AUTHORITY_ROLE)
    new_status = _enum_or_400(ComplaintStatus, status, "status")
    if new_status is None:
        raise ValidationError("status: required")

    complaint = _get(db, complaint_id)
    # Any status may follow any other; whoever sets it takes the assignment
    complaint.status = new_status
    complaint.assigned_to_id = actor.id
    _commit(db, complaint)
    logger.info(f"Complaint {complaint.id} status -> {new_status.value} by authority {actor.id}")
    return complaint


def update_priority(db: Session, actor: User, complaint_id: int, priority) -> Complaint:
    _require_role(actor, AUTHORITY_ROLE)
    new_priority = _enum_or_400(ComplaintPriority, priority, "priority")
    if new_priority is None:
        raise ValidationError("priority: required")

    complaint = _get(db, complaint_id)
    complaint.priority = new_priority
    _commit(db, complaint)
    logger.info(f"Complaint {complaint.id} priority -> {new_priority.value} by authority {actor.id}")
    return complaint
