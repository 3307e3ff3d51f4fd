# backend/routes/complaints.py
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, USER_ROLE, AUTHORITY_ROLE
from schemas.complaint import (
    ComplaintResponse, ImageDeleteResponse, MessageResponse, PriorityUpdate, StatusUpdate
)
from services import complaints as workflow
from utils.audit import client_ip, write_log
from utils.exceptions import ComplaintError
from utils.tokenJWT import role_required

router = APIRouter(prefix="/complaints", tags=["Complaints"])

citizen = role_required(USER_ROLE)
authority = role_required(AUTHORITY_ROLE)


def _log_failure(db: Session, request: Request, user: User, action: str, exc: ComplaintError, **meta):
    db.rollback()
    meta["error"] = exc.message
    write_log(db, user_id=user.id, action=action, status="FAIL", ip=client_ip(request), meta=meta)


# =========================
# SUBMIT (user)
# =========================
@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(citizen),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    coordinates: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
):
    try:
        complaint = await workflow.create_complaint(
            db, current_user,
            title=title, description=description, category=category,
            location=location, coordinates=coordinates, images=images,
        )
    except ComplaintError as e:
        _log_failure(db, request, current_user, "COMPLAINT_CREATE", e, reason=e.details.get("reason"))
        raise

    write_log(
        db, user_id=current_user.id, action="COMPLAINT_CREATE", ip=client_ip(request),
        meta={"id": complaint.id, "images": len(complaint.images)},
    )
    return complaint


# =========================
# OWN COMPLAINTS (user)
# =========================
@router.get("/my-complaints", response_model=List[ComplaintResponse])
def my_complaints(
    db: Session = Depends(get_db),
    current_user: User = Depends(citizen),
):
    return workflow.list_my_complaints(db, current_user)


# =========================
# ALL COMPLAINTS (authority)
# =========================
@router.get("", response_model=List[ComplaintResponse])
def list_complaints(
    status: Optional[str] = Query(None, description="Pending, In Progress or Resolved"),
    category: Optional[str] = Query(None),
    priority: Optional[str] = Query(None, description="Low, Medium or High"),
    db: Session = Depends(get_db),
    current_user: User = Depends(authority),
):
    return workflow.list_all_complaints(db, current_user, status=status, category=category, priority=priority)


# =========================
# EDIT (owner)
# =========================
@router.put("/{complaint_id}", response_model=ComplaintResponse)
def update_complaint(
    complaint_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(citizen),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    coordinates: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
):
    try:
        complaint = workflow.update_complaint(
            db, current_user, complaint_id,
            title=title, description=description, category=category,
            location=location, coordinates=coordinates, images=images,
        )
    except ComplaintError as e:
        _log_failure(db, request, current_user, "COMPLAINT_UPDATE", e, id=complaint_id)
        raise

    write_log(db, user_id=current_user.id, action="COMPLAINT_UPDATE", ip=client_ip(request), meta={"id": complaint.id})
    return complaint


@router.delete("/{complaint_id}/images/{image_name}", response_model=ImageDeleteResponse)
def delete_image(
    complaint_id: int,
    image_name: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(citizen),
):
    complaint = workflow.delete_image(db, current_user, complaint_id, image_name)
    write_log(
        db, user_id=current_user.id, action="COMPLAINT_IMAGE_DELETE", ip=client_ip(request),
        meta={"id": complaint_id, "image": image_name},
    )
    db.refresh(complaint)
    return {"message": "Image deleted successfully", "complaint": complaint}


# =========================
# TRIAGE (authority)
# =========================
@router.put("/{complaint_id}/priority", response_model=ComplaintResponse)
def update_priority(
    complaint_id: int,
    payload: PriorityUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(authority),
):
    complaint = workflow.update_priority(db, current_user, complaint_id, payload.priority)
    write_log(
        db, user_id=current_user.id, action="COMPLAINT_PRIORITY", ip=client_ip(request),
        meta={"id": complaint.id, "priority": complaint.priority.value},
    )
    db.refresh(complaint)
    return complaint


@router.put("/{complaint_id}/status", response_model=ComplaintResponse)
def update_status(
    complaint_id: int,
    payload: StatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(authority),
):
    complaint = workflow.update_status(db, current_user, complaint_id, payload.status)
    write_log(
        db, user_id=current_user.id, action="COMPLAINT_STATUS", ip=client_ip(request),
        meta={"id": complaint.id, "status": complaint.status.value},
    )
    db.refresh(complaint)
    return complaint


# =========================
# DELETE (owner)
# =========================
@router.delete("/{complaint_id}", response_model=MessageResponse)
def delete_complaint(
    complaint_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(citizen),
):
    workflow.delete_complaint(db, current_user, complaint_id)
    write_log(db, user_id=current_user.id, action="COMPLAINT_DELETE", ip=client_ip(request), meta={"id": complaint_id})
    return {"message": "Complaint deleted successfully"}
