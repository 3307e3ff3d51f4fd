# backend/utils/exceptions.py
"""
Complaint workflow errors.

Each error carries the HTTP status it is rendered with; the handler
registered in main.py turns them into ``{"detail": ...}`` responses,
the same body shape ``HTTPException`` produces.
"""
from typing import Any, Dict, Optional

from fastapi import status


class ComplaintError(Exception):
    """Base class for errors raised by the complaint workflow"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message}
        body.update(self.details)
        return body


class ValidationError(ComplaintError):
    """Missing or malformed input"""

    status_code = status.HTTP_400_BAD_REQUEST


class ScreeningRejected(ComplaintError):
    """An uploaded image failed the AI-generated or similarity check"""

    status_code = status.HTTP_400_BAD_REQUEST

    AI_GENERATED = "ai_generated"
    PLAGIARIZED = "plagiarized"

    MESSAGES = {
        AI_GENERATED: "This image appears to be AI-generated. Please upload a real photo.",
        PLAGIARIZED: "This image seems taken from the internet. Please upload an original image.",
    }

    def __init__(self, reason: str, filename: Optional[str] = None):
        self.reason = reason
        self.filename = filename
        super().__init__(self.MESSAGES.get(reason, "Image rejected"), details={"reason": reason})


class ScreeningUnavailable(ComplaintError):
    """The screening service could not be reached and the policy is fail-closed"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Image screening is unavailable, please try again later"):
        super().__init__(message)


class NotFound(ComplaintError):
    """Record absent, or not visible to the caller"""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Complaint not found"):
        super().__init__(message)


class Unauthorized(ComplaintError):
    """Caller's role does not allow the operation"""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class StorageError(ComplaintError):
    """Database or file-system failure"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
