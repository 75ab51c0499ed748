"""Application services (use cases)."""

from .assessment_service import AssessmentService
from .admin_service import AdminService

__all__ = [
    "AssessmentService",
    "AdminService",
]
