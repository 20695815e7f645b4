from src.domain.models import (
    Assessment,
    AssessmentStatus,
    Competency,
    DevelopmentPlan,
    EmployeeDetails,
    KPI,
    OverallPerformance,
    Rating,
    blank_assessment,
    normalize_email,
)
from src.domain.principals import Admin, Manager, Principal, Staff, Unauthenticated

__all__ = [
    "Admin",
    "Assessment",
    "AssessmentStatus",
    "Competency",
    "DevelopmentPlan",
    "EmployeeDetails",
    "KPI",
    "Manager",
    "OverallPerformance",
    "Principal",
    "Rating",
    "Staff",
    "Unauthenticated",
    "blank_assessment",
    "normalize_email",
]
