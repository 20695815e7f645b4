"""Assessment aggregate and its value objects.

Records serialize with camelCase keys so that a snapshot written by the
browser portal (local cache or JSON backup) loads unchanged.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from src.domain.reference_data import CORE_COMPETENCIES, DEFAULT_KPI_SEEDS


def normalize_email(value: str | None) -> str:
    """Comparison key for every email lookup."""
    return (value or "").strip().lower()


class Rating(str, enum.Enum):
    """Closed rating scale. The leading digit is label text, not an ordinal."""

    NA = "N/A - Not Applicable"
    OUTSTANDING = "1 - Outstanding"
    EXCEEDS = "2 - Exceeds requirements"
    MEETS = "3 - Meets requirements"
    PARTIALLY_MEETS = "4 - Partially meets requirements"
    NOT_MET = "5 - Requirements not met"


class AssessmentStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    REVIEWED = "reviewed"


class RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmployeeDetails(RecordModel):
    full_name: str = ""
    email: str = ""
    position: str = ""
    division: str = ""


class KPI(RecordModel):
    id: str
    title: str = ""
    description: str = ""
    start_date: str = ""
    target_date: str = ""
    status: str = ""
    self_rating: Rating | None = None
    self_comments: str = ""
    manager_rating: Rating | None = None
    manager_comments: str = ""
    mid_year_self_comments: str = ""
    mid_year_manager_comments: str = ""


class Competency(RecordModel):
    id: str
    name: str
    description: str = ""
    indicators: list[str] = Field(default_factory=list)
    self_rating: Rating | None = None
    manager_rating: Rating | None = None
    manager_comments: str = ""


class DevelopmentPlan(RecordModel):
    competencies: list[str] = Field(default_factory=list)
    self_comments: str = ""
    manager_comments: str = ""


class OverallPerformance(RecordModel):
    self_rating: Rating | None = None
    self_comments: str = ""
    manager_rating: Rating | None = None
    manager_comments: str = ""


class Assessment(RecordModel):
    """Aggregate root: one employee's appraisal for the cycle."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    employee_id: str = ""
    employee_details: EmployeeDetails = Field(default_factory=EmployeeDetails)
    manager_name: str = ""
    manager_email: str = ""
    manager_password: str | None = None
    kpis: list[KPI] = Field(default_factory=list)
    core_competencies: list[Competency] = Field(default_factory=list)
    development_plan: DevelopmentPlan = Field(default_factory=DevelopmentPlan)
    overall_performance: OverallPerformance = Field(default_factory=OverallPerformance)
    status: AssessmentStatus = AssessmentStatus.DRAFT
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    updated_at: datetime | None = None
    # Optimistic-concurrency counter, bumped by the remote store on every accepted write
    version: int = 0

    @property
    def employee_email(self) -> str:
        return normalize_email(self.employee_details.email)

    @property
    def manager_email_key(self) -> str:
        return normalize_email(self.manager_email)

    def to_payload(self) -> dict:
        """Full-fidelity JSON-ready dict (camelCase)."""
        return self.model_dump(mode="json", by_alias=True)


def catalog_competencies() -> list[Competency]:
    """Fresh copy of the fixed competency catalog."""
    return [Competency.model_validate(item) for item in CORE_COMPETENCIES]


def kpis_from_seeds(seeds: Sequence[str]) -> list[KPI]:
    """One KPI per non-empty seed, titled positionally."""
    descriptions = [seed.strip() for seed in seeds if seed and seed.strip()]
    return [
        KPI(id=f"kpi-{index}", title=f"KPI {index}", description=description)
        for index, description in enumerate(descriptions, start=1)
    ]


def blank_assessment(
    name: str,
    email: str,
    manager_name: str,
    manager_email: str,
    kpi_seeds: Sequence[str],
    manager_password: str | None = None,
) -> Assessment:
    """Mint a new draft record for an employee on the roster."""
    return Assessment(
        employee_details=EmployeeDetails(full_name=name.strip(), email=email.strip()),
        manager_name=manager_name.strip(),
        manager_email=manager_email.strip(),
        manager_password=manager_password or None,
        kpis=kpis_from_seeds(kpi_seeds),
        core_competencies=catalog_competencies(),
        status=AssessmentStatus.DRAFT,
    )


def manual_draft(email: str) -> Assessment:
    """Unsaved working copy for a user who starts the form without a roster entry."""
    return Assessment(
        employee_details=EmployeeDetails(email=email.strip()),
        kpis=[
            KPI(id=f"kpi-{index}", **seed) for index, seed in enumerate(DEFAULT_KPI_SEEDS, start=1)
        ],
        core_competencies=catalog_competencies(),
    )


__all__ = [
    "Assessment",
    "AssessmentStatus",
    "Competency",
    "DevelopmentPlan",
    "EmployeeDetails",
    "KPI",
    "OverallPerformance",
    "Rating",
    "blank_assessment",
    "catalog_competencies",
    "kpis_from_seeds",
    "manual_draft",
    "normalize_email",
]
