from __future__ import annotations

from collections.abc import Sequence

from src.api.deps import issue_smoke_token
from src.core.auth import Role
from src.domain.models import Assessment, AssessmentStatus, Rating, blank_assessment

ROSTER_HEADER = "FullName,Email,KPI1,KPI2,KPI3,KPI4,KPI5,ManagerName,ManagerEmail,ManagerPassword"


def auth_headers(email: str = "jane@example.com", role: Role = Role.STAFF) -> dict[str, str]:
    token = issue_smoke_token(email, role=role)
    return {"Authorization": f"Bearer {token}"}


def make_record(
    name: str = "Jane Doe",
    email: str = "jane@example.com",
    manager_name: str = "Mark Manager",
    manager_email: str = "mark@example.com",
    kpi_seeds: Sequence[str] = ("Grow revenue", "Reduce churn"),
    manager_password: str | None = None,
    status: AssessmentStatus = AssessmentStatus.DRAFT,
) -> Assessment:
    record = blank_assessment(
        name, email, manager_name, manager_email, kpi_seeds, manager_password=manager_password
    )
    record.status = status
    return record


def rated_for_review(record: Assessment, rating: Rating = Rating.MEETS) -> Assessment:
    """Fill the manager side of a submitted record so it can be finalized."""
    record.overall_performance.manager_rating = rating
    record.overall_performance.manager_comments = "Solid year"
    for kpi in record.kpis:
        kpi.manager_rating = rating
    return record


def roster_csv(*rows: Sequence[str], header: str = ROSTER_HEADER) -> str:
    """Build roster CSV text, quoting every cell."""
    lines = [header]
    for row in rows:
        lines.append(",".join('"' + cell.replace('"', '""') + '"' for cell in row))
    return "\n".join(lines) + "\n"
