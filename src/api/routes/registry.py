"""Admin-only staff registry routes: roster import, exports, backup, deletion, sync."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response
from src.api.deps import get_admin_console
from src.api.schemas.assessments import SyncStatus
from src.api.schemas.registry import (
    DeleteResponse,
    ImportResponse,
    RegistryEntry,
    RegistryResponse,
    ReloadResponse,
    RestoreResponse,
)
from src.domain.services.export import BackupFormatError
from src.domain.services.registry import RecordNotFoundError
from src.domain.services.review import ReviewConsole

router = APIRouter(prefix="/registry", tags=["Registry"])

_CSV_BODY = {
    "requestBody": {
        "required": True,
        "content": {"text/csv": {"schema": {"type": "string"}}},
    }
}


async def _read_text(request: Request) -> str:
    body = await request.body()
    if not body.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty request body")
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=422, detail="Body must be UTF-8 text") from exc


def _stamp() -> str:
    return datetime.now(UTC).strftime("%Y%m%d")


@router.get("", response_model=RegistryResponse)
async def list_registry(console: ReviewConsole = Depends(get_admin_console)) -> RegistryResponse:
    """Full staff roster, drafts included."""
    items = [RegistryEntry.from_record(record) for record in console.staff_registry()]
    return RegistryResponse(total=len(items), items=items)


@router.post("/import", response_model=ImportResponse, openapi_extra=_CSV_BODY)
async def import_roster(
    request: Request,
    console: ReviewConsole = Depends(get_admin_console),
) -> ImportResponse:
    """
    Bulk-import a roster CSV.

    Columns: FullName, Email, KPI1..KPI5, ManagerName, ManagerEmail[, ManagerPassword].
    Existing emails keep their self-assessment; only KPI descriptions and the
    manager fields are overwritten.
    """
    text = await _read_text(request)
    report = await console.bulk_import(text)
    return ImportResponse.from_report(report)


@router.get("/export.csv", response_class=Response)
async def export_reviewed(console: ReviewConsole = Depends(get_admin_console)) -> Response:
    """Reviewed appraisals as a spreadsheet-friendly CSV."""
    return Response(
        content=console.export_csv(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="appraisals_reviewed_{_stamp()}.csv"'
        },
    )


@router.get("/backup", response_class=Response)
async def download_backup(console: ReviewConsole = Depends(get_admin_console)) -> Response:
    return Response(
        content=console.backup(),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="assessments_backup_{_stamp()}.json"'
        },
    )


@router.post("/restore", response_model=RestoreResponse)
async def restore_backup(
    request: Request,
    console: ReviewConsole = Depends(get_admin_console),
) -> RestoreResponse:
    """Replace the whole registry with a backup and push it to the remote store."""
    body = await request.body()
    try:
        restored, result = await console.restore(body)
    except BackupFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return RestoreResponse(restored=restored, sync=SyncStatus.from_result(result))


@router.delete("/{assessment_id}", response_model=DeleteResponse)
async def delete_assessment(
    assessment_id: str,
    console: ReviewConsole = Depends(get_admin_console),
) -> DeleteResponse:
    """Remove a record locally and remotely. Not reversible."""
    try:
        result = await console.delete(assessment_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return DeleteResponse(deleted=assessment_id, sync=SyncStatus.from_result(result))


@router.post("/sync", response_model=SyncStatus)
async def force_sync(console: ReviewConsole = Depends(get_admin_console)) -> SyncStatus:
    """Push the whole registry to the remote store."""
    result = await console.force_sync()
    if result.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.message)
    return SyncStatus.from_result(result)


@router.post("/reload", response_model=ReloadResponse)
async def reload_registry(console: ReviewConsole = Depends(get_admin_console)) -> ReloadResponse:
    """Re-read the registry from the remote store (local snapshot as fallback)."""
    count = await console.reload()
    connection = console.registry.connection
    return ReloadResponse(
        records=count,
        source=console.registry.source,
        connected=connection.connected,
        error=connection.error,
    )
