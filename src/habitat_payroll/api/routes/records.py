"""Worker, attendance and leave record endpoints."""

from fastapi import APIRouter, HTTPException, status

from habitat_payroll.api.dependencies import DbSession, Policy, Repository
from habitat_payroll.api.schemas import (
    AttendanceSchema,
    ConfirmationResponse,
    ErrorResponse,
    LeaveRequest,
    LeaveResponse,
    LeaveSchema,
    WorkerSchema,
)
from habitat_payroll.services.leave_service import LeaveService

router = APIRouter(tags=["records"])


# ============================================================================
# Workers
# ============================================================================


@router.put("/workers", response_model=WorkerSchema)
async def save_worker(db: DbSession, repo: Repository, payload: WorkerSchema) -> WorkerSchema:
    """Create or replace a worker profile."""
    worker = await repo.save_worker(payload.to_domain())
    await db.commit()
    return WorkerSchema.model_validate(worker)


@router.get("/workers", response_model=list[WorkerSchema])
async def list_workers(repo: Repository) -> list[WorkerSchema]:
    """List all workers."""
    return [WorkerSchema.model_validate(w) for w in await repo.list_workers()]


# ============================================================================
# Attendance
# ============================================================================


@router.post("/attendance", response_model=AttendanceSchema)
async def save_attendance(
    db: DbSession, repo: Repository, payload: AttendanceSchema
) -> AttendanceSchema:
    """Log a day's attendance; an existing log for the same day is replaced."""
    record = await repo.save_attendance(payload.to_domain())
    await db.commit()
    return AttendanceSchema.model_validate(record)


@router.get("/attendance", response_model=list[AttendanceSchema])
async def list_attendance(
    repo: Repository, worker_id: str | None = None
) -> list[AttendanceSchema]:
    """List attendance logs, optionally for one worker."""
    return [AttendanceSchema.model_validate(r) for r in await repo.list_attendance(worker_id)]


@router.delete(
    "/attendance/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_attendance(db: DbSession, repo: Repository, record_id: str) -> None:
    """Delete an attendance log."""
    if not await repo.delete_attendance(record_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Attendance record '{record_id}' not found",
        )
    await db.commit()


# ============================================================================
# Leave
# ============================================================================


@router.post(
    "/leaves",
    response_model=LeaveResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ConfirmationResponse}},
)
async def save_leave(
    db: DbSession, repo: Repository, policy: Policy, payload: LeaveRequest
) -> LeaveResponse:
    """Record or edit a leave span.

    Requests past the worker's yearly cap are stored as unpaid leave, but
    only with ``confirm`` set; otherwise a 409 explains the reclassification.
    """
    worker = await repo.get_worker(payload.worker_id)
    if worker is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Worker '{payload.worker_id}' not found",
        )

    service = LeaveService(policy.entitlements)
    existing = await repo.list_leaves(worker.id)
    plan = service.plan(worker, payload.to_domain(), existing)
    record = service.accept(plan, confirmed=payload.confirm)

    saved = await repo.save_leave(record)
    await db.commit()
    return LeaveResponse(
        record=LeaveSchema.model_validate(saved),
        reclassified=saved.leave_type != payload.leave_type,
    )


@router.get("/leaves", response_model=list[LeaveSchema])
async def list_leaves(repo: Repository, worker_id: str | None = None) -> list[LeaveSchema]:
    """List leave records, optionally for one worker."""
    return [LeaveSchema.model_validate(r) for r in await repo.list_leaves(worker_id)]


@router.delete(
    "/leaves/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_leave(db: DbSession, repo: Repository, record_id: str) -> None:
    """Delete a leave record."""
    if not await repo.delete_leave(record_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Leave record '{record_id}' not found",
        )
    await db.commit()
