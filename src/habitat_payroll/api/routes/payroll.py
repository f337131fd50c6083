"""Draft payroll and payroll run API endpoints."""

from datetime import date

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from habitat_payroll.api.dependencies import DbSession, Policy, Repository
from habitat_payroll.api.schemas import (
    AmountEditRequest,
    ConfirmationResponse,
    DraftRequest,
    DraftResponse,
    ErrorResponse,
    FinalizeRequest,
    HoursEditRequest,
    PaymentUpdateRequest,
    PayrollRunListResponse,
    PayrollRunResponse,
    PayslipSchema,
    RunTotalsSchema,
)
from habitat_payroll.calculators.payslip_compiler import (
    apply_manual_amount_edit,
    apply_manual_hours_edit,
    compute_draft_payslips,
)
from habitat_payroll.calculators.types import PayrollPeriod
from habitat_payroll.services.run_finalizer import (
    EmptyPayrollRunError,
    RunMeta,
    finalize_run,
    record_run_payment,
    summarize_payslips,
    update_run_payment_status,
)

router = APIRouter(prefix="/payroll", tags=["payroll"])


def _period(start: date, end: date) -> PayrollPeriod:
    try:
        return PayrollPeriod(start=start, end=end)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


# ============================================================================
# Drafts
# ============================================================================


@router.post(
    "/drafts",
    response_model=DraftResponse,
    responses={400: {"model": ErrorResponse}},
)
async def compute_drafts(
    repo: Repository,
    policy: Policy,
    payload: DraftRequest,
) -> DraftResponse:
    """Compute fresh draft payslips from stored records.

    Every call recomputes from source, so this is also the reset operation.
    """
    period = _period(payload.start_date, payload.end_date)
    workers = await repo.list_workers()
    attendance = await repo.list_attendance()
    leaves = await repo.list_leaves()

    payslips = compute_draft_payslips(
        workers,
        attendance,
        leaves,
        period,
        payload.basis,
        payload.entity_filter,
        policy,
    )
    return DraftResponse(
        period=period.label,
        basis=payload.basis,
        payslips=[PayslipSchema.model_validate(p) for p in payslips],
        totals=RunTotalsSchema.model_validate(summarize_payslips(payslips)),
    )


@router.post(
    "/drafts/hours",
    response_model=PayslipSchema,
    responses={400: {"model": ErrorResponse}},
)
async def edit_draft_hours(policy: Policy, payload: HoursEditRequest) -> PayslipSchema:
    """Override OT hours or premium days on a draft payslip."""
    try:
        updated = apply_manual_hours_edit(
            payload.payslip.to_domain(),
            payload.field,
            payload.value,
            policy.contribution_table,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return PayslipSchema.model_validate(updated)


@router.post(
    "/drafts/amounts",
    response_model=PayslipSchema,
    responses={400: {"model": ErrorResponse}},
)
async def edit_draft_amount(payload: AmountEditRequest) -> PayslipSchema:
    """Override an allowance, deduction or remark on a draft payslip."""
    try:
        updated = apply_manual_amount_edit(
            payload.payslip.to_domain(), payload.field, payload.value
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return PayslipSchema.model_validate(updated)


# ============================================================================
# Payroll runs
# ============================================================================


@router.post(
    "/runs",
    response_model=PayrollRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ConfirmationResponse},
    },
)
async def create_payroll_run(
    db: DbSession,
    repo: Repository,
    payload: FinalizeRequest,
) -> PayrollRunResponse | JSONResponse:
    """Finalize draft payslips into a payroll run.

    Without ``confirm`` nothing is saved; the computed totals come back with
    a 409 so the caller can ask for confirmation.
    """
    period = _period(payload.start_date, payload.end_date)
    payslips = [p.to_domain() for p in payload.payslips]
    if not payslips:
        raise EmptyPayrollRunError(period.label)

    if not payload.confirm:
        totals = summarize_payslips(payslips)
        body = ConfirmationResponse(
            detail=(
                f"Finalize payroll for {period.label} with {len(payslips)} payslips "
                f"and total net {totals.net}?"
            ),
            totals=RunTotalsSchema.model_validate(totals),
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=body.model_dump(mode="json"),
        )

    run = finalize_run(
        payslips,
        RunMeta(
            period=period,
            payment_date=payload.payment_date,
            basis=payload.basis,
            entity_scope=payload.entity_scope,
        ),
    )
    await repo.save_payroll_run(run)
    await db.commit()
    return PayrollRunResponse.from_domain(run)


@router.get("/runs", response_model=PayrollRunListResponse)
async def list_payroll_runs(repo: Repository) -> PayrollRunListResponse:
    """List finalized payroll runs, most recent period first."""
    runs = await repo.list_payroll_runs()
    return PayrollRunListResponse(
        items=[PayrollRunResponse.from_domain(r) for r in runs],
        total=len(runs),
    )


@router.get(
    "/runs/{run_id}",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_run(repo: Repository, run_id: str) -> PayrollRunResponse:
    """Get a payroll run with its payslips."""
    run = await repo.get_payroll_run(run_id)
    return PayrollRunResponse.from_domain(run)


@router.patch(
    "/runs/{run_id}/payment",
    response_model=PayrollRunResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payment(
    db: DbSession,
    repo: Repository,
    run_id: str,
    payload: PaymentUpdateRequest,
) -> PayrollRunResponse:
    """Settle a payroll run by status or by paid amount."""
    run = await repo.get_payroll_run(run_id)

    if payload.payment_status is not None:
        run = update_run_payment_status(run, payload.payment_status, payload.paid_amount)
    elif payload.paid_amount is not None:
        run = record_run_payment(run, payload.paid_amount)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either payment_status or paid_amount is required",
        )

    run = await repo.update_payroll_run(run)
    await db.commit()
    return PayrollRunResponse.from_domain(run)


@router.delete(
    "/runs/{run_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_payroll_run(db: DbSession, repo: Repository, run_id: str) -> None:
    """Permanently delete a payroll run and its payslips."""
    await repo.delete_payroll_run(run_id)
    await db.commit()
