"""Persistence for workers, source records and finalized payroll runs."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from habitat_payroll.calculators.types import (
    AttendanceRecord,
    LeaveRecord,
    PayrollRun,
    Worker,
)
from habitat_payroll.models import AttendanceRow, LeaveRow, PayrollRunRow, WorkerRow

logger = logging.getLogger(__name__)


class PayrollRunNotFoundError(Exception):
    """Raised when a payroll run does not exist."""

    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Payroll run '{run_id}' not found")


class PayrollRepository:
    """Loads and stores domain objects through the ORM.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ===== Workers =====

    async def list_workers(self) -> list[Worker]:
        result = await self.session.execute(select(WorkerRow).order_by(WorkerRow.name))
        return [row.to_domain() for row in result.scalars()]

    async def get_worker(self, worker_id: str) -> Worker | None:
        row = await self.session.get(WorkerRow, worker_id)
        return row.to_domain() if row else None

    async def save_worker(self, worker: Worker) -> Worker:
        row = await self.session.get(WorkerRow, worker.id)
        if row is None:
            row = WorkerRow.from_domain(worker)
            self.session.add(row)
        else:
            row.apply(worker)
        await self.session.flush()
        return row.to_domain()

    # ===== Attendance =====

    async def list_attendance(self, worker_id: str | None = None) -> list[AttendanceRecord]:
        query = select(AttendanceRow).order_by(AttendanceRow.work_date, AttendanceRow.worker_id)
        if worker_id is not None:
            query = query.where(AttendanceRow.worker_id == worker_id)
        result = await self.session.execute(query)
        return [row.to_domain() for row in result.scalars()]

    async def save_attendance(self, record: AttendanceRecord) -> AttendanceRecord:
        """Upsert by (worker, date).

        A record logged for a day that already has one replaces that day's
        values and keeps the stored id. When an edit moves a record onto such
        a day, the moved record is removed.
        """
        result = await self.session.execute(
            select(AttendanceRow).where(
                AttendanceRow.worker_id == record.worker_id,
                AttendanceRow.work_date == record.work_date,
            )
        )
        row = result.scalar_one_or_none()
        by_id = await self.session.get(AttendanceRow, record.id)

        if row is None and by_id is None:
            row = AttendanceRow.from_domain(record)
            self.session.add(row)
        elif row is None:
            row = by_id
            row.apply(record)
        else:
            if by_id is not None and by_id is not row:
                await self.session.delete(by_id)
            row.apply(record)

        await self.session.flush()
        logger.debug("Saved attendance %s for %s on %s", row.id, row.worker_id, row.work_date)
        return row.to_domain()

    async def delete_attendance(self, record_id: str) -> bool:
        result = await self.session.execute(
            delete(AttendanceRow).where(AttendanceRow.id == record_id)
        )
        return result.rowcount > 0

    # ===== Leave =====

    async def list_leaves(self, worker_id: str | None = None) -> list[LeaveRecord]:
        query = select(LeaveRow).order_by(LeaveRow.start_date, LeaveRow.worker_id)
        if worker_id is not None:
            query = query.where(LeaveRow.worker_id == worker_id)
        result = await self.session.execute(query)
        return [row.to_domain() for row in result.scalars()]

    async def save_leave(self, record: LeaveRecord) -> LeaveRecord:
        row = await self.session.get(LeaveRow, record.id)
        if row is None:
            row = LeaveRow.from_domain(record)
            self.session.add(row)
        else:
            row.apply(record)
        await self.session.flush()
        return row.to_domain()

    async def delete_leave(self, record_id: str) -> bool:
        result = await self.session.execute(delete(LeaveRow).where(LeaveRow.id == record_id))
        return result.rowcount > 0

    # ===== Payroll runs =====

    async def list_payroll_runs(self) -> list[PayrollRun]:
        result = await self.session.execute(
            select(PayrollRunRow).order_by(
                PayrollRunRow.start_date.desc(), PayrollRunRow.processed_at.desc()
            )
        )
        return [row.to_domain() for row in result.scalars()]

    async def _get_run_row(self, run_id: str) -> PayrollRunRow:
        result = await self.session.execute(
            select(PayrollRunRow).where(PayrollRunRow.id == run_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise PayrollRunNotFoundError(run_id)
        return row

    async def get_payroll_run(self, run_id: str) -> PayrollRun:
        row = await self._get_run_row(run_id)
        return row.to_domain()

    async def save_payroll_run(self, run: PayrollRun) -> PayrollRun:
        row = PayrollRunRow.from_domain(run)
        self.session.add(row)
        await self.session.flush()
        logger.info("Saved payroll run %s (%s, %d payslips)", run.id, run.period, len(run.payslips))
        return run

    async def update_payroll_run(self, run: PayrollRun) -> PayrollRun:
        """Persist payment status and paid amount; payslips are never rewritten."""
        row = await self._get_run_row(run.id)
        row.payment_status = run.payment_status.value
        row.paid_amount = run.paid_amount
        await self.session.flush()
        return row.to_domain()

    async def delete_payroll_run(self, run_id: str) -> None:
        row = await self._get_run_row(run_id)
        await self.session.delete(row)
        await self.session.flush()
        logger.info("Deleted payroll run %s", run_id)
