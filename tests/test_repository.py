"""Tests for persistence round trips."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from habitat_payroll.calculators.payslip_compiler import compute_draft_payslips
from habitat_payroll.calculators.types import (
    LeaveType,
    OvertimePolicy,
    PaymentStatus,
    PayModel,
    WorkerClass,
)
from habitat_payroll.models import PayslipRow
from habitat_payroll.services.repository import PayrollRepository, PayrollRunNotFoundError
from habitat_payroll.services.run_finalizer import (
    RunMeta,
    finalize_run,
    update_run_payment_status,
)

TUESDAY = date(2026, 3, 3)
SUNDAY = date(2026, 3, 8)


@pytest.fixture
def repo(session) -> PayrollRepository:
    return PayrollRepository(session)


class TestWorkers:
    """Test worker persistence."""

    async def test_round_trip(self, repo, session, make_worker):
        worker = make_worker(
            name="Siti",
            pay_model=PayModel.MONTHLY,
            worker_class=WorkerClass.LOCAL,
            salary=Decimal("3200"),
            declared_fixed_salary=Decimal("2800"),
            overtime_policy=OvertimePolicy.FIXED_7PM_SUN_FLAT,
            premium_day_flat_rate=Decimal("120"),
            excluded_from_payroll=True,
            company="Habitat Pte Ltd",
            designation="Site Supervisor",
            employee_contribution=Decimal("0"),
            employer_contribution=Decimal("0"),
            date_joined=date(2021, 4, 1),
        )
        await repo.save_worker(worker)
        session.expunge_all()

        assert await repo.list_workers() == [worker]
        assert await repo.get_worker(worker.id) == worker

    async def test_save_replaces(self, repo, make_worker):
        worker = make_worker(name="Ravi")
        await repo.save_worker(worker)
        await repo.save_worker(replace(worker, salary=Decimal("12")))

        [stored] = await repo.list_workers()
        assert stored.salary == Decimal("12")

    async def test_missing_worker(self, repo):
        assert await repo.get_worker("nobody") is None


class TestAttendance:
    """Test attendance persistence."""

    async def test_upsert_by_worker_and_date(self, repo, session, make_attendance):
        await repo.save_attendance(make_attendance("w1", TUESDAY, hours="4", id="a1"))
        saved = await repo.save_attendance(make_attendance("w1", TUESDAY, hours="8", id="a2"))
        session.expunge_all()

        [stored] = await repo.list_attendance()
        assert stored.id == "a1"
        assert saved.id == "a1"
        assert stored.hours_worked == Decimal("8")

    async def test_edit_moves_date(self, repo, make_attendance):
        record = make_attendance("w1", TUESDAY, hours="8", id="a1")
        await repo.save_attendance(record)
        await repo.save_attendance(replace(record, work_date=SUNDAY))

        [stored] = await repo.list_attendance("w1")
        assert stored.work_date == SUNDAY

    async def test_round_trip(self, repo, session, make_attendance):
        record = make_attendance(
            "w1",
            TUESDAY,
            hours="8",
            ot="2.5",
            has_meal_allowance=True,
            transport_claim=Decimal("12.5"),
            project_id="proj-7",
            remarks="Tampines site",
        )
        await repo.save_attendance(record)
        session.expunge_all()

        assert await repo.list_attendance() == [record]

    async def test_delete(self, repo, make_attendance):
        await repo.save_attendance(make_attendance("w1", TUESDAY, id="a1"))
        assert await repo.delete_attendance("a1") is True
        assert await repo.delete_attendance("a1") is False
        assert await repo.list_attendance() == []


class TestLeaves:
    """Test leave persistence."""

    async def test_round_trip_and_delete(self, repo, session, make_leave):
        record = make_leave(
            "w1",
            date(2026, 3, 2),
            leave_type=LeaveType.HALF_DAY_ANNUAL,
            days="0.5",
            reason="Clinic visit",
            is_payable=True,
        )
        await repo.save_leave(record)
        session.expunge_all()

        assert await repo.list_leaves("w1") == [record]
        assert await repo.list_leaves("w2") == []

        assert await repo.delete_leave(record.id) is True
        assert await repo.list_leaves() == []


class TestPayrollRuns:
    """Test payroll run persistence."""

    @pytest.fixture
    def run(self, make_worker, make_attendance, period):
        hourly = make_worker(name="Ah Kow")
        monthly = make_worker(
            name="Siti",
            pay_model=PayModel.MONTHLY,
            worker_class=WorkerClass.LOCAL,
            salary=Decimal("3000"),
        )
        attendance = [
            make_attendance(hourly.id, TUESDAY, hours="8", ot="2", has_meal_allowance=True),
            make_attendance(hourly.id, SUNDAY, ot="4"),
        ]
        payslips = compute_draft_payslips([hourly, monthly], attendance, [], period)
        return finalize_run(
            payslips,
            RunMeta(
                period=period,
                payment_date=date(2026, 4, 7),
                run_id="run-2026-03",
                processed_at=datetime(2026, 4, 1, 9, 30),
            ),
        )

    async def test_round_trip(self, repo, session, run):
        await repo.save_payroll_run(run)
        await session.commit()
        session.expunge_all()

        loaded = await repo.get_payroll_run(run.id)

        assert loaded == run
        assert [p.worker_name for p in loaded.payslips] == ["Ah Kow", "Siti"]

    async def test_list(self, repo, run):
        await repo.save_payroll_run(run)
        runs = await repo.list_payroll_runs()
        assert [r.id for r in runs] == [run.id]

    async def test_update_payment(self, repo, session, run):
        await repo.save_payroll_run(run)
        partial = update_run_payment_status(run, PaymentStatus.PARTIAL, Decimal("100"))

        await repo.update_payroll_run(partial)
        session.expunge_all()

        loaded = await repo.get_payroll_run(run.id)
        assert loaded.payment_status == PaymentStatus.PARTIAL
        assert loaded.paid_amount == Decimal("100")
        assert loaded.payslips == run.payslips

    async def test_delete(self, repo, session, run):
        await repo.save_payroll_run(run)
        await repo.delete_payroll_run(run.id)

        with pytest.raises(PayrollRunNotFoundError):
            await repo.get_payroll_run(run.id)
        count = await session.scalar(select(func.count()).select_from(PayslipRow))
        assert count == 0

    async def test_missing_run(self, repo):
        with pytest.raises(PayrollRunNotFoundError):
            await repo.get_payroll_run("missing")
        with pytest.raises(PayrollRunNotFoundError):
            await repo.delete_payroll_run("missing")
