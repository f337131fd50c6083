"""Finalized payroll run and payslip models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from habitat_payroll.calculators.types import (
    ComputationBasis,
    OvertimePolicy,
    PaymentMode,
    PaymentStatus,
    PayModel,
    PayrollRun,
    Payslip,
    RunTotals,
    WorkerClass,
)
from habitat_payroll.models.base import Base, TimestampMixin


class PayrollRunRow(Base, TimestampMixin):
    """A finalized payroll cycle with its totals and settlement state."""

    __tablename__ = "payroll_run"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    period: Mapped[str] = mapped_column(String, nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    basis: Mapped[str] = mapped_column(String, nullable=False)
    entity_scope: Mapped[str] = mapped_column(String, nullable=False, default="ALL")
    payment_status: Mapped[str] = mapped_column(String, nullable=False, default="UNPAID")
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    total_basic: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_ot1: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_ot2: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_allowances: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_employer_cpf: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_employee_cpf: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_net: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    # Relationships
    payslips: Mapped[list[PayslipRow]] = relationship(
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="PayslipRow.position",
        lazy="selectin",
    )

    def to_domain(self) -> PayrollRun:
        return PayrollRun(
            id=self.id,
            period=self.period,
            start_date=self.start_date,
            end_date=self.end_date,
            payment_date=self.payment_date,
            basis=ComputationBasis(self.basis),
            payslips=tuple(p.to_domain() for p in self.payslips),
            totals=RunTotals(
                basic=self.total_basic,
                ot1=self.total_ot1,
                ot2=self.total_ot2,
                allowances=self.total_allowances,
                deductions=self.total_deductions,
                employer_cpf=self.total_employer_cpf,
                employee_cpf=self.total_employee_cpf,
                net=self.total_net,
            ),
            payment_status=PaymentStatus(self.payment_status),
            paid_amount=self.paid_amount,
            entity_scope=self.entity_scope,
            processed_at=self.processed_at,
        )

    @classmethod
    def from_domain(cls, run: PayrollRun) -> PayrollRunRow:
        totals = run.totals
        return cls(
            id=run.id,
            period=run.period,
            start_date=run.start_date,
            end_date=run.end_date,
            payment_date=run.payment_date,
            basis=run.basis.value,
            entity_scope=run.entity_scope,
            payment_status=run.payment_status.value,
            paid_amount=run.paid_amount,
            processed_at=run.processed_at,
            total_basic=totals.basic,
            total_ot1=totals.ot1,
            total_ot2=totals.ot2,
            total_allowances=totals.allowances,
            total_deductions=totals.deductions,
            total_employer_cpf=totals.employer_cpf,
            total_employee_cpf=totals.employee_cpf,
            total_net=totals.net,
            payslips=[
                PayslipRow.from_domain(p, position) for position, p in enumerate(run.payslips)
            ],
        )


class PayslipRow(Base):
    """A payslip embedded in a finalized run (historical record)."""

    __tablename__ = "payroll_run_payslip"

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("payroll_run.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    payslip_id: Mapped[str] = mapped_column(String, nullable=False)
    worker_id: Mapped[str] = mapped_column(String, nullable=False)
    worker_name: Mapped[str] = mapped_column(String, nullable=False)
    worker_class: Mapped[str] = mapped_column(String, nullable=False)
    pay_model: Mapped[str] = mapped_column(String, nullable=False)
    designation: Mapped[str] = mapped_column(String, nullable=False, default="")
    company: Mapped[str] = mapped_column(String, nullable=False, default="")

    basic_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    days_worked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    standard_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    ot1_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    ot1_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    ot2_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    ot2_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    premium_days_worked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    premium_day_flat_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    overtime_policy: Mapped[str] = mapped_column(String, nullable=False)

    meal_allowance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    transport_allowance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    allowance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    allowance_remarks: Mapped[str] = mapped_column(Text, nullable=False, default="")
    deduction: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deduction_remarks: Mapped[str] = mapped_column(Text, nullable=False, default="")

    employer_cpf: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    employee_cpf: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    mode_of_payment: Mapped[str] = mapped_column(String, nullable=False)
    remarks: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Relationships
    run: Mapped[PayrollRunRow] = relationship(back_populates="payslips")

    def to_domain(self) -> Payslip:
        return Payslip(
            id=self.payslip_id,
            worker_id=self.worker_id,
            worker_name=self.worker_name,
            worker_class=WorkerClass(self.worker_class),
            pay_model=PayModel(self.pay_model),
            designation=self.designation,
            company=self.company,
            basic_salary=self.basic_salary,
            hourly_rate=self.hourly_rate,
            days_worked=self.days_worked,
            standard_hours=self.standard_hours,
            ot1_hours=self.ot1_hours,
            ot1_pay=self.ot1_pay,
            ot2_hours=self.ot2_hours,
            ot2_pay=self.ot2_pay,
            premium_days_worked=self.premium_days_worked,
            premium_day_flat_rate=self.premium_day_flat_rate,
            overtime_policy=OvertimePolicy(self.overtime_policy),
            meal_allowance=self.meal_allowance,
            transport_allowance=self.transport_allowance,
            allowance=self.allowance,
            allowance_remarks=self.allowance_remarks,
            deduction=self.deduction,
            deduction_remarks=self.deduction_remarks,
            employer_cpf=self.employer_cpf,
            employee_cpf=self.employee_cpf,
            net_salary=self.net_salary,
            mode_of_payment=PaymentMode(self.mode_of_payment),
            remarks=self.remarks,
        )

    @classmethod
    def from_domain(cls, payslip: Payslip, position: int = 0) -> PayslipRow:
        return cls(
            position=position,
            payslip_id=payslip.id,
            worker_id=payslip.worker_id,
            worker_name=payslip.worker_name,
            worker_class=payslip.worker_class.value,
            pay_model=payslip.pay_model.value,
            designation=payslip.designation,
            company=payslip.company,
            basic_salary=payslip.basic_salary,
            hourly_rate=payslip.hourly_rate,
            days_worked=payslip.days_worked,
            standard_hours=payslip.standard_hours,
            ot1_hours=payslip.ot1_hours,
            ot1_pay=payslip.ot1_pay,
            ot2_hours=payslip.ot2_hours,
            ot2_pay=payslip.ot2_pay,
            premium_days_worked=payslip.premium_days_worked,
            premium_day_flat_rate=payslip.premium_day_flat_rate,
            overtime_policy=payslip.overtime_policy.value,
            meal_allowance=payslip.meal_allowance,
            transport_allowance=payslip.transport_allowance,
            allowance=payslip.allowance,
            allowance_remarks=payslip.allowance_remarks,
            deduction=payslip.deduction,
            deduction_remarks=payslip.deduction_remarks,
            employer_cpf=payslip.employer_cpf,
            employee_cpf=payslip.employee_cpf,
            net_salary=payslip.net_salary,
            mode_of_payment=payslip.mode_of_payment.value,
            remarks=payslip.remarks,
        )
