"""Habitat payroll: payslip computation and payroll run settlement."""

__version__ = "1.0.0"
