"""API routes."""

from habitat_payroll.api.routes.health import router as health_router
from habitat_payroll.api.routes.payroll import router as payroll_router
from habitat_payroll.api.routes.records import router as records_router

__all__ = ["health_router", "payroll_router", "records_router"]
