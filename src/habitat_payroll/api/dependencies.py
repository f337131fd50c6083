"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from habitat_payroll.calculators.policy import PayrollPolicy
from habitat_payroll.config import get_settings
from habitat_payroll.database import init_db
from habitat_payroll.services.repository import PayrollRepository


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_payroll_policy() -> PayrollPolicy:
    """Computation rules from the current settings."""
    return get_settings().payroll_policy()


def get_repository(session: DbSession) -> PayrollRepository:
    """Repository bound to the request's session."""
    return PayrollRepository(session)


# Type aliases for cleaner dependency injection
Policy = Annotated[PayrollPolicy, Depends(get_payroll_policy)]
Repository = Annotated[PayrollRepository, Depends(get_repository)]
