from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models import LoanApplication, LoanStatus
from services.approval_engine import INITIAL_STATUS
from services.errors import NotFoundError


class LoanStore:
    """Loan application repository bound to one AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        employee_id: int,
        member_name: str,
        amount: Decimal,
        tenure_months: int,
    ) -> LoanApplication:
        now = datetime.now(timezone.utc)
        loan = LoanApplication(
            id=f"loan-{uuid.uuid4().hex[:12]}",
            employee_id=employee_id,
            member_name=member_name,
            amount=amount,
            tenure_months=tenure_months,
            status=INITIAL_STATUS,
            created_at=now,
            updated_at=now,
        )
        self.session.add(loan)
        await self.session.flush()
        return loan

    async def get(self, loan_id: str) -> LoanApplication:
        result = await self.session.execute(select(LoanApplication).where(LoanApplication.id == loan_id))
        loan = result.scalar_one_or_none()
        if not loan:
            raise NotFoundError("Application not found")
        return loan

    async def refresh(self, loan: LoanApplication) -> LoanApplication:
        await self.session.refresh(loan)
        return loan

    async def list_all(self, status: Optional[LoanStatus] = None) -> Sequence[LoanApplication]:
        stmt = select(LoanApplication).order_by(LoanApplication.created_at.desc())
        if status is not None:
            stmt = stmt.where(LoanApplication.status == status)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def save(self, loan: LoanApplication) -> LoanApplication:
        loan.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        return loan

    async def compare_and_set(self, loan_id: str, expected: dict[str, Any], values: dict[str, Any]) -> bool:
        """
        Write `values` only if every column in `expected` still holds its value
        (None means IS NULL). Returns False when another writer got there first.
        """
        conditions = [LoanApplication.id == loan_id]
        for column, value in expected.items():
            attr = getattr(LoanApplication, column)
            conditions.append(attr.is_(None) if value is None else attr == value)
        stmt = (
            update(LoanApplication)
            .where(*conditions)
            .values(**values, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
