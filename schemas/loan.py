from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from models.enums import LoanAction, LoanStatus

_camel_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


class LoanCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    tenure: int = Field(..., gt=0, description="Tenure in months")


class LoanActionRequest(BaseModel):
    action: LoanAction
    reason: Optional[str] = None


class LoanResponse(BaseModel):
    id: str
    employee_id: int
    member_name: str
    amount: Decimal
    tenure_months: int
    status: LoanStatus
    approver_level_1_id: Optional[int] = None
    approver_level_2_id: Optional[int] = None
    approver_level_3_id: Optional[int] = None
    approver_level_4_id: Optional[int] = None
    rejection_reason: Optional[str] = None
    ledger_voucher_id: Optional[str] = None
    ledger_synced_at: Optional[datetime] = None
    ledger_sync_started_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = _camel_config


class LedgerSyncResult(BaseModel):
    attempted: bool = False
    succeeded: bool = False
    warning: Optional[str] = None

    model_config = _camel_config


class LoanActionResponse(LoanResponse):
    ledger: LedgerSyncResult
