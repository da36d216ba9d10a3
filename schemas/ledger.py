"""
Accurate.id journal voucher shapes, normalized to snake_case.
Raw Accurate payloads are parsed with `from_accurate`; anything malformed is dropped
rather than raised so one bad record cannot abort an aggregation.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PayloadError


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class EntrySummary(BaseModel):
    id: int
    number: Optional[str] = None
    trans_date: Optional[str] = None

    @classmethod
    def from_accurate(cls, raw: Any) -> Optional["EntrySummary"]:
        if not isinstance(raw, dict) or _to_int(raw.get("id")) is None:
            return None
        try:
            return cls(id=_to_int(raw["id"]), number=_to_text(raw.get("number")), trans_date=_to_text(raw.get("transDate")))
        except PayloadError:
            return None


class EntryLine(BaseModel):
    account_no: Optional[str] = None
    employee_id: Optional[int] = None
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")

    @classmethod
    def from_accurate(cls, raw: Any) -> Optional["EntryLine"]:
        if not isinstance(raw, dict):
            return None
        account = raw.get("glAccount")
        account_no = account.get("no") if isinstance(account, dict) else raw.get("accountNo")
        try:
            return cls(
                account_no=str(account_no) if account_no is not None else None,
                employee_id=_to_int(raw.get("employeeId")),
                debit=_to_decimal(raw.get("debitAmount", raw.get("debit"))),
                credit=_to_decimal(raw.get("creditAmount", raw.get("credit"))),
            )
        except PayloadError:
            return None


class EntryDetail(BaseModel):
    id: Optional[int] = None
    description: Optional[str] = None
    lines: list[EntryLine] = Field(default_factory=list)

    @classmethod
    def from_accurate(cls, raw: Any) -> Optional["EntryDetail"]:
        if not isinstance(raw, dict):
            return None
        raw_lines = raw.get("detailJournalVoucher")
        if not isinstance(raw_lines, list):
            return None
        lines = [line for line in (EntryLine.from_accurate(r) for r in raw_lines) if line is not None]
        try:
            return cls(id=_to_int(raw.get("id")), description=_to_text(raw.get("description")), lines=lines)
        except PayloadError:
            return None


class DisbursementVoucher(BaseModel):
    """Debit receivables / credit cash for one approved loan."""

    trans_date: date
    description: str
    amount: Decimal
    debit_account_no: str
    credit_account_no: str
    employee_id: int

    def to_accurate(self) -> dict[str, Any]:
        amount = float(self.amount)
        return {
            "transDate": self.trans_date.strftime("%d/%m/%Y"),
            "description": self.description,
            "detail": [
                {
                    "accountNo": self.debit_account_no,
                    "debit": amount,
                    "credit": 0,
                    "employeeId": self.employee_id,
                },
                {
                    "accountNo": self.credit_account_no,
                    "debit": 0,
                    "credit": amount,
                },
            ],
        }


class VoucherReceipt(BaseModel):
    id: str
    number: Optional[str] = None
