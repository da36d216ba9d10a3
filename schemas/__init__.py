from schemas.actor import Actor, LoginRequest, LoginResponse
from schemas.ledger import DisbursementVoucher, EntryDetail, EntryLine, EntrySummary, VoucherReceipt
from schemas.loan import (
    LedgerSyncResult,
    LoanActionRequest,
    LoanActionResponse,
    LoanCreate,
    LoanResponse,
)

__all__ = [
    "Actor",
    "DisbursementVoucher",
    "EntryDetail",
    "EntryLine",
    "EntrySummary",
    "LedgerSyncResult",
    "LoanActionRequest",
    "LoanActionResponse",
    "LoanCreate",
    "LoanResponse",
    "LoginRequest",
    "LoginResponse",
    "VoucherReceipt",
]
