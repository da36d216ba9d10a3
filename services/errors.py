"""
Error taxonomy for the loan approval service.
Each error carries the HTTP status the API layer maps it to.
"""
from __future__ import annotations


class LoanServiceError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LoanServiceError):
    """Bad amount/tenure, missing rejection reason, unresolvable member."""

    status_code = 400


class AuthError(LoanServiceError):
    status_code = 401


class NotFoundError(LoanServiceError):
    status_code = 404


class TerminalStateError(LoanServiceError):
    """Action attempted on an APPROVED or REJECTED loan."""

    status_code = 409


class TransitionConflictError(LoanServiceError):
    """The loan's status changed between read and write."""

    status_code = 409


class UpstreamUnavailableError(LoanServiceError):
    """Accurate.id (actor lookup or ledger) could not be reached or refused the call."""

    status_code = 503


class LedgerPostFailure(UpstreamUnavailableError):
    """Disbursement voucher could not be posted."""

    status_code = 502
