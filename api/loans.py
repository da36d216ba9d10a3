from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from api.deps import get_current_actor, get_loan_service
from models import LoanApplication, LoanStatus
from schemas.actor import Actor
from schemas.loan import LoanActionRequest, LoanActionResponse, LoanCreate, LoanResponse
from services.loans import ActionOutcome, LoanService

router = APIRouter(prefix="/api/loan-applications", tags=["loan-applications"])


def _loan_to_response(loan: LoanApplication) -> dict[str, Any]:
    """Serialize a loan to a dict with camelCase keys for the frontend."""
    return LoanResponse.model_validate(loan).model_dump(mode="json", by_alias=True)


def _outcome_to_response(outcome: ActionOutcome) -> dict[str, Any]:
    data = LoanResponse.model_validate(outcome.loan).model_dump()
    return LoanActionResponse(**data, ledger=outcome.ledger).model_dump(mode="json", by_alias=True)


@router.get("")
async def list_loan_applications(
    status: Optional[LoanStatus] = None,
    actor: Actor = Depends(get_current_actor),
    service: LoanService = Depends(get_loan_service),
):
    loans = await service.list_loans(status)
    return [_loan_to_response(loan) for loan in loans]


@router.post("", status_code=201)
async def submit_loan_application(
    body: LoanCreate,
    actor: Actor = Depends(get_current_actor),
    service: LoanService = Depends(get_loan_service),
):
    loan = await service.submit_loan(actor, body.amount, body.tenure)
    return _loan_to_response(loan)


@router.get("/{loan_id}")
async def get_loan_application(
    loan_id: str,
    actor: Actor = Depends(get_current_actor),
    service: LoanService = Depends(get_loan_service),
):
    return _loan_to_response(await service.get_loan(loan_id))


@router.patch("/{loan_id}")
async def act_on_loan_application(
    loan_id: str,
    body: LoanActionRequest,
    actor: Actor = Depends(get_current_actor),
    service: LoanService = Depends(get_loan_service),
):
    outcome = await service.apply_action(loan_id, body.action, actor.employee_id, body.reason)
    return _outcome_to_response(outcome)


@router.post("/{loan_id}/ledger-sync")
async def resync_loan_ledger(
    loan_id: str,
    actor: Actor = Depends(get_current_actor),
    service: LoanService = Depends(get_loan_service),
):
    outcome = await service.resync_ledger(loan_id)
    return _outcome_to_response(outcome)
