import logging

from fastapi import APIRouter, Depends

from api.deps import get_current_actor, get_ledger_gateway, get_loan_service
from schemas.actor import Actor
from services.loans import LoanService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard-data")
async def dashboard_data(
    actor: Actor = Depends(get_current_actor),
    gateway=Depends(get_ledger_gateway),
    service: LoanService = Depends(get_loan_service),
):
    logger.info("Dashboard requested for employee_id=%s", actor.employee_id)
    employee = await gateway.get_employee_detail(actor.employee_id) or {}
    balance = await service.employee_balance(actor.employee_id)
    # utang is always recomputed from the ledger, never taken from the employee record
    return {**employee, "utang": float(balance)}


@router.get("/employees")
async def list_employees(actor: Actor = Depends(get_current_actor), gateway=Depends(get_ledger_gateway)):
    return await gateway.list_employees()
