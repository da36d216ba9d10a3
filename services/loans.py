from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import Settings, settings as default_settings
from models import LoanAction, LoanApplication, LoanStatus
from schemas.actor import Actor
from schemas.ledger import DisbursementVoucher
from schemas.loan import LedgerSyncResult
from services.actor_directory import ActorDirectory
from services import approval_engine
from services.balance import fetch_employee_balance
from services.errors import LedgerPostFailure, TransitionConflictError, ValidationError
from services.loan_store import LoanStore

logger = logging.getLogger(__name__)


@dataclass
class ActionOutcome:
    loan: LoanApplication
    ledger: LedgerSyncResult


class LoanService:
    """
    Orchestrates one request: approval engine decision, compare-and-swap persist,
    then the disbursement voucher when a loan reaches APPROVED.
    """

    def __init__(
        self,
        session: AsyncSession,
        gateway,
        actors: ActorDirectory,
        settings: Settings = default_settings,
    ) -> None:
        self.session = session
        self.store = LoanStore(session)
        self.gateway = gateway
        self.actors = actors
        self.settings = settings

    async def submit_loan(self, actor: Actor, amount: Decimal, tenure_months: int) -> LoanApplication:
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if tenure_months <= 0:
            raise ValidationError("Tenure must be at least one month")

        member_name = await self.actors.resolve_member_name(actor.employee_id)
        loan = await self.store.create(
            employee_id=actor.employee_id,
            member_name=member_name,
            amount=amount,
            tenure_months=tenure_months,
        )
        await self.session.commit()
        logger.info("Loan application %s submitted by employee_id=%s", loan.id, actor.employee_id)
        return loan

    async def list_loans(self, status: Optional[LoanStatus] = None) -> Sequence[LoanApplication]:
        return await self.store.list_all(status)

    async def get_loan(self, loan_id: str) -> LoanApplication:
        return await self.store.get(loan_id)

    async def apply_action(
        self,
        loan_id: str,
        action: LoanAction | str,
        actor_id: int,
        reason: Optional[str] = None,
    ) -> ActionOutcome:
        loan = await self.store.get(loan_id)
        transition = approval_engine.apply_action(loan.status, action, actor_id, reason)

        if not await self.store.compare_and_set(loan_id, transition.preconditions(), transition.values()):
            await self.store.refresh(loan)
            raise TransitionConflictError(
                f"Application {loan_id} moved to {LoanStatus(loan.status).value} while this request was processed"
            )
        # Approval is final from here; the ledger post below is best-effort
        await self.session.commit()
        await self.store.refresh(loan)
        logger.info("Application %s: %s -> %s by employee_id=%s", loan_id, transition.from_status.value,
                    transition.status.value, actor_id)

        ledger = LedgerSyncResult()
        if transition.posts_to_ledger:
            try:
                posted = await self._post_disbursement(loan)
                ledger = LedgerSyncResult(attempted=posted, succeeded=bool(loan.ledger_voucher_id))
                if not posted and not loan.ledger_voucher_id:
                    ledger.warning = "Loan approved; ledger sync is being handled by another request"
            except LedgerPostFailure as e:
                logger.warning("Failed to post loan %s to Accurate: %s", loan_id, e.message)
                ledger = LedgerSyncResult(
                    attempted=True,
                    succeeded=False,
                    warning=f"Loan approved but ledger sync failed; manual reconciliation required ({e.message})",
                )
        return ActionOutcome(loan=loan, ledger=ledger)

    async def resync_ledger(self, loan_id: str) -> ActionOutcome:
        """Re-attempt the disbursement voucher for an approved loan that never synced."""
        loan = await self.store.get(loan_id)
        if loan.status != LoanStatus.APPROVED:
            raise ValidationError("Only approved applications can be posted to the ledger")
        if loan.ledger_voucher_id:
            return ActionOutcome(loan=loan, ledger=LedgerSyncResult(attempted=False, succeeded=True))
        if not await self._post_disbursement(loan):
            if loan.ledger_voucher_id:
                return ActionOutcome(loan=loan, ledger=LedgerSyncResult(attempted=False, succeeded=True))
            raise TransitionConflictError(
                f"Ledger sync for application {loan_id} is already in progress or awaits manual reconciliation"
            )
        return ActionOutcome(loan=loan, ledger=LedgerSyncResult(attempted=True, succeeded=True))

    async def employee_balance(self, employee_id: int) -> Decimal:
        return await fetch_employee_balance(self.gateway, employee_id, self.settings.receivables_account_no)

    def _build_voucher(self, loan: LoanApplication) -> DisbursementVoucher:
        return DisbursementVoucher(
            trans_date=datetime.now(timezone.utc).date(),
            description=f"Loan disbursement for {loan.member_name}",
            amount=loan.amount,
            debit_account_no=self.settings.receivables_account_no,
            credit_account_no=self.settings.cash_account_no,
            employee_id=loan.employee_id,
        )

    async def _post_disbursement(self, loan: LoanApplication) -> bool:
        """
        Post the disbursement voucher at most once per loan.

        The post is claimed by stamping `ledger_sync_started_at`; a request that loses
        the claim returns False without posting. A rejected post releases the claim so
        the loan can be re-synced. A voucher that was posted but not recorded keeps its
        claim, and the logged voucher id is needed to reconcile it by hand.
        """
        claimed = await self.store.compare_and_set(
            loan.id,
            {"status": LoanStatus.APPROVED, "ledger_voucher_id": None, "ledger_sync_started_at": None},
            {"ledger_sync_started_at": datetime.now(timezone.utc)},
        )
        await self.session.commit()
        await self.store.refresh(loan)
        if not claimed:
            logger.info("Ledger post for loan %s is already claimed; skipping", loan.id)
            return False

        logger.info("Posting approved loan %s to Accurate", loan.id)
        try:
            receipt = await self.gateway.post_voucher(self._build_voucher(loan))
        except LedgerPostFailure:
            await self.store.compare_and_set(loan.id, {"ledger_voucher_id": None}, {"ledger_sync_started_at": None})
            await self.session.commit()
            await self.store.refresh(loan)
            raise

        try:
            loan.ledger_voucher_id = receipt.id
            loan.ledger_synced_at = datetime.now(timezone.utc)
            await self.store.save(loan)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Loan %s was posted to Accurate as voucher %s but the receipt was not recorded: %s",
                         loan.id, receipt.id, e)
            await self.store.refresh(loan)
            raise LedgerPostFailure(f"voucher {receipt.id} was posted but could not be recorded") from e
        logger.info("Posted loan %s to Accurate as voucher %s", loan.id, receipt.id)
        return True
