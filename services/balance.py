"""
Outstanding loan balance ("utang") for an employee.
Recomputed from Accurate journal vouchers on every request; never stored.
"""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Iterable, Optional

from schemas.ledger import EntryDetail

logger = logging.getLogger(__name__)


def compute_balance(details: Iterable[Optional[EntryDetail]], employee_id: int, account_no: str) -> Decimal:
    """Sum debit - credit over lines posted to `account_no` for `employee_id`."""
    balance = Decimal("0")
    for detail in details:
        if detail is None:
            continue
        for line in detail.lines:
            if line.account_no == account_no and line.employee_id == employee_id:
                balance += line.debit - line.credit
    return balance


async def fetch_employee_balance(gateway, employee_id: int, account_no: str) -> Decimal:
    summaries = await gateway.get_entries_for_account(account_no)
    logger.info("Found %d transactions in account %s; fetching details", len(summaries), account_no)
    details = await asyncio.gather(*(gateway.get_entry_detail(s.id) for s in summaries))
    balance = compute_balance(details, employee_id, account_no)
    logger.info("Calculated loan balance for employee %s: %s", employee_id, balance)
    return balance
