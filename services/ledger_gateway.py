"""Accurate.id connector.

Wraps the journal-voucher and employee endpoints the loan service needs.
Authentication (OAuth code exchange, open-db) happens out of band; this client
only carries the resulting bearer token and session id.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from config import Settings
from schemas.ledger import DisbursementVoucher, EntryDetail, EntrySummary, VoucherReceipt
from services.errors import LedgerPostFailure, UpstreamUnavailableError

logger = logging.getLogger(__name__)

PAGE_SIZE = 200


class AccurateLedgerGateway:
    def __init__(
        self,
        *,
        base_url: str,
        access_token: str,
        session_id: str,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._session_id = session_id
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "AccurateLedgerGateway":
        return cls(
            base_url=settings.accurate_api_base_url,
            access_token=settings.accurate_access_token,
            session_id=settings.accurate_session_id,
            timeout_seconds=settings.accurate_http_timeout_seconds,
        )

    @property
    def is_authenticated(self) -> bool:
        """True once an access token and an open database session are configured."""
        return bool(self._access_token and self._session_id)

    def _headers(self) -> dict[str, str]:
        if not self.is_authenticated:
            raise UpstreamUnavailableError("Accurate.id authentication required")
        return {
            "Authorization": f"Bearer {self._access_token}",
            "X-Session-ID": self._session_id,
            "Accept": "application/json",
        }

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = self._headers()
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                resp = await client.request(
                    method, f"{self._base_url}/{path}", headers=headers, params=params, json=json
                )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Accurate.id unreachable: {e}") from e

        logger.debug("%s %s -> %s", method, resp.url, resp.status_code)
        if resp.status_code >= 400:
            raise UpstreamUnavailableError(f"Accurate.id HTTP {resp.status_code}: {resp.text}")
        try:
            body = resp.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Accurate.id returned a non-JSON response") from e
        if not isinstance(body, dict):
            raise UpstreamUnavailableError("Accurate.id returned an unexpected payload")
        return body

    async def get_entries_for_account(self, account_no: str) -> list[EntrySummary]:
        body = await self._request_json(
            "GET",
            "journal-voucher/list.do",
            params={
                "sp.page": "1",
                "sp.pageSize": str(PAGE_SIZE),
                "filter.accountNo.op": "EQUAL",
                "filter.accountNo.val": account_no,
            },
        )
        rows = body.get("d") or []
        summaries = [s for s in (EntrySummary.from_accurate(r) for r in rows) if s is not None]
        if len(summaries) != len(rows):
            logger.warning("Skipped %d malformed journal entries for account %s", len(rows) - len(summaries), account_no)
        return summaries

    async def get_entry_detail(self, entry_id: int) -> Optional[EntryDetail]:
        body = await self._request_json("GET", "journal-voucher/detail.do", params={"id": entry_id})
        return EntryDetail.from_accurate(body.get("d"))

    async def post_voucher(self, voucher: DisbursementVoucher) -> VoucherReceipt:
        try:
            body = await self._request_json("POST", "journal-voucher/save.do", json=voucher.to_accurate())
        except UpstreamUnavailableError as e:
            raise LedgerPostFailure(e.message) from e
        # Accurate signals business failures with s=false and messages in d
        if body.get("s") is False:
            raise LedgerPostFailure(f"Accurate.id rejected voucher: {body.get('d')}")
        receipt = body.get("r") or {}
        if receipt.get("id") is None:
            raise LedgerPostFailure("Accurate.id response carried no voucher id")
        return VoucherReceipt(id=str(receipt["id"]), number=receipt.get("number"))

    async def list_employees(self) -> list[dict[str, Any]]:
        body = await self._request_json("GET", "employee/list.do")
        return [e for e in (body.get("d") or []) if isinstance(e, dict)]

    async def get_employee_detail(self, employee_id: int) -> Optional[dict[str, Any]]:
        body = await self._request_json("GET", "employee/detail.do", params={"id": employee_id})
        detail = body.get("d")
        return detail if isinstance(detail, dict) else None
