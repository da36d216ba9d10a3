"""
HTTP surface: login, loan routes and dashboard, with the database and the
Accurate.id gateway swapped for in-memory fakes.
"""
import unittest
from decimal import Decimal

import httpx

from database import get_db
from fakes import FakeLedgerGateway, line, make_database
from main import app
from schemas.ledger import EntryDetail
from services.actor_directory import SessionStore


class ApiTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine, session_factory = await make_database()

        async def override_get_db():
            async with session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_db] = override_get_db
        self.gateway = FakeLedgerGateway()
        app.state.sessions = SessionStore()
        app.state.ledger_gateway = self.gateway
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()
        await self.engine.dispose()

    async def _login(self, username: str) -> dict:
        resp = await self.client.post("/api/login", json={"username": username})
        self.assertEqual(resp.status_code, 200, resp.text)
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    async def _submit(self, headers, amount=1000000, tenure=12) -> dict:
        resp = await self.client.post("/api/loan-applications", json={"amount": amount, "tenure": tenure}, headers=headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()


class TestAuth(ApiTestCase):
    async def test_health(self):
        """GET /health -> ok."""
        resp = await self.client.get("/health")
        self.assertEqual(resp.json(), {"status": "ok"})

    async def test_admin_login(self):
        """Admin login in any case -> pengurus token for employee id 0."""
        resp = await self.client.post("/api/login", json={"username": "Admin"})
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["userType"], "pengurus")
        self.assertEqual(body["user"], {"name": "Admin", "id": 0})

    async def test_member_login_is_case_insensitive(self):
        """Lowercase employee name -> anggota token for that employee."""
        resp = await self.client.post("/api/login", json={"username": "budi santoso"})
        body = resp.json()
        self.assertEqual(body["userType"], "anggota")
        self.assertEqual(body["user"]["id"], 7)
        self.assertEqual(len(body["token"]), 96)

    async def test_unknown_member(self):
        """Name not in the Accurate employee list -> 401."""
        resp = await self.client.post("/api/login", json={"username": "nobody"})
        self.assertEqual(resp.status_code, 401)

    async def test_login_when_accurate_is_down(self):
        """Employee list unreachable -> 503."""
        self.gateway.unavailable = True
        resp = await self.client.post("/api/login", json={"username": "budi santoso"})
        self.assertEqual(resp.status_code, 503)

    async def test_routes_require_token(self):
        """Missing or forged bearer token -> 401."""
        self.assertEqual((await self.client.get("/api/loan-applications")).status_code, 401)
        resp = await self.client.get("/api/loan-applications", headers={"Authorization": "Bearer forged"})
        self.assertEqual(resp.status_code, 401)

    async def test_logout_revokes_token(self):
        """Logout -> the same token is refused afterwards, and a second logout is 401."""
        headers = await self._login("budi santoso")
        self.assertEqual((await self.client.get("/api/loan-applications", headers=headers)).status_code, 200)

        resp = await self.client.post("/api/logout", headers=headers)
        self.assertEqual(resp.json(), {"success": True, "message": "Logged out"})
        self.assertEqual((await self.client.get("/api/loan-applications", headers=headers)).status_code, 401)
        self.assertEqual((await self.client.post("/api/logout", headers=headers)).status_code, 401)

    async def test_auth_status_ready(self):
        """Accurate session configured -> 200 authenticated."""
        resp = await self.client.get("/api/auth-status")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"authenticated": True, "message": "Accurate.id is authenticated and ready"})

    async def test_auth_status_missing_session(self):
        """No Accurate token or session -> 503 with authenticated false."""
        self.gateway.is_authenticated = False
        resp = await self.client.get("/api/auth-status")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json(), {"authenticated": False, "message": "Accurate.id authentication required"})


class TestLoanRoutes(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.member = await self._login("Budi Santoso")
        self.admin = await self._login("admin")

    async def _act(self, loan_id, action, reason=None, headers=None):
        body = {"action": action}
        if reason is not None:
            body["reason"] = reason
        return await self.client.patch(f"/api/loan-applications/{loan_id}", json=body, headers=headers or self.admin)

    async def test_submit(self):
        """Member submits -> 201, pending staff approval, name from the directory."""
        loan = await self._submit(self.member)
        self.assertEqual(loan["status"], "PENDING_STAFF_APPROVAL")
        self.assertEqual(loan["memberName"], "Budi Santoso")
        self.assertEqual(loan["employeeId"], 7)
        self.assertEqual(loan["tenureMonths"], 12)
        self.assertEqual(Decimal(loan["amount"]), Decimal("1000000"))
        self.assertIsNone(loan["approverLevel1Id"])

    async def test_submit_validates_body(self):
        """Zero amount, negative tenure or missing tenure -> 422."""
        for body in ({"amount": 0, "tenure": 12}, {"amount": 1000, "tenure": -1}, {"amount": 1000}):
            with self.subTest(body=body):
                resp = await self.client.post("/api/loan-applications", json=body, headers=self.member)
                self.assertEqual(resp.status_code, 422)

    async def test_full_approval(self):
        """Four approvals -> APPROVED with one voucher; a fifth approve -> 409."""
        loan = await self._submit(self.member)
        for expected in ("PENDING_MANAGER_APPROVAL", "PENDING_BENDAHARA_APPROVAL", "PENDING_KETUA_APPROVAL", "APPROVED"):
            resp = await self._act(loan["id"], "approve")
            self.assertEqual(resp.status_code, 200, resp.text)
            self.assertEqual(resp.json()["status"], expected)

        body = resp.json()
        self.assertEqual(body["ledger"], {"attempted": True, "succeeded": True, "warning": None})
        self.assertEqual(body["approverLevel4Id"], 0)
        self.assertEqual(body["ledgerVoucherId"], "JV-1")
        self.assertEqual(len(self.gateway.posted), 1)

        resp = await self._act(loan["id"], "approve")
        self.assertEqual(resp.status_code, 409)

    async def test_ledger_failure_is_a_warning(self):
        """Voucher post fails -> 200 with a ledger warning; ledger-sync later records the voucher."""
        self.gateway.fail_post = True
        loan = await self._submit(self.member)
        for _ in range(4):
            resp = await self._act(loan["id"], "approve")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "APPROVED")
        self.assertFalse(body["ledger"]["succeeded"])
        self.assertIsNotNone(body["ledger"]["warning"])

        self.gateway.fail_post = False
        resp = await self.client.post(f"/api/loan-applications/{loan['id']}/ledger-sync", headers=self.admin)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["ledgerVoucherId"], "JV-2")

    async def test_rejection(self):
        """Reject without reason -> 400; with reason -> REJECTED and final."""
        loan = await self._submit(self.member)
        await self._act(loan["id"], "approve")

        resp = await self._act(loan["id"], "reject")
        self.assertEqual(resp.status_code, 400)

        resp = await self._act(loan["id"], "reject", reason="insufficient tenure")
        body = resp.json()
        self.assertEqual(body["status"], "REJECTED")
        self.assertEqual(body["rejectionReason"], "insufficient tenure")
        self.assertEqual(body["approverLevel1Id"], 0)
        self.assertFalse(body["ledger"]["attempted"])

        resp = await self._act(loan["id"], "approve")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(self.gateway.posted, [])

    async def test_invalid_action(self):
        """Unknown action name -> 422."""
        loan = await self._submit(self.member)
        resp = await self._act(loan["id"], "escalate")
        self.assertEqual(resp.status_code, 422)

    async def test_not_found(self):
        """Unknown loan id on PATCH and GET -> 404."""
        resp = await self._act("loan-missing", "approve")
        self.assertEqual(resp.status_code, 404)
        resp = await self.client.get("/api/loan-applications/loan-missing", headers=self.admin)
        self.assertEqual(resp.status_code, 404)

    async def test_list_with_status_filter(self):
        """Status query parameter -> only loans in that status."""
        first = await self._submit(self.member)
        await self._submit(self.member)
        await self._act(first["id"], "approve")

        resp = await self.client.get("/api/loan-applications", headers=self.admin)
        self.assertEqual(len(resp.json()), 2)
        resp = await self.client.get(
            "/api/loan-applications", params={"status": "PENDING_MANAGER_APPROVAL"}, headers=self.admin
        )
        self.assertEqual([loan["id"] for loan in resp.json()], [first["id"]])

    async def test_get_one(self):
        """GET by id -> that loan."""
        loan = await self._submit(self.member)
        resp = await self.client.get(f"/api/loan-applications/{loan['id']}", headers=self.member)
        self.assertEqual(resp.json()["id"], loan["id"])


class TestDashboard(ApiTestCase):
    async def test_balance_is_recomputed(self):
        """Dashboard -> employee detail plus balance folded from vouchers (100 - 40 = 60)."""
        self.gateway.details = {
            1: EntryDetail(id=1, lines=[line(7, debit=100)]),
            2: EntryDetail(id=2, lines=[line(7, credit=40)]),
            3: EntryDetail(id=3, lines=[line(9, debit=50)]),
        }
        headers = await self._login("budi santoso")
        resp = await self.client.get("/api/dashboard-data", headers=headers)
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["name"], "Budi Santoso")
        self.assertEqual(body["utang"], 60)

    async def test_ledger_down(self):
        """Accurate unreachable while folding the balance -> 503."""
        headers = await self._login("budi santoso")
        self.gateway.unavailable = True
        resp = await self.client.get("/api/dashboard-data", headers=headers)
        self.assertEqual(resp.status_code, 503)

    async def test_employees(self):
        """Employee list -> ids from Accurate."""
        headers = await self._login("admin")
        resp = await self.client.get("/api/employees", headers=headers)
        self.assertEqual([e["id"] for e in resp.json()], [7, 9])


if __name__ == "__main__":
    unittest.main()
