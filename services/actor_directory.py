"""
Maps bearer tokens to actors and employees to display names.

Sessions live in an injectable SessionStore so the API can swap it (or a test can
pre-seed it) without touching process-wide state.
"""
from __future__ import annotations

import logging
import secrets
from typing import Optional

from models.enums import ActorRole
from schemas.actor import Actor
from services.errors import AuthError, ValidationError

logger = logging.getLogger(__name__)

ADMIN_EMPLOYEE_ID = 0


class SessionStore:
    """In-memory token -> actor table. One instance per application."""

    def __init__(self) -> None:
        self._sessions: dict[str, Actor] = {}

    def issue(self, actor: Actor) -> str:
        token = secrets.token_hex(48)
        self._sessions[token] = actor
        return token

    def get(self, token: str) -> Optional[Actor]:
        return self._sessions.get(token)

    def revoke(self, token: str) -> None:
        self._sessions.pop(token, None)


class ActorDirectory:
    def __init__(self, sessions: SessionStore, gateway, admin_username: str = "admin") -> None:
        self._sessions = sessions
        self._gateway = gateway
        self._admin_username = admin_username.lower()

    def resolve_actor(self, token: Optional[str]) -> Actor:
        if not token:
            raise AuthError("Not authenticated")
        actor = self._sessions.get(token)
        if actor is None:
            raise AuthError("Invalid or expired token")
        return actor

    async def login(self, username: str) -> tuple[str, Actor, dict]:
        """Issue a token for `username`. Returns (token, actor, employee record)."""
        if username.strip().lower() == self._admin_username:
            actor = Actor(employee_id=ADMIN_EMPLOYEE_ID, name="Admin", role=ActorRole.PENGURUS)
            token = self._sessions.issue(actor)
            logger.info("Token created for admin user")
            return token, actor, {"name": actor.name, "id": actor.employee_id}

        employees = await self._gateway.list_employees()
        wanted = username.strip().lower()
        employee = next((e for e in employees if str(e.get("name", "")).lower() == wanted), None)
        if employee is None or employee.get("id") is None:
            raise AuthError("Invalid employee name")

        actor = Actor(employee_id=int(employee["id"]), name=employee["name"], role=ActorRole.ANGGOTA)
        token = self._sessions.issue(actor)
        logger.info("Token created for employee_id=%s", actor.employee_id)
        return token, actor, employee

    def logout(self, token: Optional[str]) -> Actor:
        actor = self.resolve_actor(token)
        self._sessions.revoke(token)
        logger.info("Token revoked for employee_id=%s", actor.employee_id)
        return actor

    async def resolve_member_name(self, employee_id: int) -> str:
        detail = await self._gateway.get_employee_detail(employee_id)
        name = (detail or {}).get("name")
        if not name:
            raise ValidationError(f"Employee {employee_id} could not be resolved")
        return name
