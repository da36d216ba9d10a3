from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from schemas.actor import Actor
from services.actor_directory import ActorDirectory, SessionStore
from services.loans import LoanService


def get_ledger_gateway(request: Request):
    return request.app.state.ledger_gateway


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_actor_directory(
    gateway=Depends(get_ledger_gateway),
    sessions: SessionStore = Depends(get_session_store),
) -> ActorDirectory:
    return ActorDirectory(sessions, gateway, admin_username=settings.admin_username)


def get_loan_service(
    db: AsyncSession = Depends(get_db),
    gateway=Depends(get_ledger_gateway),
    actors: ActorDirectory = Depends(get_actor_directory),
) -> LoanService:
    return LoanService(db, gateway, actors)


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer":
            return value.strip()
    return None


def get_current_actor(
    token: Optional[str] = Depends(get_bearer_token),
    actors: ActorDirectory = Depends(get_actor_directory),
) -> Actor:
    """Resolve `Authorization: Bearer <token>` to the calling actor."""
    return actors.resolve_actor(token)
