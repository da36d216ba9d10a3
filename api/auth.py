from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_actor_directory, get_bearer_token, get_ledger_gateway
from schemas.actor import LoginRequest, LoginResponse
from services.actor_directory import ActorDirectory

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, actors: ActorDirectory = Depends(get_actor_directory)):
    token, actor, user = await actors.login(body.username)
    return LoginResponse(user_type=actor.role, token=token, user=user).model_dump(mode="json", by_alias=True)


@router.post("/logout")
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    actors: ActorDirectory = Depends(get_actor_directory),
):
    actors.logout(token)
    return {"success": True, "message": "Logged out"}


@router.get("/auth-status")
async def auth_status(gateway=Depends(get_ledger_gateway)):
    """Whether the Accurate.id token and database session are in place."""
    if gateway.is_authenticated:
        return {"authenticated": True, "message": "Accurate.id is authenticated and ready"}
    return JSONResponse(
        status_code=503,
        content={"authenticated": False, "message": "Accurate.id authentication required"},
    )
