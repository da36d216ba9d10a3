from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from models.enums import ActorRole


class Actor(BaseModel):
    employee_id: int
    name: str
    role: ActorRole

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    user_type: ActorRole
    message: str = "Login successful"
    token: str
    user: dict[str, Any]

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
