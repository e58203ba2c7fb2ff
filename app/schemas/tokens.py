# app/schemas/tokens.py
from pydantic import BaseModel
from app.schemas.user import UserBasic

class SessionOut(BaseModel):
    id: int
    username: str
    role: str
    tier: str

class LoginResponse(BaseModel):
    success: bool
    user: UserBasic

    model_config = {
        "from_attributes": True  # required for SQLAlchemy models in Pydantic v2
    }
