from pydantic import BaseModel, EmailStr, field_validator, model_validator
from typing import Optional, Literal
from datetime import datetime

from app.config.security import SecurityConfig


def _check_password(password: Optional[str], repeat_password: Optional[str]) -> None:
    if password != repeat_password:
        raise ValueError("Passwords do not match")
    min_length = SecurityConfig.ACCOUNTS['min_password_length']
    if len(password) < min_length:
        raise ValueError(f"Password must be at least {min_length} characters")


class UserCreate(BaseModel):
    username: str
    name: Optional[str] = None
    email: EmailStr
    password: str
    repeat_password: str
    role: Literal["ADMIN", "USER"] = "USER"

    @field_validator('username')
    def validate_username(cls, v):
        if not v.strip():
            raise ValueError("Username is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_passwords(self):
        _check_password(self.password, self.repeat_password)
        return self


class UserUpdate(BaseModel):
    username: Optional[str] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None  # only when changing it
    repeat_password: Optional[str] = None
    role: Optional[Literal["ADMIN", "USER"]] = None

    @field_validator('username')
    def validate_username(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Username cannot be blank")
        return v.strip() if v is not None else v

    @model_validator(mode="after")
    def validate_passwords(self):
        if self.password:
            _check_password(self.password, self.repeat_password)
        return self


class UserLogin(BaseModel):
    username: str
    password: str


class UserBasic(BaseModel):
    id: int
    username: str
    name: Optional[str] = None
    role: str

    model_config = {
        "from_attributes": True
    }


class UserOut(BaseModel):
    id: int
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str
    created_at: datetime

    model_config = {
        "from_attributes": True
    }
