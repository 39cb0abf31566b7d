# yoda_events/schemas/user.py
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


# Password typed twice on the registration form
class RepeatedPassword(BaseModel):
    first: str = Field(..., min_length=6, max_length=4096)
    second: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.first != self.second:
            raise ValueError("The password fields must match.")
        return self


# Schema for registration requests
class RegisterForm(BaseModel):
    username: str = Field(..., min_length=3, max_length=255)
    email: EmailStr
    plain_password: RepeatedPassword

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter a clever username")
        return v


# Schema for login; username or email
class UserLogin(BaseModel):
    username: str
    password: str


# Output schema for user profile details
class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    roles: List[str] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            roles=user.get_roles(),
            created_at=user.created_at,
        )


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegistrationResponse(Token):
    user: UserResponse
    message: str
