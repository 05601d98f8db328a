"""User account and guest session schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class GuestSessionResponse(BaseModel):
    guest_id: str = Field(..., description="Opaque guest session id, `guest_<uuid4>`")
    expires_in: int = Field(..., description="Seconds a guest record lives after its last change")


class UserRegister(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(None, max_length=200)
    guest_id: Optional[str] = Field(None, description="Guest session to merge into the new account")

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class UserLogin(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    guest_id: Optional[str] = Field(None, description="Guest session to merge on login")

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane@example.com",
                "password": "secret123",
                "guest_id": "guest_0b6f3c1e-5d1f-4a7e-9c55-2f0d7c1a9e42",
            }
        }


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MergeLineError(BaseModel):
    """One guest line that could not be moved to the user."""

    product_id: int
    error: str
    message: str


class MergeResult(BaseModel):
    merged: int = 0
    failed: int = 0
    errors: List[MergeLineError] = Field(default_factory=list)


class LoginMergeResult(BaseModel):
    """Per-record merge outcome; null when that record could not be merged."""

    cart: Optional[MergeResult] = None
    wishlist: Optional[MergeResult] = None


class AuthResponse(BaseModel):
    user: UserResponse
    merge_result: Optional[LoginMergeResult] = None
