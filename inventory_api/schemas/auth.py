"""
Pydantic schemas for authentication.
"""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Credentials for obtaining an access token."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class UserResponse(BaseModel):
    """Public user data."""

    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class UserEnvelope(BaseModel):
    user: UserResponse


class LoginResponse(BaseModel):
    """Successful login."""

    message: str = "Login successful"
    user: UserResponse
    token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    """Plain status message."""

    message: str
