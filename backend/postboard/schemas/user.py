"""
Postboard Backend — User & Auth Schemas
=========================================

What:  Request bodies for registration/login and the public user shape.

Validation rules live on the fields. `field_messages` replaces pydantic's text
for the "missing or malformed" rules; other rules, such as a length cap,
keep pydantic's own message. The password hash has no field on
`UserResponse`, so it cannot leak through serialization.
"""

import uuid
from datetime import datetime
from typing import Annotated, ClassVar

from pydantic import BaseModel, EmailStr, Field, StringConstraints

from postboard.schemas.common import BLANK_ERRORS, FieldMessages, messages_for

# EmailStr reports a malformed address as a value_error
EMAIL_ERRORS = BLANK_ERRORS + ("value_error",)

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class RegisterRequest(BaseModel):
    """POST /api/users"""
    name: Name
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    field_messages: ClassVar[FieldMessages] = {
        **messages_for("name", "Name is required"),
        **messages_for("email", "Please include a valid email", EMAIL_ERRORS),
        **messages_for("password", "Please enter a password with 6 or more characters"),
    }


class LoginRequest(BaseModel):
    """POST /api/auth"""
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    field_messages: ClassVar[FieldMessages] = {
        **messages_for("email", "Please include a valid email", EMAIL_ERRORS),
        **messages_for("password", "Password is required"),
    }


class TokenResponse(BaseModel):
    token: str = Field(description="Session token; send it back in the x-auth-token header")


class UserResponse(BaseModel):
    """Public view of a user, returned by GET /api/auth."""
    id: uuid.UUID
    name: str
    email: str
    avatar: str
    created_at: datetime

    model_config = {"from_attributes": True}
