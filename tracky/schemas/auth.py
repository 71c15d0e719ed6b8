"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from tracky.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)


class Credentials(BaseModel):
    """Username and password, used for both signup and login."""

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        description="Username (case-sensitive)",
    )
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )


class CurrentUser(BaseModel):
    """Authenticated user (id, username) as resolved from the request's token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str
