"""
API request and response models for sessiongate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.
"""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request body for POST /auth/login.

    username is not whitespace-stripped: usernames are case- and
    byte-sensitive identifiers. password defaults to "" so that a missing
    password reaches the auth flow (and fails there) instead of being
    reported as a schema error.
    """

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(default="", max_length=255)


class SignupRequest(LoginRequest):
    """Request body for POST /auth/signup. Same shape as LoginRequest."""


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
