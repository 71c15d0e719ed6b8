"""Shared FastAPI dependencies: settings, identity verifier, and the resolved caller."""

from typing import Annotated

from fastapi import Depends, Request

from tracky.core.config import Settings
from tracky.core.identity import IdentityVerifier


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def get_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.verifier


def get_current_user_id(request: Request) -> int:
    """
    User id attached by IdentityMiddleware.

    Only protected routes use this dependency, and the middleware has already
    rejected unauthenticated requests to them, so a missing id is a wiring bug.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise RuntimeError(
            f"No resolved identity for {request.url.path}; is the path on the public allow-list?"
        )
    return user_id


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Verifier = Annotated[IdentityVerifier, Depends(get_verifier)]
