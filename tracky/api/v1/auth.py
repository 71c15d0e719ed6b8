"""Signup, login, logout and the current-identity endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from tracky.api.deps import CurrentUserId, Verifier
from tracky.core.database import get_db
from tracky.core.errors import InvalidCredentialsError, NotFoundError, UsernameTakenError
from tracky.core.security import hash_password, verify_password
from tracky.models import User
from tracky.schemas.auth import Credentials, CurrentUser, MessageResponse
from tracky.services import store

logger = logging.getLogger(__name__)

router = APIRouter()


def authenticate(db: Session, username: str, password: str) -> User:
    """Return the user for valid credentials; raise InvalidCredentialsError otherwise."""
    try:
        user = store.find_user_by_username(db, username)
    except NotFoundError as e:
        raise InvalidCredentialsError("Invalid credentials") from e
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Invalid credentials")
    return user


@router.post("/signup", response_model=CurrentUser, status_code=status.HTTP_201_CREATED)
def signup(
    body: Credentials,
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """
    Create an account and its "Default" notebook.

    Returns 409 if the username is taken; nothing is written in that case.
    """
    try:
        user = store.create_user(db, body.username, hash_password(body.password))
    except UsernameTakenError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already taken",
        ) from e
    store.ensure_default_notebook(db, user.id)
    return CurrentUser(id=user.id, username=user.username)


@router.post("/login", response_model=MessageResponse)
def login(
    body: Credentials,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    verifier: Verifier,
) -> MessageResponse:
    """
    Authenticate with username and password and set the auth cookie.

    Unknown usernames and wrong passwords get the same 401.
    """
    try:
        user = authenticate(db, body.username, body.password)
    except InvalidCredentialsError as e:
        logger.info("Login failed", extra={"reason": "invalid_credentials"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        ) from e

    # Accounts created before notebooks existed get one on first login
    store.ensure_default_notebook(db, user.id)

    verifier.set_cookie(response, verifier.issue(user.id))
    logger.info("Login succeeded", extra={"user_id": user.id})
    return MessageResponse(message="Logged in")


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    _user_id: CurrentUserId,
    verifier: Verifier,
) -> MessageResponse:
    """Revoke the session (where the strategy keeps one) and clear the cookie."""
    token = request.cookies.get(verifier.cookie_name)
    if token:
        verifier.revoke(token)
    verifier.clear_cookie(response)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=CurrentUser)
def me(
    user_id: CurrentUserId,
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Return the identity the request is authenticated as."""
    try:
        user = store.get_user(db, user_id)
    except NotFoundError as e:
        # Token outlived its account (e.g. database reset); treat like any bad token
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        ) from e
    return CurrentUser(id=user.id, username=user.username)
