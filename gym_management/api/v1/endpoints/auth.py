"""
Authentication Module - API Endpoints

Registration, login and profile lookup. Login and register issue a signed
bearer token that every other endpoint expects in the ``Authorization``
header.
"""
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from gym_management.core.auth import CurrentUser, get_current_user
from gym_management.db.session import get_db
from gym_management.middleware.rate_limit import RATE_LIMITS, limiter
from gym_management.schemas.response import SuccessResponse, success_response
from gym_management.schemas.user import AuthPayload, User, UserCreate, UserLogin
from gym_management.services.user import user_service

router = APIRouter()


@router.post(
    "/register",
    response_model=SuccessResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(RATE_LIMITS["register"])
def register(
    request: Request,
    user_in: UserCreate,
    db: Session = Depends(get_db),
) -> Any:
    """
    Register a new account and return it together with an access token.

    Raises:
        400: invalid fields or email already registered
    """
    user, token = user_service.register(db, user_in)
    payload = AuthPayload(user=User.model_validate(user), token=token)
    return success_response("User registered successfully", payload, status.HTTP_201_CREATED)


@router.post("/login", response_model=SuccessResponse[AuthPayload])
@limiter.limit(RATE_LIMITS["login"])
def login(
    request: Request,
    credentials: UserLogin,
    db: Session = Depends(get_db),
) -> Any:
    """
    Exchange email and password for an access token.

    Raises:
        401: unknown email or wrong password
    """
    user, token = user_service.authenticate(db, credentials.email, credentials.password)
    payload = AuthPayload(user=User.model_validate(user), token=token)
    return success_response("Login successful", payload)


@router.get("/profile", response_model=SuccessResponse[User])
def get_profile(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    """Return the authenticated user's profile, for any role."""
    user = user_service.get_profile(db, current_user.id)
    return success_response("Profile retrieved successfully", User.model_validate(user))
