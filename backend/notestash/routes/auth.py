"""
NoteStash Backend: Auth Route Handlers
=======================================

What:  Registration, login, profile lookup and password change.
How:   Request bodies are validated by the schemas (email shape, password
       length ≥ 6); everything else is delegated to UserService.

There are no session tokens. A successful login returns the user so the
client can send its email in X-User-Email on later requests.
"""

import logging

from fastapi import APIRouter, Depends, status

from notestash.routes.deps import get_current_user, get_store
from notestash.schemas.common import ErrorResponse, MessageResponse
from notestash.schemas.user import (
    LoginRequest,
    LoginResponse,
    PasswordUpdate,
    RegisterResponse,
    UserCreate,
    UserRecord,
    UserResponse,
)
from notestash.services.user_service import user_service
from notestash.store import KeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Register a new account",
)
async def register(
    body: UserCreate,
    store: KeyValueStore = Depends(get_store),
) -> RegisterResponse:
    user = await user_service.create_user(store, body.email, body.password)
    return RegisterResponse(user=user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Check credentials",
)
async def login(
    body: LoginRequest,
    store: KeyValueStore = Depends(get_store),
) -> LoginResponse:
    user = await user_service.authenticate(store, body.email, body.password)
    return LoginResponse(user=user.to_response())


@router.get(
    "/profile",
    response_model=UserResponse,
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Get the caller's profile",
)
async def profile(current_user: UserRecord = Depends(get_current_user)) -> UserResponse:
    return current_user.to_response()


@router.put(
    "/password",
    response_model=MessageResponse,
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Change the caller's password",
)
async def update_password(
    body: PasswordUpdate,
    current_user: UserRecord = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
) -> MessageResponse:
    return await user_service.update_password(store, current_user.email, body.new_password)
