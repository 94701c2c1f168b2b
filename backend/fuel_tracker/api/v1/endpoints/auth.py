import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_tracker.core.db import get_session
from fuel_tracker.core.errors import UsernameTakenError, storage_errors
from fuel_tracker.core.rate_limit import (
    LOGIN_LIMIT_MESSAGE,
    REGISTER_LIMIT_MESSAGE,
    limiter,
    login_limit,
    register_limit,
)
from fuel_tracker.core.security import SESSION_USER_ID, SESSION_USERNAME, session_username
from fuel_tracker.schemas.auth import (
    AuthStatusOut,
    LoginOut,
    LoginRequest,
    LogoutOut,
    RegisterOut,
    RegisterRequest,
)
from fuel_tracker.services.accounts import authenticate_user, register_user


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=RegisterOut)
@limiter.limit(register_limit, error_message=REGISTER_LIMIT_MESSAGE)
async def register(
    request: Request,
    data: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> RegisterOut:
    try:
        with storage_errors("Registration failed"):
            try:
                async with session.begin():
                    await register_user(session, username=data.username, password=data.password)
            except IntegrityError as e:
                # A concurrent registration won the unique constraint.
                raise UsernameTakenError("Username already exists") from e
    except UsernameTakenError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return RegisterOut()


@router.post("/login", response_model=LoginOut)
@limiter.limit(login_limit, error_message=LOGIN_LIMIT_MESSAGE)
async def login(
    request: Request,
    data: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> LoginOut:
    with storage_errors("Login failed"):
        user = await authenticate_user(session, username=data.username, password=data.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    request.session.clear()
    request.session[SESSION_USER_ID] = user.id
    request.session[SESSION_USERNAME] = user.username
    logger.info("User %s logged in", user.username)
    return LoginOut(username=user.username)


@router.post("/logout", response_model=LogoutOut)
async def logout(request: Request) -> LogoutOut:
    username = session_username(request)
    request.session.clear()
    if username:
        logger.info("User %s logged out", username)
    return LogoutOut()


@router.get("/auth/status", response_model=AuthStatusOut)
async def auth_status(request: Request) -> AuthStatusOut:
    username = session_username(request)
    if username is None:
        return AuthStatusOut(authenticated=False)
    return AuthStatusOut(authenticated=True, username=username)
