from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from paytrack.core.database import get_db
from paytrack.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from paytrack.schemas.common import Envelope
from paytrack.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=Envelope[AuthResponse],
    status_code=201,
    summary="Register a staff user",
    responses={409: {"description": "Email already registered"}},
)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
) -> Envelope[AuthResponse]:
    token, user = AuthService(db).register(data.name, data.email, data.password)
    return Envelope(
        data=AuthResponse(token=token, user=UserResponse.model_validate(user)),
        message="User registered successfully",
    )


@router.post(
    "/login",
    response_model=Envelope[AuthResponse],
    summary="Log in and obtain a session token",
    responses={401: {"description": "Invalid email or password"}},
)
async def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
) -> Envelope[AuthResponse]:
    token, user = AuthService(db).login(data.email, data.password)
    return Envelope(data=AuthResponse(token=token, user=UserResponse.model_validate(user)))
