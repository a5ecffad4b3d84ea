"""Account registration, login and profile endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.storefront.api.http.deps import get_current_user, get_user_management_service
from src.storefront.api.http.middleware.limiter import rate_limit
from src.storefront.core.services import UserManagementService
from src.storefront.core.services.user.user_management import ProfileUpdate, RegistrationData
from src.storefront.entities.core.user import User

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    dependencies=[Depends(rate_limit())],
)
def register(
    data: RegistrationData,
    users: UserManagementService = Depends(get_user_management_service),
) -> AuthResponse:
    users.register(data)
    user, token = users.authenticate(data.email, data.password)
    return AuthResponse(access_token=token, user=user)


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(rate_limit())])
def login(
    credentials: LoginRequest,
    users: UserManagementService = Depends(get_user_management_service),
) -> AuthResponse:
    user, token = users.authenticate(credentials.email, credentials.password)
    return AuthResponse(access_token=token, user=user)


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)) -> User:
    return user


@router.put("/me", response_model=User)
def update_me(
    changes: ProfileUpdate,
    user: User = Depends(get_current_user),
    users: UserManagementService = Depends(get_user_management_service),
) -> User:
    return users.update_profile(user.id, changes)
