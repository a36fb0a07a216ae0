"""
Authentication Endpoints.

Self-registration and login. Login returns a bearer token to be sent as
``Authorization: Bearer <token>`` on every other endpoint.
"""

from fastapi import APIRouter

from mis_compras.core.models.io.users import LoginRequest, RegisterRequest, TokenResponse, UserRead
from mis_compras.server.core.security import token_lifetime_seconds
from mis_compras.server.services.deps import UserServiceDep

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRead,
    status_code=201,
    summary="Register",
    description="Create a USER account while self-registration is enabled.",
    responses={
        403: {"description": "Registration is disabled"},
        404: {"description": "Area not found"},
        409: {"description": "Email already registered"},
    },
)
async def register(data: RegisterRequest, service: UserServiceDep) -> UserRead:
    user = await service.register(data)
    return UserRead.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login",
    description="Exchange email and password for an access token.",
    responses={401: {"description": "Invalid email or password"}, 403: {"description": "Account is disabled"}},
)
async def login(data: LoginRequest, service: UserServiceDep) -> TokenResponse:
    """
    Log in.

    Unknown emails and wrong passwords get the same 401 response.
    """
    user, token = await service.login(data.email, data.password)
    return TokenResponse(access_token=token, expires_in=token_lifetime_seconds(), user=UserRead.model_validate(user))
