from __future__ import annotations

from fastapi import APIRouter, Depends, status

from floorsvc.api.dependencies import current_claims
from floorsvc.application.dto.requests import LoginRequest, RegisterUserRequest
from floorsvc.application.dto.responses import TokenResponse, UserResponse
from floorsvc.application.mappers.user_mapper import to_token_response, to_user_response
from floorsvc.application.ports.security import AccessClaims
from floorsvc.application.use_cases.users import GetUser, LoginUser, RegisterUser
from floorsvc.infrastructure.db.repositories.user_repo import SqlAlchemyUserRepository
from floorsvc.infrastructure.security.passwords import BcryptPasswordHasher
from floorsvc.infrastructure.security.tokens import JwtTokenService

router = APIRouter(tags=["users"])


def _register_user_use_case() -> RegisterUser:
    return RegisterUser(
        user_repository=SqlAlchemyUserRepository(),
        password_hasher=BcryptPasswordHasher(),
    )


def _login_user_use_case() -> LoginUser:
    return LoginUser(
        user_repository=SqlAlchemyUserRepository(),
        password_hasher=BcryptPasswordHasher(),
        token_service=JwtTokenService(),
    )


def _get_user_use_case() -> GetUser:
    return GetUser(user_repository=SqlAlchemyUserRepository())


@router.post("/v1/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(request_dto: RegisterUserRequest) -> UserResponse:
    user = _register_user_use_case().execute(
        name=request_dto.name,
        email=request_dto.email,
        password=request_dto.password,
    )
    return to_user_response(user)


@router.post("/v1/login", response_model=TokenResponse)
def login(request_dto: LoginRequest) -> TokenResponse:
    token, claims, user = _login_user_use_case().execute(
        email=request_dto.email,
        password=request_dto.password,
    )
    return to_token_response(token, claims, user)


@router.get("/v1/users/me", response_model=UserResponse)
def me(claims: AccessClaims = Depends(current_claims)) -> UserResponse:
    return to_user_response(_get_user_use_case().execute(claims.user_id))
