from __future__ import annotations

from floorsvc.application.dto.responses import TokenResponse, UserResponse
from floorsvc.application.ports.security import AccessClaims
from floorsvc.domain.user.entities import User


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        userId=int(user.user_id or 0),
        name=user.name,
        email=user.email,
        role=user.role.value,
        createdAt=user.created_at,
    )


def to_token_response(token: str, claims: AccessClaims, user: User) -> TokenResponse:
    return TokenResponse(
        accessToken=token,
        expiresAt=claims.expires_at,
        user=to_user_response(user),
    )
