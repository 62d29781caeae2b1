from __future__ import annotations

import os

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from opentelemetry import trace

from floorsvc.api.middleware.request_id import get_request_id
from floorsvc.application.ports.security import AccessClaims, TokenService
from floorsvc.application.use_cases.context import Deadline, TraceContext
from floorsvc.domain.common.errors import AuthenticationError, PermissionDeniedError
from floorsvc.domain.user.entities import UserRole
from floorsvc.infrastructure.security.tokens import JwtTokenService

_bearer = HTTPBearer(auto_error=False)


class MissingTokenError(AuthenticationError):
    code = "MISSING_TOKEN"


def _token_service() -> TokenService:
    return JwtTokenService()


def current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> AccessClaims:
    if credentials is None or not credentials.credentials:
        raise MissingTokenError("missing bearer token")
    return _token_service().decode(credentials.credentials)


def require_staff(claims: AccessClaims = Depends(current_claims)) -> AccessClaims:
    if not claims.is_staff:
        raise PermissionDeniedError("manager or admin role required")
    return claims


def require_admin(claims: AccessClaims = Depends(current_claims)) -> AccessClaims:
    if claims.role != UserRole.ADMIN:
        raise PermissionDeniedError("admin role required")
    return claims


def trace_context() -> TraceContext:
    span_context = trace.get_current_span().get_span_context()
    trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else None
    return TraceContext(trace_id=trace_id, request_id=get_request_id())


def request_deadline() -> Deadline:
    return Deadline.after(float(os.getenv("REQUEST_DEADLINE_SECONDS", "5.0")))
