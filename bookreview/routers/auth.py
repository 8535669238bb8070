from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from bookreview.domain.entities import User
from bookreview.domain.schemas import LoginRequest, RegisterRequest
from bookreview.routers.deps import get_auth_service, require_user
from bookreview.services.auth_service import (
    AccountExistsError,
    InvalidCredentialsError,
    LoginSuccess,
    RegistrationError,
)
from bookreview.services.session_service import SessionService

router = APIRouter(prefix="/api", tags=["auth"])


def _signed_in(request: Request, result: LoginSuccess, status_code: int) -> JSONResponse:
    response = JSONResponse(result.user.to_public(), status_code=status_code)
    request.app.state.session_service.set_cookie(response, result.session_token)
    return response


@router.post("/register")
def register(payload: RegisterRequest, request: Request):
    svc = get_auth_service(request)
    try:
        result = svc.register(payload.username, payload.password, payload.email, payload.full_name)
    except AccountExistsError as exc:
        raise HTTPException(400, str(exc))
    except RegistrationError as exc:
        raise HTTPException(400, exc.message)
    return _signed_in(request, result, 201)


@router.post("/login")
def login(payload: LoginRequest, request: Request):
    svc = get_auth_service(request)
    try:
        result = svc.login(payload.username, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, str(exc))
    return _signed_in(request, result, 200)


@router.post("/logout")
def logout(request: Request):
    get_auth_service(request).logout(SessionService.token_from(request))
    response = JSONResponse({"ok": True})
    SessionService.clear_cookie(response)
    return response


@router.get("/user")
def me(user: User = Depends(require_user)):
    return user.to_public()
