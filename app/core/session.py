"""Dashboard session cookie (set, clear, sliding renewal) and the form anti-forgery cookie."""

import secrets

import jwt
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.security import (
    create_session_token,
    decode_csrf_token,
    decode_session_token,
    generate_csrf_nonce,
    renew_session_token,
)
from app.models import User


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def sign_in(response: Response, user: User) -> None:
    """Start a cookie session for user."""
    token = create_session_token(user.id, user.username, user.email, user.role_names)
    set_session_cookie(response, token)


def sign_out(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def _sets_session_cookie(response: Response) -> bool:
    prefix = f"{settings.SESSION_COOKIE_NAME}="
    return any(
        value.startswith(prefix) for value in response.headers.getlist("set-cookie")
    )


class SessionRenewalMiddleware(BaseHTTPMiddleware):
    """Re-issue a still-valid session cookie so inactivity, not age, ends the session."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if not token or _sets_session_cookie(response):
            return response
        try:
            payload = decode_session_token(token)
        except jwt.PyJWTError:
            return response
        set_session_cookie(response, renew_session_token(payload))
        return response


def csrf_nonce(request: Request) -> str:
    """The anti-forgery nonce already held by the browser, or a fresh one."""
    return request.cookies.get(settings.CSRF_COOKIE_NAME) or generate_csrf_nonce()


def issue_csrf(response: Response, nonce: str) -> None:
    response.set_cookie(
        key=settings.CSRF_COOKIE_NAME,
        value=nonce,
        max_age=settings.CSRF_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="strict",
        path="/",
    )


def csrf_valid(request: Request, form_token: str | None) -> bool:
    """Double-submit check: the signed form token must name the nonce in the cookie."""
    nonce = request.cookies.get(settings.CSRF_COOKIE_NAME)
    if not nonce or not form_token:
        return False
    try:
        issued_for = decode_csrf_token(form_token)
    except jwt.PyJWTError:
        return False
    return secrets.compare_digest(issued_for, nonce)
