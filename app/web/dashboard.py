"""Server-rendered login form and dashboard backed by the session cookie."""

import logging
from html import escape
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.api.deps import principal_from_session
from app.core.database import get_db
from app.core.errors import AppError, InvalidAntiForgeryToken
from app.core.i18n import get_locale, translate
from app.core.security import create_csrf_token
from app.core.session import csrf_nonce, csrf_valid, issue_csrf, sign_in, sign_out
from app.services import auth as auth_service
from app.services import roles as role_service
from app.services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter()

_PAGE = """<!DOCTYPE html>
<html lang="{lang}">
<head><meta charset="utf-8"><title>{title}</title></head>
<body>
{body}
</body>
</html>
"""


def _translator(locale: str):
    def t(key: str) -> str:
        return escape(translate(key, locale))

    return t


def _page(locale: str, title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        _PAGE.format(lang=locale, title=escape(title), body=body),
        status_code=status_code,
    )


def _csrf_field(nonce: str) -> str:
    return f'<input type="hidden" name="csrfToken" value="{escape(create_csrf_token(nonce))}">'


def _login_page(
    request: Request,
    locale: str,
    username_or_email: str = "",
    auto_create: bool = False,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    t = _translator(locale)
    nonce = csrf_nonce(request)
    error_html = f'<p class="error" role="alert">{escape(error)}</p>' if error else ""
    checked = " checked" if auto_create else ""
    body = f"""<h1>{t("LoginTitle")}</h1>
{error_html}
<form method="post" action="/auth/login?lang={locale}">
  {_csrf_field(nonce)}
  <label>{t("UsernameOrEmail")} <input name="usernameOrEmail" value="{escape(username_or_email)}" required></label>
  <label>{t("Password")} <input name="password" type="password" required></label>
  <label><input name="autoCreate" type="checkbox" value="true"{checked}> {t("AutoCreate")}</label>
  <button type="submit">{t("SignIn")}</button>
</form>"""
    response = _page(locale, translate("LoginTitle", locale), body, status_code)
    issue_csrf(response, nonce)
    return response


@router.get("/", include_in_schema=False)
def index(request: Request) -> RedirectResponse:
    if principal_from_session(request) is not None:
        return RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    return RedirectResponse("/auth/login", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/auth/login", include_in_schema=False, response_model=None)
def login_form(
    request: Request,
    locale: Annotated[str, Depends(get_locale)],
) -> HTMLResponse | RedirectResponse:
    if principal_from_session(request) is not None:
        return RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    return _login_page(request, locale)


@router.post("/auth/login", include_in_schema=False, response_model=None)
def login_submit(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
    username_or_email: Annotated[str, Form(alias="usernameOrEmail")],
    password: Annotated[str, Form()],
    auto_create: Annotated[bool, Form(alias="autoCreate")] = False,
    csrf_token: Annotated[str, Form(alias="csrfToken")] = "",
) -> HTMLResponse | RedirectResponse:
    """
    Check credentials (creating the account if asked) and start a cookie session.

    Posts without a valid anti-forgery token are refused with 400 and never
    reach the credential check. Credential failures re-render the form with 200.
    """
    if not csrf_valid(request, csrf_token):
        logger.warning("Cookie login refused: missing or mismatched anti-forgery token")
        error = InvalidAntiForgeryToken()
        return _login_page(
            request,
            locale,
            username_or_email,
            auto_create,
            error=translate(error.message_key, locale),
            status_code=error.status_code,
        )
    try:
        user = auth_service.authenticate(db, username_or_email, password, auto_create)
        response = RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
        sign_in(response, user)
        return response
    except AppError as e:
        return _login_page(
            request,
            locale,
            username_or_email,
            auto_create,
            error=translate(e.message_key, locale),
        )
    except Exception:
        logger.exception("Cookie login failed for identifier=%s", username_or_email)
        db.rollback()
        return _login_page(
            request,
            locale,
            username_or_email,
            auto_create,
            error=translate("LoginError", locale),
        )


@router.post("/auth/logout", include_in_schema=False, response_model=None)
def logout(
    request: Request,
    locale: Annotated[str, Depends(get_locale)],
    csrf_token: Annotated[str, Form(alias="csrfToken")] = "",
) -> HTMLResponse | RedirectResponse:
    if not csrf_valid(request, csrf_token):
        logger.warning("Cookie logout refused: missing or mismatched anti-forgery token")
        error = InvalidAntiForgeryToken()
        t = _translator(locale)
        body = f"""<p class="error" role="alert">{t(error.message_key)}</p>
<p><a href="/dashboard">{t("Dashboard")}</a></p>"""
        return _page(locale, translate("SignOut", locale), body, status_code=error.status_code)
    response = RedirectResponse("/auth/login", status_code=status.HTTP_303_SEE_OTHER)
    sign_out(response)
    return response


@router.get("/dashboard", include_in_schema=False, response_model=None)
def dashboard(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    locale: Annotated[str, Depends(get_locale)],
) -> HTMLResponse | RedirectResponse:
    """Current user, all users with roles, and all roles."""
    principal = principal_from_session(request)
    if principal is None:
        return RedirectResponse("/auth/login", status_code=status.HTTP_303_SEE_OTHER)

    t = _translator(locale)
    nonce = csrf_nonce(request)
    user_rows = "\n".join(
        f"<tr><td>{u.id}</td><td>{escape(u.username)}</td><td>{escape(u.email)}</td>"
        f"<td>{escape(', '.join(u.role_names))}</td></tr>"
        for u in user_service.list_users(db)
    )
    role_rows = "\n".join(
        f"<tr><td>{r.id}</td><td>{escape(r.name)}</td><td>{escape(r.description or '')}</td></tr>"
        for r in role_service.list_roles(db)
    )
    body = f"""<h1>{t("Dashboard")}</h1>
<p>{t("Welcome")}, <strong>{escape(principal.username)}</strong> ({escape(", ".join(principal.roles))})</p>
<form method="post" action="/auth/logout">{_csrf_field(nonce)}<button type="submit">{t("SignOut")}</button></form>
<h2>{t("Users")}</h2>
<table id="users">
<tr><th>#</th><th>{t("Username")}</th><th>{t("Email")}</th><th>{t("Roles")}</th></tr>
{user_rows}
</table>
<h2>{t("Roles")}</h2>
<table id="roles">
<tr><th>#</th><th>{t("Name")}</th><th>{t("Description")}</th></tr>
{role_rows}
</table>"""
    response = _page(locale, translate("Dashboard", locale), body)
    issue_csrf(response, nonce)
    return response
