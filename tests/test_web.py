"""Cookie-session tests: login form, anti-forgery tokens, dashboard, sliding renewal, logout."""

import re
import unittest
from unittest.mock import patch

from app.core.config import settings
from app.core.i18n import MESSAGES
from app.core.security import create_csrf_token, create_session_token, decode_session_token
from app.models import UserRole
from tests.support import SEED_ADMIN_PASSWORD, SEED_ADMIN_USERNAME, ApiTestCase

_CSRF_FIELD = re.compile(r'name="csrfToken" value="([^"]+)"')


class WebTestCase(ApiTestCase):
    def _csrf_from(self, html: str) -> str:
        match = _CSRF_FIELD.search(html)
        self.assertIsNotNone(match, "form has no anti-forgery field")
        return match.group(1)

    def _form_token(self) -> str:
        return self._csrf_from(self.client.get("/auth/login").text)

    def _submit(self, identifier: str, password: str, auto_create: bool = False, csrf: str | None = None):
        data = {"usernameOrEmail": identifier, "password": password}
        data["csrfToken"] = self._form_token() if csrf is None else csrf
        if auto_create:
            data["autoCreate"] = "true"
        return self.client.post("/auth/login", data=data, follow_redirects=False)

    def _sign_in_admin(self) -> None:
        resp = self._submit(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD)
        self.assertEqual(resp.status_code, 303, resp.text)


class TestCookieLogin(WebTestCase):
    def test_login_form_renders(self) -> None:
        resp = self.client.get("/auth/login")
        self.assertEqual(resp.status_code, 200)
        self.assertIn('name="usernameOrEmail"', resp.text)
        self.assertIn('name="autoCreate"', resp.text)
        self.assertIn(settings.CSRF_COOKIE_NAME, resp.cookies)

    def test_login_form_is_localized(self) -> None:
        resp = self.client.get("/auth/login?lang=hi")
        self.assertIn(MESSAGES["hi"]["UsernameOrEmail"], resp.text)

    def test_root_redirects_anonymous_to_login(self) -> None:
        resp = self.client.get("/", follow_redirects=False)
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/auth/login")

    def test_bad_credentials_rerender_form(self) -> None:
        resp = self._submit(SEED_ADMIN_USERNAME, "wrong-password")
        self.assertEqual(resp.status_code, 200)
        self.assertIn(MESSAGES["en"]["InvalidCredentials"], resp.text)
        self.assertNotIn(settings.SESSION_COOKIE_NAME, resp.cookies)
        self.assertTrue(self._csrf_from(resp.text))

    def test_successful_login_sets_session_cookie(self) -> None:
        resp = self._submit(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD)
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/dashboard")
        set_cookie = resp.headers["set-cookie"]
        self.assertIn("httponly", set_cookie.lower())
        claims = decode_session_token(resp.cookies[settings.SESSION_COOKIE_NAME])
        self.assertEqual(claims["sub"], str(self.admin.id))
        self.assertEqual(claims["roles"], ["Admin"])

    def test_form_token_survives_a_second_page_load(self) -> None:
        first = self._form_token()
        self._form_token()
        resp = self._submit(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD, csrf=first)
        self.assertEqual(resp.status_code, 303)

    def test_auto_create_through_form(self) -> None:
        resp = self._submit("kim@x.com", "kim-password-1", auto_create=True)
        self.assertEqual(resp.status_code, 303)
        claims = decode_session_token(resp.cookies[settings.SESSION_COOKIE_NAME])
        self.assertEqual(claims["unique_name"], "kim")

    def test_unexpected_error_shows_generic_message(self) -> None:
        token = self._form_token()
        with patch("app.services.auth.find_by_identifier", side_effect=RuntimeError("db down")):
            resp = self._submit(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD, csrf=token)
        self.assertEqual(resp.status_code, 200)
        self.assertIn(MESSAGES["en"]["LoginError"], resp.text)
        self.assertNotIn(settings.SESSION_COOKIE_NAME, resp.cookies)


class TestLoginAntiForgery(WebTestCase):
    def _assert_refused(self, resp) -> None:
        self.assertEqual(resp.status_code, 400)
        self.assertIn(MESSAGES["en"]["InvalidAntiForgeryToken"], resp.text)
        self.assertNotIn(settings.SESSION_COOKIE_NAME, resp.cookies)
        self.assertEqual(self.client.get("/api/users").status_code, 401)

    def test_post_without_token_is_refused(self) -> None:
        self.client.get("/auth/login")
        self._assert_refused(self._submit(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD, csrf=""))

    def test_cross_site_post_without_cookie_is_refused(self) -> None:
        token = self._form_token()
        self.client.cookies.clear()
        resp = self.client.post(
            "/auth/login",
            data={"usernameOrEmail": SEED_ADMIN_USERNAME, "password": SEED_ADMIN_PASSWORD, "csrfToken": token},
            headers={"Origin": "https://evil.example"},
            follow_redirects=False,
        )
        self._assert_refused(resp)

    def test_token_for_another_nonce_is_refused(self) -> None:
        self.client.get("/auth/login")
        forged = create_csrf_token("someone-elses-nonce")
        self._assert_refused(self._submit(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD, csrf=forged))

    def test_session_token_is_not_an_anti_forgery_token(self) -> None:
        self.client.get("/auth/login")
        session_token = create_session_token(self.admin.id, "admin", "admin@example.com", ["Admin"])
        self._assert_refused(self._submit(SEED_ADMIN_USERNAME, SEED_ADMIN_PASSWORD, csrf=session_token))

    def test_refused_post_does_not_auto_create(self) -> None:
        self.client.get("/auth/login")
        self._submit("mallory@x.com", "mallory-pass-1", auto_create=True, csrf="")
        resp = self.client.post(
            "/api/auth/login",
            json={"usernameOrEmail": "mallory", "password": "mallory-pass-1"},
        )
        self.assertEqual(resp.status_code, 401)


class TestDashboard(WebTestCase):
    def test_session_cookie_authenticates_api_and_is_renewed(self) -> None:
        self._sign_in_admin()
        resp = self.client.get("/api/users")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()[0]["username"], SEED_ADMIN_USERNAME)
        self.assertIn(f"{settings.SESSION_COOKIE_NAME}=", resp.headers.get("set-cookie", ""))

    def test_session_cookie_grants_admin_routes(self) -> None:
        self._sign_in_admin()
        resp = self.client.post("/api/roles", json={"name": "Editor"})
        self.assertEqual(resp.status_code, 200)

    def test_renewed_session_keeps_roles_from_sign_in(self) -> None:
        self._sign_in_admin()
        self.db.query(UserRole).delete()
        self.db.commit()
        resp = self.client.get("/api/users")
        claims = decode_session_token(resp.cookies[settings.SESSION_COOKIE_NAME])
        self.assertEqual(claims["roles"], ["Admin"])
        self.assertEqual(self.client.post("/api/roles", json={"name": "Editor"}).status_code, 200)

    def test_dashboard_lists_users_and_roles(self) -> None:
        self._sign_in_admin()
        resp = self.client.get("/dashboard")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("admin@example.com", resp.text)
        self.assertIn("Full access to manage users and roles", resp.text)
        self.assertTrue(self._csrf_from(resp.text))

    def test_dashboard_requires_session(self) -> None:
        resp = self.client.get("/dashboard", follow_redirects=False)
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/auth/login")


class TestCookieLogout(WebTestCase):
    def test_logout_clears_session(self) -> None:
        self._sign_in_admin()
        token = self._csrf_from(self.client.get("/dashboard").text)
        resp = self.client.post("/auth/logout", data={"csrfToken": token}, follow_redirects=False)
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(self.client.get("/api/users").status_code, 401)
        self.assertEqual(self.client.get("/dashboard", follow_redirects=False).status_code, 303)

    def test_logout_without_token_keeps_session(self) -> None:
        self._sign_in_admin()
        resp = self.client.post("/auth/logout", follow_redirects=False)
        self.assertEqual(resp.status_code, 400)
        self.assertIn(MESSAGES["en"]["InvalidAntiForgeryToken"], resp.text)
        self.assertEqual(self.client.get("/api/users").status_code, 200)

    def test_logout_with_forged_token_keeps_session(self) -> None:
        self._sign_in_admin()
        forged = create_csrf_token("someone-elses-nonce")
        resp = self.client.post("/auth/logout", data={"csrfToken": forged}, follow_redirects=False)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.client.get("/api/users").status_code, 200)


if __name__ == "__main__":
    unittest.main()
