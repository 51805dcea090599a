"""Tests for the access filter middleware on a small app with its own rule table."""

import unittest
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from app.api.middleware import AccessFilterMiddleware, extract_bearer_token
from app.core.roles import Role
from app.services.authorization import AuthorizationPolicy, authenticated, public, require_roles
from app.services.revocation import RevocationRegistry
from app.services.tokens import TokenService
from tests.support import TEST_SECRET, FakeClock, bearer

OTHER_SECRET = "another-signing-secret-abcdefghijklmnopqrstuvwxyz"


class ExplodingTokenService:
    """Token service whose verification fails with an unexpected error."""

    def verify(self, token: str, **kwargs: object) -> None:
        raise RuntimeError("key store unavailable")


def build_app(tokens, revocations: RevocationRegistry, fail_closed: bool = True) -> FastAPI:
    app = FastAPI()
    policy = AuthorizationPolicy(
        [
            public("/open"),
            authenticated("/me"),
            require_roles("/drive/**", Role.DRIVER),
            authenticated("/boom"),
        ]
    )
    app.add_middleware(
        AccessFilterMiddleware,
        policy=policy,
        tokens=tokens,
        revocations=revocations,
        fail_closed=fail_closed,
    )

    @app.get("/open")
    def open_route(request: Request) -> dict:
        return {"identity": request.state.identity}

    @app.get("/me")
    def me(request: Request) -> dict:
        identity = request.state.identity
        return {"subject": identity.subject, "role": identity.role.value}

    @app.get("/drive/rides")
    def drive(request: Request) -> dict:
        return {"subject": request.state.identity.subject}

    @app.get("/boom")
    def boom() -> dict:
        raise RuntimeError("handler failure")

    return app


class TestExtractBearerToken(unittest.TestCase):
    def test_extracts_token(self) -> None:
        self.assertEqual(extract_bearer_token("Bearer abc.def.ghi"), "abc.def.ghi")
        self.assertEqual(extract_bearer_token("bearer abc"), "abc")

    def test_rejects_other_schemes(self) -> None:
        self.assertIsNone(extract_bearer_token(None))
        self.assertIsNone(extract_bearer_token(""))
        self.assertIsNone(extract_bearer_token("Basic dXNlcjpwYXNz"))
        self.assertIsNone(extract_bearer_token("Bearer"))


class TestAccessFilter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.tokens = TokenService(TEST_SECRET, clock=self.clock)
        self.revocations = RevocationRegistry(clock=self.clock)
        self.client = TestClient(build_app(self.tokens, self.revocations))

    def _token(self, role: Role = Role.PASSENGER, subject: str = "alice") -> str:
        return self.tokens.issue(subject, role, timedelta(minutes=10), user_id=1)

    def test_public_route_without_header(self) -> None:
        r = self.client.get("/open")
        self.assertEqual(r.status_code, 200)
        self.assertIsNone(r.json()["identity"])

    def test_public_route_ignores_bad_token(self) -> None:
        r = self.client.get("/open", headers=bearer("garbage"))
        self.assertEqual(r.status_code, 200)

    def test_missing_header_is_unauthenticated(self) -> None:
        r = self.client.get("/me")
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "unauthenticated")
        self.assertEqual(r.headers["WWW-Authenticate"], "Bearer")

    def test_non_bearer_scheme_is_unauthenticated(self) -> None:
        r = self.client.get("/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "unauthenticated")

    def test_valid_token_sets_identity(self) -> None:
        r = self.client.get("/me", headers=bearer(self._token()))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"subject": "alice", "role": "PASSENGER"})

    def test_wrong_role_gets_access_denied_body(self) -> None:
        r = self.client.get("/drive/rides", headers=bearer(self._token(Role.PASSENGER)))
        self.assertEqual(r.status_code, 403)
        body = r.json()
        self.assertEqual(set(body), {"timestamp", "message", "details"})
        self.assertEqual(body["message"], "Access denied")
        self.assertEqual(body["details"], "uri=/drive/rides")

    def test_driver_and_both_allowed(self) -> None:
        for role in (Role.DRIVER, Role.BOTH):
            with self.subTest(role=role):
                r = self.client.get("/drive/rides", headers=bearer(self._token(role)))
                self.assertEqual(r.status_code, 200)

    def test_expired_token(self) -> None:
        token = self._token()
        self.clock.advance(minutes=10)
        r = self.client.get("/me", headers=bearer(token))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "token_expired")

    def test_malformed_token(self) -> None:
        r = self.client.get("/me", headers=bearer("not-a-jwt"))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "token_malformed")

    def test_bad_signature(self) -> None:
        forged = TokenService(OTHER_SECRET, clock=self.clock).issue(
            "alice", Role.ADMIN, timedelta(minutes=10)
        )
        r = self.client.get("/me", headers=bearer(forged))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "token_signature_invalid")

    def test_refresh_token_not_accepted_as_access(self) -> None:
        token = self.tokens.issue(
            "alice", Role.PASSENGER, timedelta(minutes=10), token_type="refresh"
        )
        r = self.client.get("/me", headers=bearer(token))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "token_malformed")

    def test_revoked_token(self) -> None:
        token = self._token()
        self.revocations.revoke(token, self.clock() + timedelta(minutes=10))
        r = self.client.get("/me", headers=bearer(token))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "token_revoked")

    def test_unmatched_route_requires_authentication(self) -> None:
        r = self.client.get("/nowhere")
        self.assertEqual(r.status_code, 401)
        r = self.client.get("/nowhere", headers=bearer(self._token()))
        self.assertEqual(r.status_code, 404)

    def test_handler_error_is_not_an_auth_failure(self) -> None:
        client = TestClient(build_app(self.tokens, self.revocations), raise_server_exceptions=False)
        r = client.get("/boom", headers=bearer(self._token()))
        self.assertEqual(r.status_code, 500)


class TestUnexpectedAuthenticationErrors(unittest.TestCase):
    def setUp(self) -> None:
        self.revocations = RevocationRegistry()

    def test_fail_closed_rejects(self) -> None:
        client = TestClient(build_app(ExplodingTokenService(), self.revocations, fail_closed=True))
        with self.assertLogs("app.api.middleware", level="ERROR"):
            r = client.get("/me", headers=bearer("anything"))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "authentication_error")

    def test_fail_open_continues_unauthenticated(self) -> None:
        client = TestClient(build_app(ExplodingTokenService(), self.revocations, fail_closed=False))
        with self.assertLogs("app.api.middleware", level="ERROR"):
            protected = client.get("/me", headers=bearer("anything"))
        self.assertEqual(protected.status_code, 401)
        self.assertEqual(protected.json()["error"], "unauthenticated")

    def test_public_routes_never_reach_token_service(self) -> None:
        client = TestClient(build_app(ExplodingTokenService(), self.revocations))
        r = client.get("/open", headers=bearer("anything"))
        self.assertEqual(r.status_code, 200)


if __name__ == "__main__":
    unittest.main()
