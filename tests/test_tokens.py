"""Unit tests for app.services.tokens: issuance, verification failures and key validation."""

import base64
import json
import unittest
from datetime import timedelta

import jwt

from app.core.roles import Role
from app.services.tokens import (
    TokenConfigError,
    TokenError,
    TokenExpiredError,
    TokenMalformedError,
    TokenService,
    TokenSignatureError,
)
from tests.support import TEST_SECRET, FakeClock

TTL = timedelta(minutes=30)


def _b64url(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class TestIssueAndVerify(unittest.TestCase):
    """issue then verify returns the exact subject and role."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.service = TokenService(TEST_SECRET, clock=self.clock)

    def test_round_trip_subject_and_role(self) -> None:
        for role in Role:
            token = self.service.issue("alice", role, TTL, user_id=7)
            identity = self.service.verify(token)
            self.assertEqual(identity.subject, "alice")
            self.assertEqual(identity.role, role)
            self.assertEqual(identity.user_id, 7)
            self.assertEqual(identity.token_type, "access")

    def test_expiry_is_issue_time_plus_ttl(self) -> None:
        token = self.service.issue("alice", Role.PASSENGER, TTL)
        identity = self.service.verify(token)
        self.assertEqual(identity.issued_at, self.clock.now)
        self.assertEqual(identity.expires_at, self.clock.now + TTL)

    def test_each_token_has_unique_id(self) -> None:
        first = self.service.verify(self.service.issue("alice", Role.PASSENGER, TTL))
        second = self.service.verify(self.service.issue("alice", Role.PASSENGER, TTL))
        self.assertNotEqual(first.token_id, second.token_id)

    def test_verify_is_deterministic(self) -> None:
        token = self.service.issue("bob", Role.DRIVER, TTL)
        self.assertEqual(self.service.verify(token), self.service.verify(token))

    def test_non_positive_ttl_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.service.issue("alice", Role.PASSENGER, timedelta(0))


class TestExpiry(unittest.TestCase):
    """Tokens verify until issue+ttl and fail with Expired from then on."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.service = TokenService(TEST_SECRET, clock=self.clock)
        self.token = self.service.issue("alice", Role.PASSENGER, TTL)

    def test_valid_just_before_expiry(self) -> None:
        self.clock.advance(seconds=TTL.total_seconds() - 1)
        self.assertEqual(self.service.verify(self.token).subject, "alice")

    def test_expired_exactly_at_expiry(self) -> None:
        self.clock.advance(seconds=TTL.total_seconds())
        with self.assertRaises(TokenExpiredError) as ctx:
            self.service.verify(self.token)
        self.assertEqual(ctx.exception.code, "token_expired")

    def test_expired_after_expiry(self) -> None:
        self.clock.advance(days=2)
        with self.assertRaises(TokenExpiredError):
            self.service.verify(self.token)


class TestTampering(unittest.TestCase):
    """Signature and structure failures are reported with distinct errors."""

    def setUp(self) -> None:
        self.service = TokenService(TEST_SECRET, clock=FakeClock())
        self.token = self.service.issue("alice", Role.PASSENGER, TTL)

    def test_flipped_signature_character(self) -> None:
        header, payload, signature = self.token.split(".")
        for index in range(len(signature)):
            for replacement in ("A", "B", "-", "!", "="):
                if signature[index] == replacement:
                    continue
                forged_sig = signature[:index] + replacement + signature[index + 1 :]
                with self.subTest(index=index, replacement=replacement):
                    with self.assertRaises(TokenSignatureError):
                        self.service.verify(f"{header}.{payload}.{forged_sig}")

    def test_truncated_or_extended_signature(self) -> None:
        header, payload, signature = self.token.split(".")
        for forged_sig in (signature[:-1], signature + "A", signature + "=", ""):
            with self.subTest(signature=forged_sig):
                with self.assertRaises(TokenSignatureError):
                    self.service.verify(f"{header}.{payload}.{forged_sig}")

    def test_modified_payload_keeps_old_signature(self) -> None:
        header, _payload, signature = self.token.split(".")
        claims = jwt.decode(self.token, options={"verify_signature": False})
        claims["role"] = Role.ADMIN.value
        with self.assertRaises(TokenSignatureError):
            self.service.verify(f"{header}.{_b64url(claims)}.{signature}")

    def test_token_signed_with_other_key(self) -> None:
        other = TokenService("another-secret-that-is-also-32-bytes-long!", clock=FakeClock())
        with self.assertRaises(TokenSignatureError):
            self.service.verify(other.issue("alice", Role.PASSENGER, TTL))

    def test_garbage_is_malformed(self) -> None:
        for garbage in ("", "not-a-token", "a.b", "a.b.c"):
            with self.subTest(token=garbage):
                with self.assertRaises(TokenMalformedError) as ctx:
                    self.service.verify(garbage)
                self.assertEqual(ctx.exception.code, "token_malformed")

    def test_unsigned_token_rejected(self) -> None:
        claims = jwt.decode(self.token, options={"verify_signature": False})
        unsigned = jwt.encode(claims, key=None, algorithm="none")
        with self.assertRaises(TokenError):
            self.service.verify(unsigned)

    def test_unknown_role_claim_is_malformed(self) -> None:
        claims = jwt.decode(self.token, options={"verify_signature": False})
        claims["role"] = "SUPERUSER"
        forged = jwt.encode(claims, TEST_SECRET, algorithm="HS256")
        with self.assertRaises(TokenMalformedError):
            self.service.verify(forged)

    def test_missing_required_claim_is_malformed(self) -> None:
        claims = jwt.decode(self.token, options={"verify_signature": False})
        del claims["jti"]
        forged = jwt.encode(claims, TEST_SECRET, algorithm="HS256")
        with self.assertRaises(TokenMalformedError):
            self.service.verify(forged)


class TestTokenTypes(unittest.TestCase):
    """Access and refresh tokens are not interchangeable."""

    def setUp(self) -> None:
        self.service = TokenService(TEST_SECRET, clock=FakeClock())

    def test_refresh_token_rejected_as_access(self) -> None:
        token = self.service.issue("alice", Role.PASSENGER, TTL, token_type="refresh")
        with self.assertRaises(TokenMalformedError):
            self.service.verify(token)
        self.assertEqual(self.service.verify(token, expected_type="refresh").subject, "alice")

    def test_access_token_rejected_as_refresh(self) -> None:
        token = self.service.issue("alice", Role.PASSENGER, TTL)
        with self.assertRaises(TokenMalformedError):
            self.service.verify(token, expected_type="refresh")


class TestKeyValidation(unittest.TestCase):
    """The service refuses to start with a missing or short key."""

    def test_empty_secret(self) -> None:
        with self.assertRaises(TokenConfigError):
            TokenService("")

    def test_short_secret_for_hs256(self) -> None:
        with self.assertRaises(TokenConfigError):
            TokenService("x" * 31)
        TokenService("x" * 32)

    def test_hs512_requires_64_bytes(self) -> None:
        with self.assertRaises(TokenConfigError):
            TokenService("x" * 63, algorithm="HS512")
        service = TokenService("x" * 64, algorithm="HS512", clock=FakeClock())
        token = service.issue("alice", Role.DRIVER, TTL)
        self.assertEqual(service.verify(token).role, Role.DRIVER)

    def test_unsupported_algorithm(self) -> None:
        with self.assertRaises(TokenConfigError):
            TokenService(TEST_SECRET, algorithm="RS256")


if __name__ == "__main__":
    unittest.main()
