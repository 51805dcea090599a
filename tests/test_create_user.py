"""create_user CLI: argument validation happens before any database work."""

import contextlib
import io
import unittest
from unittest.mock import MagicMock, patch

from app.scripts import create_user

PASSWORD = "correct-horse-battery"


def run_cli(*argv: str) -> tuple[int, str, MagicMock]:
    session_scope = MagicMock()
    stderr = io.StringIO()
    with (
        patch.object(create_user.sys, "argv", ["create_user", *argv]),
        patch.object(create_user, "session_scope", session_scope),
        patch.object(create_user, "SqlUserStore") as store_cls,
        contextlib.redirect_stderr(stderr),
    ):
        store_cls.return_value.create.return_value = MagicMock(id=1, username=argv[0])
        code = create_user.main()
    return code, stderr.getvalue(), session_scope


class TestUsernameValidation(unittest.TestCase):
    """Usernames follow the same character rules as self-registration."""

    def test_rejects_characters_outside_pattern(self) -> None:
        for username in ("bob@example.com", "bob smith", "bob/../x", "böb"):
            with self.subTest(username=username):
                code, err, session_scope = run_cli(username, "bob@example.com", PASSWORD)
                self.assertEqual(code, 1)
                self.assertIn("Username may only contain", err)
                session_scope.assert_not_called()

    def test_accepts_letters_digits_and_punctuation(self) -> None:
        code, err, session_scope = run_cli("ops.admin_01-x", "ops@example.com", PASSWORD, "ADMIN")
        self.assertEqual(code, 0, err)
        session_scope.assert_called_once()

    def test_rejects_short_username(self) -> None:
        code, _err, session_scope = run_cli("ab", "ab@example.com", PASSWORD)
        self.assertEqual(code, 1)
        session_scope.assert_not_called()


if __name__ == "__main__":
    unittest.main()
