"""
core/errors.py -- Typed failure taxonomy shared by auth/, forum/, and api/.

Every expected failure of a forum operation is one of these exceptions. Each
carries a machine-readable code (kept verbatim for client compatibility) and
the HTTP status the transport layer should answer with. The core raises them
exactly once per call and never retries; api/main.py turns them into the
standard error envelope.

Taxonomy:
  AuthenticationFailedError  -- bad credentials at sign-in      ATH-001/002   401
  AuthorizationFailedError   -- not signed in / signed out      ATHR-001/002  401
                                forbidden                       ATHR-003      403
  NotFoundError              -- answer / question / user absent ANS-001, QUES-001, USR-001  404
  SignUpRestrictedError      -- duplicate username / email      SGR-001/002   409
  SignOutRestrictedError     -- no active session to close      SGR-001       401
  ConflictError              -- token collision, stale edit     ATH-003, ANS-002  409

Layer rule: no imports from api/, auth/, or forum/.
"""

from __future__ import annotations


class ForumError(Exception):
    """Base class for expected, client-caused failures."""

    status_code: int = 400

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class AuthenticationFailedError(ForumError):
    status_code = 401


class AuthorizationFailedError(ForumError):
    """Guard failure. ATHR-003 (forbidden) maps to 403, the rest to 401."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(code, message)
        self.status_code = 403 if code == "ATHR-003" else 401

    @classmethod
    def not_signed_in(cls) -> AuthorizationFailedError:
        return cls("ATHR-001", "User has not signed in")

    @classmethod
    def signed_out(cls, action: str) -> AuthorizationFailedError:
        return cls("ATHR-002", f"User is signed out.Sign in first to {action}")

    @classmethod
    def forbidden(cls, message: str) -> AuthorizationFailedError:
        return cls("ATHR-003", message)


class NotFoundError(ForumError):
    status_code = 404


class AnswerNotFoundError(NotFoundError):
    def __init__(self, message: str = "Entered answer uuid does not exist") -> None:
        super().__init__("ANS-001", message)


class InvalidQuestionError(NotFoundError):
    def __init__(self, message: str = "The question entered is invalid") -> None:
        super().__init__("QUES-001", message)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User with entered uuid does not exist") -> None:
        super().__init__("USR-001", message)


class SignUpRestrictedError(ForumError):
    status_code = 409

    @classmethod
    def duplicate_username(cls) -> SignUpRestrictedError:
        return cls("SGR-001", "Try any other Username, this Username has already been taken")

    @classmethod
    def duplicate_email(cls) -> SignUpRestrictedError:
        return cls("SGR-002", "This user has already been registered, try with any other emailId")


class SignOutRestrictedError(ForumError):
    status_code = 401

    def __init__(self, message: str = "User is not Signed in") -> None:
        super().__init__("SGR-001", message)


class ConflictError(ForumError):
    status_code = 409


# ---------------------------------------------------------------------------
# Session store signals
#
# Raised by UserStore.mark_logged_out(). They are storage-level outcomes, not
# client-facing codes: the sign-out path translates both into SGR-001.
# ---------------------------------------------------------------------------


class SessionNotFoundError(LookupError):
    pass


class AlreadyLoggedOutError(Exception):
    pass
