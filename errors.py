"""
errors.py — Error taxonomy for the BetGuard backend.

Every error carries an HTTP status, a stable machine-readable `code`
and a human-readable message. The API gateway renders them all through
a single exception handler; nothing here is retried server-side.
"""


class BetGuardError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code = 500
    code = "internal-error"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(BetGuardError):
    """Missing or malformed request fields."""
    status_code = 400
    code = "validation-error"


class ConflictError(BetGuardError):
    """Duplicate username or email."""
    status_code = 409
    code = "conflict"


class AuthenticationError(BetGuardError):
    """Bad credentials at login."""
    status_code = 401
    code = "invalid-credentials"


class AuthorizationError(BetGuardError):
    """Missing/invalid/expired token (401) or blocked account (403)."""
    status_code = 401
    code = "unauthorized"

    def __init__(self, message: str, code: str = None, status_code: int = None):
        super().__init__(message, code)
        if status_code:
            self.status_code = status_code

    @classmethod
    def missing_token(cls):
        return cls("Unauthorized: Missing token", "missing-token")

    @classmethod
    def invalid_token(cls):
        return cls("Unauthorized: Invalid token", "invalid-token")

    @classmethod
    def expired_token(cls):
        return cls("Unauthorized: Session expired", "expired-token")

    @classmethod
    def blocked(cls):
        return cls("Account is blocked", "account-blocked", status_code=403)


class FraudRejection(BetGuardError):
    """
    A bet request judged fraudulent by the rule engine.

    Not a system fault: an expected business outcome that the fraud
    probes assert on.
    """
    status_code = 400
    code = "fraud-detected"

    def __init__(self, category: str, reason: str):
        super().__init__(f"Fraud detected: {reason}")
        self.category = category
        self.reason = reason

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "fraudType": self.category,
            "details": self.message,
            "code": self.code,
        }


class NotFoundError(BetGuardError):
    """Unknown route or vanished account."""
    status_code = 404
    code = "not-found"
