"""
services.py — Account, session and bet placement logic for BetGuard.

The API layer never touches the stores directly; it calls into
`BettingService`, which raises errors from errors.py for every
non-success outcome.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from config import (
    ACCOUNT_RESTRICTIONS, BET_FIELDS, FRAUD_ATTEMPT_FLAG, FRAUD_BLOCK_THRESHOLD,
    REGISTRATION_FIELDS, get_logger,
)
from errors import (
    AuthenticationError, AuthorizationError, ConflictError,
    FraudRejection, NotFoundError, ValidationError,
)
from fraud_rules import evaluate_bet, parse_number
from models import Account, Bet, FraudFlag, isoformat, utcnow
from stores import Backend

logger = get_logger("services")


@dataclass
class AuthResult:
    """A freshly minted session for an account."""
    account: Account
    token: str


def _missing(payload: dict, fields) -> list:
    """Fields that are absent, null or empty strings. Zero is a value."""
    return [f for f in fields if payload.get(f) is None or payload.get(f) == ""]


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Second word of an `Authorization: Bearer <token>` header, if any."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


class BettingService:
    """Registration, login, authentication, bet placement and status reporting."""

    def __init__(self, backend: Optional[Backend] = None,
                 block_threshold: int = FRAUD_BLOCK_THRESHOLD,
                 rule_policy: Optional[str] = None):
        self.backend = backend or Backend()
        self.block_threshold = block_threshold
        self.rule_policy = rule_policy

    # ─── Auth ────────────────────────────────────────────────────────

    def register(self, payload: dict) -> AuthResult:
        if _missing(payload, REGISTRATION_FIELDS):
            raise ValidationError("Missing required fields")

        profile = {k: v for k, v in payload.items() if k not in REGISTRATION_FIELDS}
        account = self.backend.accounts.create(
            username=payload["username"],
            email=payload["email"],
            password=payload["password"],
            profile=profile,
        )
        if account is None:
            raise ConflictError("Username or email already exists")

        token = self.backend.sessions.issue(account.id)
        logger.info("Registered account %s (%s)", account.id, account.username)
        return AuthResult(account=account, token=token)

    def login(self, payload: dict) -> AuthResult:
        account = self.backend.accounts.find_by_credentials(
            payload.get("username"), payload.get("password"),
        )
        if account is None:
            logger.info("Login failed for %r", payload.get("username"))
            raise AuthenticationError("Invalid credentials")
        if account.is_blocked:
            logger.warning("Login refused for blocked account %s", account.id)
            raise AuthorizationError.blocked()

        token = self.backend.sessions.issue(account.id)
        return AuthResult(account=account, token=token)

    def authenticate(self, authorization: Optional[str],
                     now: Optional[datetime] = None) -> str:
        """Resolve a bearer header to an account id."""
        token = extract_bearer_token(authorization)
        if token is None:
            raise AuthorizationError.missing_token()

        sessions = self.backend.sessions
        session = sessions.resolve(token)
        if session is None:
            raise AuthorizationError.invalid_token()
        if sessions.is_expired(session, now):
            sessions.invalidate(token)
            raise AuthorizationError.expired_token()
        return session.account_id

    # ─── Bets ────────────────────────────────────────────────────────

    def place_bet(self, account_id: str, payload: dict,
                  now: Optional[datetime] = None) -> Bet:
        """
        Validate, judge and then either flag or persist a bet request.

        Fraudulent requests never produce a Bet: they append a flag and,
        once the account holds `block_threshold` fraud-attempt flags, block
        it. The flag append, count and block happen under the account lock.
        """
        if _missing(payload, BET_FIELDS):
            raise ValidationError("Missing required bet information")

        verdict = evaluate_bet(payload, now=now, policy=self.rule_policy)
        accounts = self.backend.accounts

        if verdict.fraudulent:
            with accounts.lock_for(account_id):
                count = accounts.add_flag(account_id, FraudFlag(
                    category=verdict.category,
                    reason=verdict.reason,
                    data=dict(payload),
                ))
                if count >= self.block_threshold:
                    account = accounts.get(account_id)
                    if account is not None and not account.is_blocked:
                        accounts.set_status(account_id, "blocked")
                        logger.warning("Account %s blocked after %d fraud attempts",
                                       account_id, count)
            logger.info("Rejected bet from %s: %s (triggered=%s)",
                        account_id, verdict.category, verdict.triggered)
            raise FraudRejection(verdict.category, verdict.reason)

        account = accounts.get(account_id)
        if account is None:
            raise NotFoundError("User not found")
        if account.is_blocked:
            raise AuthorizationError.blocked()

        extra = {k: v for k, v in payload.items() if k not in BET_FIELDS}
        bet = self.backend.bets.create(
            account_id=account_id,
            match_id=str(payload["matchId"]),
            selection=str(payload["selection"]),
            odds=parse_number(payload["odds"], "odds"),
            amount=parse_number(payload["amount"], "amount"),
            extra=extra,
        )
        logger.info("Accepted bet %s for %s on %s", bet.id, account_id, bet.match_id)
        return bet

    def bet_history(self, account_id: str) -> list:
        return [b.history_view() for b in self.backend.bets.for_account(account_id)]

    # ─── Account status ──────────────────────────────────────────────

    def account_status(self, account_id: str) -> dict:
        account = self.backend.accounts.get(account_id)
        if account is None:
            raise NotFoundError("User not found")

        flags = self.backend.accounts.flags(account_id)
        fraud_warnings = sum(1 for f in flags if f.type == FRAUD_ATTEMPT_FLAG)
        return {
            "accountId": account.id,
            "status": account.status,
            "flags": [f.to_dict() for f in flags],
            "restrictions": list(ACCOUNT_RESTRICTIONS) if fraud_warnings else [],
            "verificationStatus": "rejected" if account.is_blocked else "verified",
            "fraudWarnings": fraud_warnings,
            "lastUpdated": isoformat(utcnow()),
        }
