"""
models.py — Domain records held by the in-memory stores.

Accounts, sessions, fraud flags and bets. Stores own these objects;
the API layer only ever sees the dict views produced here.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from config import FRAUD_ATTEMPT_FLAG


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(ts: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Account:
    """A registered player. Credentials are plaintext: this is a test double."""
    id: str
    username: str
    email: str
    password: str
    status: str = "active"
    created_at: datetime = field(default_factory=utcnow)
    profile: dict = field(default_factory=dict)

    @property
    def is_blocked(self) -> bool:
        return self.status == "blocked"

    def public_view(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "status": self.status,
        }


@dataclass
class Session:
    token: str
    account_id: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class FraudFlag:
    """Append-only audit record of a rejected bet request."""
    category: str
    reason: str
    data: dict
    type: str = FRAUD_ATTEMPT_FLAG
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "category": self.category,
            "reason": self.reason,
            "timestamp": isoformat(self.timestamp),
            "data": self.data,
        }


@dataclass(frozen=True)
class Bet:
    id: str
    account_id: str
    match_id: str
    selection: str
    odds: float
    amount: float
    sequence: int
    status: str = "pending"
    created_at: datetime = field(default_factory=utcnow)
    extra: Optional[dict] = None

    def public_view(self) -> dict:
        return {
            "id": self.id,
            "matchId": self.match_id,
            "selection": self.selection,
            "odds": self.odds,
            "amount": self.amount,
            "status": self.status,
        }

    def history_view(self) -> dict:
        d = self.public_view()
        d["createdAt"] = isoformat(self.created_at)
        return d
