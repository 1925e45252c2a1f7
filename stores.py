"""
stores.py — In-memory repositories for accounts, sessions and bets.

Each store is an explicitly constructed object; a fresh `Backend` gives a
clean slate, so tests never share state through module globals.
"""
from __future__ import annotations

import secrets
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from config import FRAUD_ATTEMPT_FLAG, SESSION_TTL_SECONDS, TOKEN_BYTES
from models import Account, Bet, FraudFlag, Session, utcnow


class AccountStore:
    """
    Accounts and their fraud flags.

    Username and email are unique across all accounts. Flag appends and
    status changes for one account are serialized through that account's
    lock (`lock_for`).
    """

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._flags: Dict[str, List[FraudFlag]] = {}
        self._lock = threading.Lock()
        self._account_locks: Dict[str, threading.RLock] = defaultdict(threading.RLock)

    def lock_for(self, account_id: str) -> threading.RLock:
        with self._lock:
            return self._account_locks[account_id]

    def create(self, username: str, email: str, password: str,
               profile: Optional[dict] = None) -> Optional[Account]:
        """Create an active account. Returns None if username or email is taken."""
        with self._lock:
            for acc in self._accounts.values():
                if acc.username == username or acc.email == email:
                    return None
            account = Account(
                id=uuid.uuid4().hex,
                username=username,
                email=email,
                password=password,
                profile=dict(profile or {}),
            )
            self._accounts[account.id] = account
            self._flags[account.id] = []
            return account

    def get(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def find_by_credentials(self, username: str, password: str) -> Optional[Account]:
        # Plaintext comparison; acceptable only in a test double.
        with self._lock:
            for acc in self._accounts.values():
                if acc.username == username and acc.password == password:
                    return acc
        return None

    def set_status(self, account_id: str, status: str) -> None:
        with self.lock_for(account_id):
            account = self._accounts.get(account_id)
            if account is not None:
                account.status = status

    def add_flag(self, account_id: str, flag: FraudFlag) -> int:
        """Append a flag. Returns the account's fraud-attempt flag count afterwards."""
        with self.lock_for(account_id):
            flags = self._flags.setdefault(account_id, [])
            flags.append(flag)
            return sum(1 for f in flags if f.type == FRAUD_ATTEMPT_FLAG)

    def flags(self, account_id: str) -> List[FraudFlag]:
        with self.lock_for(account_id):
            return list(self._flags.get(account_id, []))

    def fraud_attempt_count(self, account_id: str) -> int:
        return sum(1 for f in self.flags(account_id) if f.type == FRAUD_ATTEMPT_FLAG)

    def __len__(self) -> int:
        return len(self._accounts)


class SessionStore:
    """Bearer tokens → account ids. `ttl_seconds=0` means tokens never expire."""

    def __init__(self, ttl_seconds: int = SESSION_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def issue(self, account_id: str) -> str:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        with self._lock:
            self._sessions[token] = Session(token=token, account_id=account_id)
        return token

    def resolve(self, token: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(token)

    def is_expired(self, session: Session, now: Optional[datetime] = None) -> bool:
        if self.ttl_seconds <= 0:
            return False
        now = now or utcnow()
        return now - session.created_at >= timedelta(seconds=self.ttl_seconds)

    def invalidate(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def __len__(self) -> int:
        return len(self._sessions)


class BetStore:
    """Accepted bets, kept in creation order."""

    def __init__(self):
        self._bets: Dict[str, Bet] = {}
        self._sequence = 0
        self._lock = threading.Lock()

    def create(self, account_id: str, match_id: str, selection: str,
               odds: float, amount: float, extra: Optional[dict] = None) -> Bet:
        with self._lock:
            self._sequence += 1
            created_at = utcnow()
            millis = int(created_at.timestamp() * 1000)
            bet = Bet(
                id=f"BET-{millis}-{account_id[:5]}-{self._sequence}",
                account_id=account_id,
                match_id=match_id,
                selection=selection,
                odds=odds,
                amount=amount,
                sequence=self._sequence,
                created_at=created_at,
                extra=extra or None,
            )
            self._bets[bet.id] = bet
            return bet

    def for_account(self, account_id: str) -> List[Bet]:
        """Bets owned by the account, newest first."""
        with self._lock:
            owned = [b for b in self._bets.values() if b.account_id == account_id]
        return sorted(owned, key=lambda b: b.sequence, reverse=True)

    def __len__(self) -> int:
        return len(self._bets)


@dataclass
class Backend:
    """All backend state for one process (or one test)."""
    accounts: AccountStore = field(default_factory=AccountStore)
    sessions: SessionStore = field(default_factory=SessionStore)
    bets: BetStore = field(default_factory=BetStore)
