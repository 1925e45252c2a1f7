"""
fraud_rules.py — Single authoritative fraud rule engine for BetGuard.

Pure and deterministic: no I/O, no store access. Imported by services.py
and by the tests that pin the rule semantics down.

Provides:
  - evaluate_bet(bet, now, policy) → Verdict
  - triggered_rules(bet, now) → list[str]
  - parse_number(value, field) → float
  - parse_timestamp(value) → datetime | None
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from config import (
    FRAUD_REASONS, MAX_ODDS, TAMPER_MARKER, TIMESTAMP_MAX_AGE_SECONDS,
    UNAUTHORIZED_FIELDS, RULE_MATCH_POLICY, RULE_MATCH_POLICIES,
)
from errors import ValidationError


# ─── Result dataclass ────────────────────────────────────────────────

@dataclass
class Verdict:
    """Result of evaluating one bet request."""
    fraudulent: bool
    category: Optional[str] = None
    reason: Optional[str] = None
    triggered: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "fraudulent": self.fraudulent,
            "category": self.category,
            "reason": self.reason,
            "triggered": self.triggered,
        }


# ─── Field coercion ──────────────────────────────────────────────────

def parse_number(value, field_name: str) -> float:
    """Coerce a numeric field the way clients send it (int, float or numeric string)."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}: expected a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}: expected a number")


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp. Naive values are UTC; garbage yields None."""
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


# ─── Rules ───────────────────────────────────────────────────────────

def _eval_negative_amount(bet: dict, now: datetime) -> bool:
    return parse_number(bet["amount"], "amount") <= 0


def _eval_odds_manipulation(bet: dict, now: datetime) -> bool:
    return parse_number(bet["odds"], "odds") > MAX_ODDS


def _eval_match_alteration(bet: dict, now: datetime) -> bool:
    return TAMPER_MARKER in str(bet["matchId"])


def _eval_timestamp_manipulation(bet: dict, now: datetime) -> bool:
    ts = parse_timestamp(bet.get("timestamp"))
    if ts is None:
        return False
    return ts < now - timedelta(seconds=TIMESTAMP_MAX_AGE_SECONDS)


def _eval_request_tampering(bet: dict, now: datetime) -> bool:
    return any(bet.get(f) is not None for f in UNAUTHORIZED_FIELDS)


# Evaluation order is significant, see evaluate_bet().
RULES = {
    "negative-amount":        _eval_negative_amount,
    "odds-manipulation":      _eval_odds_manipulation,
    "match-alteration":       _eval_match_alteration,
    "timestamp-manipulation": _eval_timestamp_manipulation,
    "request-tampering":      _eval_request_tampering,
}


def triggered_rules(bet: dict, now: Optional[datetime] = None) -> list:
    """Evaluate every rule. Returns triggered categories in evaluation order."""
    now = now or datetime.now(timezone.utc)
    return [name for name, func in RULES.items() if func(bet, now)]


# ─── Core evaluation ─────────────────────────────────────────────────

def evaluate_bet(bet: dict, now: Optional[datetime] = None,
                 policy: Optional[str] = None) -> Verdict:
    """
    Judge a bet request.

    Every rule is evaluated. With policy "last" (the default) the last
    triggered rule in evaluation order supplies the reported category and
    reason, matching clients that were written against a backend which
    reassigned the verdict on every match. With "first" the earliest
    triggered rule wins. `triggered` always lists every match.

    Raises ValidationError when amount or odds are not numeric.
    """
    policy = policy or RULE_MATCH_POLICY
    if policy not in RULE_MATCH_POLICIES:
        raise ValueError(f"Unknown rule match policy: {policy!r}")

    triggered = triggered_rules(bet, now)
    if not triggered:
        return Verdict(fraudulent=False)

    category = triggered[-1] if policy == "last" else triggered[0]
    return Verdict(
        fraudulent=True,
        category=category,
        reason=FRAUD_REASONS[category],
        triggered=triggered,
    )
