"""
test_fraud_rules.py — Core fraud rule engine tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from errors import ValidationError
from fraud_rules import evaluate_bet, parse_timestamp, triggered_rules

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _iso(dt):
    return dt.isoformat().replace("+00:00", "Z")


# ─── Legitimate requests ─────────────────────────────────────────────

def test_legit_bet_is_not_fraudulent(legit_bet):
    verdict = evaluate_bet(legit_bet, now=NOW)
    assert verdict.fraudulent is False
    assert verdict.category is None
    assert verdict.triggered == []


def test_recent_timestamp_is_legit(legit_bet):
    bet = {**legit_bet, "timestamp": _iso(NOW - timedelta(minutes=5))}
    assert evaluate_bet(bet, now=NOW).fraudulent is False


def test_extraneous_fields_are_ignored(legit_bet):
    bet = {**legit_bet, "sport": "football", "transactionId": "abc", "betType": "single"}
    assert evaluate_bet(bet, now=NOW).fraudulent is False


# ─── Single-rule triggers ────────────────────────────────────────────

@pytest.mark.parametrize("mutation,category,reason", [
    ({"amount": -50},                 "negative-amount",        "Invalid bet amount"),
    ({"amount": 0},                   "negative-amount",        "Invalid bet amount"),
    ({"odds": 25},                    "odds-manipulation",      "Suspicious odds manipulation"),
    ({"matchId": "M1-altered"},       "match-alteration",       "Match ID tampering detected"),
    ({"timestamp": _iso(NOW - timedelta(days=1))},
                                      "timestamp-manipulation", "Timestamp manipulation detected"),
    ({"serverBypass": True},          "request-tampering",      "Unauthorized request fields"),
    ({"adminApproval": True},         "request-tampering",      "Unauthorized request fields"),
])
def test_single_rule_triggers(legit_bet, mutation, category, reason):
    verdict = evaluate_bet({**legit_bet, **mutation}, now=NOW)
    assert verdict.fraudulent is True
    assert verdict.category == category
    assert verdict.reason == reason
    assert verdict.triggered == [category]


# ─── Boundaries ──────────────────────────────────────────────────────

@pytest.mark.parametrize("odds,fraudulent", [
    (20, False),
    (20.0, False),
    (20.01, True),
    ("25.0", True),
    ("19.99", False),
])
def test_odds_boundary(legit_bet, odds, fraudulent):
    assert evaluate_bet({**legit_bet, "odds": odds}, now=NOW).fraudulent is fraudulent


@pytest.mark.parametrize("amount,fraudulent", [
    (0.01, False),
    (0, True),
    ("-5", True),
    ("10", False),
])
def test_amount_boundary(legit_bet, amount, fraudulent):
    assert evaluate_bet({**legit_bet, "amount": amount}, now=NOW).fraudulent is fraudulent


@pytest.mark.parametrize("age,fraudulent", [
    (timedelta(minutes=59), False),
    (timedelta(minutes=61), True),
    (timedelta(hours=24), True),
    (timedelta(minutes=-10), False),   # future timestamps are not backdated
])
def test_timestamp_age_boundary(legit_bet, age, fraudulent):
    bet = {**legit_bet, "timestamp": _iso(NOW - age)}
    assert evaluate_bet(bet, now=NOW).fraudulent is fraudulent


def test_unparseable_timestamp_does_not_trigger(legit_bet):
    bet = {**legit_bet, "timestamp": "yesterday-ish"}
    assert evaluate_bet(bet, now=NOW).fraudulent is False


def test_naive_timestamp_is_read_as_utc():
    ts = parse_timestamp("2026-03-01T10:00:00")
    assert ts == datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)


def test_unauthorized_field_presence_counts_even_when_false(legit_bet):
    verdict = evaluate_bet({**legit_bet, "serverBypass": False}, now=NOW)
    assert verdict.category == "request-tampering"


def test_null_unauthorized_field_is_absent(legit_bet):
    assert evaluate_bet({**legit_bet, "adminApproval": None}, now=NOW).fraudulent is False


@pytest.mark.parametrize("field_name,value", [
    ("amount", "fifty"),
    ("odds", "evens"),
    ("amount", True),
    ("odds", [2.5]),
])
def test_non_numeric_fields_raise_validation_error(legit_bet, field_name, value):
    with pytest.raises(ValidationError):
        evaluate_bet({**legit_bet, field_name: value}, now=NOW)


# ─── Multi-match policy ──────────────────────────────────────────────

def test_triggered_rules_keeps_evaluation_order(legit_bet):
    bet = {**legit_bet, "amount": -1, "odds": 50, "matchId": "X-altered",
           "timestamp": _iso(NOW - timedelta(days=2)), "serverBypass": True}
    assert triggered_rules(bet, now=NOW) == [
        "negative-amount", "odds-manipulation", "match-alteration",
        "timestamp-manipulation", "request-tampering",
    ]


def test_last_policy_reports_last_triggered_rule(legit_bet):
    bet = {**legit_bet, "amount": -10, "odds": 30}
    verdict = evaluate_bet(bet, now=NOW, policy="last")
    assert verdict.category == "odds-manipulation"
    assert verdict.reason == "Suspicious odds manipulation"
    assert verdict.triggered == ["negative-amount", "odds-manipulation"]


def test_first_policy_reports_first_triggered_rule(legit_bet):
    bet = {**legit_bet, "amount": -10, "odds": 30}
    verdict = evaluate_bet(bet, now=NOW, policy="first")
    assert verdict.category == "negative-amount"
    assert verdict.triggered == ["negative-amount", "odds-manipulation"]


def test_default_policy_is_last(legit_bet):
    bet = {**legit_bet, "matchId": "M1-altered", "adminApproval": True}
    assert evaluate_bet(bet, now=NOW).category == "request-tampering"


def test_unknown_policy_rejected(legit_bet):
    with pytest.raises(ValueError):
        evaluate_bet(legit_bet, now=NOW, policy="most-severe")


def test_evaluation_is_pure(legit_bet):
    bet = {**legit_bet, "amount": -1}
    snapshot = dict(bet)
    first = evaluate_bet(bet, now=NOW)
    second = evaluate_bet(bet, now=NOW)
    assert first == second
    assert bet == snapshot
