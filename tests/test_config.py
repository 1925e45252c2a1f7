"""
test_config.py — Configuration integrity tests.
"""
from config import (
    FRAUD_BLOCK_THRESHOLD, FRAUD_REASONS, FRAUD_TYPES, RULE_MATCH_POLICIES,
    RULE_MATCH_POLICY, SESSION_TTL_SECONDS, TAMPER_MARKER,
)
from fraud_rules import RULES


def test_every_fraud_type_has_a_reason():
    assert set(FRAUD_REASONS) == set(FRAUD_TYPES)


def test_rule_table_follows_fraud_type_order():
    assert list(RULES) == FRAUD_TYPES


def test_default_policy_is_valid():
    assert RULE_MATCH_POLICY in RULE_MATCH_POLICIES


def test_defaults():
    assert FRAUD_BLOCK_THRESHOLD == 3
    assert SESSION_TTL_SECONDS == 0
    assert TAMPER_MARKER == "-altered"
