"""
fraud_scenario.py — CLI runner for the end-to-end fraud probe scenario.

Registers a synthetic player, logs in, places one legitimate bet, then
fires one probe per fraud category and checks that the backend rejected
them all, kept them out of bet history and flagged the account.

Usage:
    python fraud_scenario.py                     # against API_BASE_URL
    python fraud_scenario.py --base-url URL
    python fraud_scenario.py --in-process        # fresh in-memory app, no server
"""
import argparse
import sys
from dataclasses import dataclass, field

import httpx

from api_client import BettingApiClient
from config import API_BASE_URL, FRAUD_TYPES, get_logger
from generate_synthetic_data import (
    generate_bet_data, generate_login_credentials, generate_user_data,
)
from retry import with_retry

logger = get_logger("fraud_scenario")


@dataclass
class ScenarioReport:
    probes: list = field(default_factory=list)
    failures: list = field(default_factory=list)
    history: list = field(default_factory=list)
    account_status: dict = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.failures

    def check(self, condition: bool, message: str) -> None:
        if not condition:
            self.failures.append(message)
            logger.error("FAILED: %s", message)


def run_scenario(client: BettingApiClient) -> ScenarioReport:
    report = ScenarioReport()

    with_retry(client.health, {"operation": "health"}, retry_on=(httpx.HTTPError,))

    user = generate_user_data()
    client.register_user(user)
    logger.info("Registered test user %s", user["username"])

    login = client.login(generate_login_credentials(user))
    report.check(bool(login.get("token")), "login returned no token")

    bet = generate_bet_data()
    placed = client.place_bet(bet)
    report.check(placed["bet"]["status"] == "pending", "legitimate bet not pending")
    logger.info("Placed legitimate bet %s on %s", placed["betId"], bet["matchId"])

    for fraud_type in FRAUD_TYPES:
        result = client.place_fraudulent_bet(bet, fraud_type)
        report.probes.append(result)
        report.check(not result.success, f"{fraud_type}: fraudulent bet accepted")
        report.check(result.fraud_detected, f"{fraud_type}: fraud not detected")

    report.history = client.get_bet_history()
    report.check(len(report.history) == 1,
                 f"expected 1 bet in history, found {len(report.history)}")
    if report.history:
        report.check(report.history[0]["matchId"] == bet["matchId"],
                     "history does not contain the legitimate bet")

    report.account_status = client.get_account_status()
    status = report.account_status
    report.check(bool(status.get("flags")) or status.get("fraudWarnings", 0) > 0
                 or status.get("status") == "blocked",
                 "account neither flagged nor blocked")
    return report


def print_report(report: ScenarioReport) -> None:
    print("\n" + "=" * 60)
    print("FRAUD PROBE RESULTS")
    print("=" * 60)
    for p in report.probes:
        reported = p.error.get("fraudType") if isinstance(p.error, dict) else "-"
        mark = "DETECTED" if p.fraud_detected else "MISSED"
        print(f"  {p.fraud_type:<24} {mark:<9} status={p.status_code} reported={reported}")

    status = report.account_status
    print(f"\n  Bets in history:  {len(report.history)}")
    print(f"  Account status:   {status.get('status')}")
    print(f"  Fraud warnings:   {status.get('fraudWarnings')}")
    print(f"  Restrictions:     {', '.join(status.get('restrictions', [])) or 'none'}")
    print(f"\n  {'PASSED' if report.passed else 'FAILED'}"
          f" ({len(report.failures)} failed checks)")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the fraud probe scenario")
    parser.add_argument("--base-url", default=API_BASE_URL)
    parser.add_argument("--in-process", action="store_true",
                        help="run against a fresh in-memory app instead of a server")
    args = parser.parse_args(argv)

    if args.in_process:
        from fastapi.testclient import TestClient
        from api import create_app
        client = BettingApiClient(client=TestClient(create_app()))
    else:
        client = BettingApiClient(base_url=args.base_url)

    with client:
        report = run_scenario(client)
    print_report(report)
    return 0 if report.passed else 1


if __name__ == "__main__":
    sys.exit(main())
